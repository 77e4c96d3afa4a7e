"""
animal_chaincode.config — key layout, state caps and local-runner defaults.

Configuration precedence:
  1) Environment variables (ANIMAL_CC_*)
  2) Hardcoded defaults below

Key env vars:
  - ANIMAL_CC_KEY_PREFIX       (str)  default: ANIMAL
  - ANIMAL_CC_RANGE_START      (str)  default: ANIMAL0
  - ANIMAL_CC_RANGE_END        (str)  default: ANIMAL99
  - ANIMAL_CC_MAX_KEY_BYTES    (int)  default: 256
  - ANIMAL_CC_MAX_VALUE_BYTES  (int)  default: 131_072   (128 KiB)
  - ANIMAL_CC_STATE_FILE       (path) default: .animal-cc-state.json
  - ANIMAL_CC_CHANNEL          (str)  default: mychannel

Numeric values out of bounds are clamped; unparsable values fall back to the
default.

Usage:
    from animal_chaincode.config import load_config
    cfg = load_config()
    cfg.range_start, cfg.range_end
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

DEFAULT_KEY_PREFIX = "ANIMAL"
DEFAULT_RANGE_START = "ANIMAL0"
DEFAULT_RANGE_END = "ANIMAL99"
DEFAULT_STATE_FILE = ".animal-cc-state.json"
DEFAULT_CHANNEL = "mychannel"


# ----------------------------- helpers ---------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class ChaincodeConfig:
    # Key layout
    key_prefix: str
    range_start: str
    range_end: str

    # State caps (enforced by the development stubs)
    max_key_bytes: int
    max_value_bytes: int

    # Local runner
    state_file: Path
    channel_id: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "key_prefix": self.key_prefix,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "max_key_bytes": self.max_key_bytes,
            "max_value_bytes": self.max_value_bytes,
            "state_file": str(self.state_file),
            "channel_id": self.channel_id,
        }


@lru_cache(maxsize=1)
def load_config() -> ChaincodeConfig:
    """
    Build and cache a ChaincodeConfig from environment + defaults.
    Call ``load_config.cache_clear()`` to pick up environment changes.
    """
    return ChaincodeConfig(
        key_prefix=_env_str("ANIMAL_CC_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        range_start=_env_str("ANIMAL_CC_RANGE_START", DEFAULT_RANGE_START),
        range_end=_env_str("ANIMAL_CC_RANGE_END", DEFAULT_RANGE_END),
        max_key_bytes=_env_int("ANIMAL_CC_MAX_KEY_BYTES", 256, min_v=1, max_v=4096),
        max_value_bytes=_env_int(
            "ANIMAL_CC_MAX_VALUE_BYTES", 131_072, min_v=64, max_v=16 * 1024 * 1024
        ),
        state_file=Path(_env_str("ANIMAL_CC_STATE_FILE", DEFAULT_STATE_FILE)).expanduser(),
        channel_id=_env_str("ANIMAL_CC_CHANNEL", DEFAULT_CHANNEL),
    )


__all__ = [
    "ChaincodeConfig",
    "load_config",
    "DEFAULT_KEY_PREFIX",
    "DEFAULT_RANGE_START",
    "DEFAULT_RANGE_END",
    "DEFAULT_STATE_FILE",
    "DEFAULT_CHANNEL",
]
