"""
animal_chaincode.shim.stub — the world-state boundary seen by the contract.

The ledger platform hands every transaction a *stub*: a narrow key/value and
range-query service over the world state. The contract never touches a state
database directly; it only calls the three methods below.

Stub API (ChaincodeStub)
------------------------
- get_state(key: str) -> Optional[bytes]
- put_state(key: str, value: bytes) -> None
- get_state_by_range(start_key: str, end_key: str) -> StateQueryIterator

Range semantics follow the platform: lexicographic ``start <= key < end``,
and an empty bound means "unbounded" on that side.

Development stubs
-----------------
- MemoryStub: thread-safe in-memory world state with optional per-thread
  write sets (begin_tx / commit_tx / rollback_tx).
- FileStub: MemoryStub whose committed state lives in a JSON file, used by the
  local CLI runner.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Union, runtime_checkable

from ..config import load_config
from ..errors import StateError, ValidationError

log = logging.getLogger(__name__)

# Keys starting with U+0000 belong to the composite-key namespace.
COMPOSITE_KEY_NAMESPACE = "\x00"


# ------------------------------- results ---------------------------------- #


@dataclass(frozen=True)
class KV:
    """One (key, value) row returned by a range query."""

    key: str
    value: bytes


class StateQueryIterator:
    """
    Iterator over range-query results.

    Supports the platform's explicit protocol (``has_next`` / ``next`` /
    ``close``) as well as Python iteration and ``with`` blocks. Once closed,
    the iterator yields nothing further.
    """

    def __init__(self, rows: Sequence[KV]) -> None:
        self._rows: List[KV] = list(rows)
        self._pos = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def has_next(self) -> bool:
        return not self._closed and self._pos < len(self._rows)

    def next(self) -> KV:
        if self._closed:
            raise StateError("range iterator is closed")
        if self._pos >= len(self._rows):
            raise StateError("range iterator exhausted")
        row = self._rows[self._pos]
        self._pos += 1
        return row

    def close(self) -> None:
        self._closed = True

    def __iter__(self) -> Iterator[KV]:
        while self.has_next():
            yield self.next()

    def __enter__(self) -> "StateQueryIterator":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ----------------------------- stub protocol ------------------------------ #


@runtime_checkable
class ChaincodeStub(Protocol):
    """Minimal world-state interface handed to each transaction."""

    def get_state(self, key: str) -> Optional[bytes]: ...
    def put_state(self, key: str, value: bytes) -> None: ...
    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator: ...


# --------------------------- validation helpers --------------------------- #


def check_key(key: str, *, max_bytes: Optional[int] = None) -> None:
    if not isinstance(key, str):
        raise ValidationError(f"state key must be str, got {type(key).__name__}")
    if not key:
        raise ValidationError("state key must be non-empty")
    if key.startswith(COMPOSITE_KEY_NAMESPACE):
        raise ValidationError(
            "state key must not start with U+0000 (composite-key namespace)",
            context={"key": key},
        )
    limit = max_bytes if max_bytes is not None else load_config().max_key_bytes
    if len(key.encode("utf-8")) > limit:
        raise ValidationError(f"state key too long (>{limit} bytes)", context={"key": key})


def check_value(value: bytes, *, max_bytes: Optional[int] = None) -> None:
    if not isinstance(value, (bytes, bytearray)):
        raise ValidationError(f"state value must be bytes, got {type(value).__name__}")
    limit = max_bytes if max_bytes is not None else load_config().max_value_bytes
    if len(value) > limit:
        raise ValidationError(f"state value too large (>{limit} bytes)")


def _check_range_bound(name: str, bound: str) -> None:
    if not isinstance(bound, str):
        raise ValidationError(f"{name} must be str, got {type(bound).__name__}")
    if bound.startswith(COMPOSITE_KEY_NAMESPACE):
        raise ValidationError(f"{name} must not start with U+0000 (composite-key namespace)")


def in_range(key: str, start_key: str, end_key: str) -> bool:
    """Lexicographic ``start <= key < end``; empty bounds are open."""
    if start_key and key < start_key:
        return False
    if end_key and key >= end_key:
        return False
    return True


# ------------------------------ memory stub ------------------------------- #


class MemoryStub:
    """
    Thread-safe in-memory world state for local runs and tests.

    Outside a transaction, ``put_state`` writes straight to committed state.
    Between ``begin_tx()`` and ``commit_tx()``/``rollback_tx()`` writes are
    buffered in a write set and reads (including ranges) see committed state
    only, as on the ledger platform.

    Write sets are per thread, so one stub can serve concurrent transactions.
    A commit applies its write set under the stub lock; a commit that fails
    discards the write set and leaves committed state unchanged.
    """

    def __init__(
        self,
        initial: Optional[Dict[str, bytes]] = None,
        *,
        max_key_bytes: Optional[int] = None,
        max_value_bytes: Optional[int] = None,
    ) -> None:
        cfg = load_config()
        self.max_key_bytes = max_key_bytes if max_key_bytes is not None else cfg.max_key_bytes
        self.max_value_bytes = (
            max_value_bytes if max_value_bytes is not None else cfg.max_value_bytes
        )
        self._state: Dict[str, bytes] = {}
        self._local = threading.local()
        self._lock = threading.RLock()
        self._tx_counter = itertools.count(1)
        for k, v in (initial or {}).items():
            self._validate(k, v)
            self._state[k] = bytes(v)

    def _validate(self, key: str, value: bytes) -> None:
        check_key(key, max_bytes=self.max_key_bytes)
        check_value(value, max_bytes=self.max_value_bytes)

    def _write_set(self) -> Optional[Dict[str, bytes]]:
        return getattr(self._local, "write_set", None)

    def _apply(self, writes: Dict[str, bytes]) -> None:
        with self._lock:
            self._state.update(writes)

    # ---- stub API ---- #

    def get_state(self, key: str) -> Optional[bytes]:
        check_key(key, max_bytes=self.max_key_bytes)
        with self._lock:
            return self._state.get(key)

    def put_state(self, key: str, value: bytes) -> None:
        self._validate(key, value)
        write_set = self._write_set()
        if write_set is not None:
            write_set[key] = bytes(value)
        else:
            self._apply({key: bytes(value)})

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        _check_range_bound("start_key", start_key)
        _check_range_bound("end_key", end_key)
        with self._lock:
            rows = [
                KV(k, v) for k, v in sorted(self._state.items()) if in_range(k, start_key, end_key)
            ]
        return StateQueryIterator(rows)

    # ---- transaction journal ---- #

    @property
    def in_tx(self) -> bool:
        """True while the calling thread has an open transaction."""
        return self._write_set() is not None

    def next_tx_id(self) -> str:
        with self._lock:
            return f"tx-{next(self._tx_counter):08d}"

    def begin_tx(self) -> None:
        if self._write_set() is not None:
            raise StateError("transaction already open")
        self._local.write_set = {}

    def commit_tx(self) -> None:
        write_set = self._write_set()
        if write_set is None:
            raise StateError("no open transaction")
        self._local.write_set = None
        self._apply(write_set)
        log.debug("write set committed", extra={"writes": len(write_set)})

    def rollback_tx(self) -> None:
        write_set = self._write_set()
        if write_set is not None:
            log.debug("write set discarded", extra={"writes": len(write_set)})
        self._local.write_set = None

    # ---- views ---- #

    def snapshot(self) -> Dict[str, bytes]:
        with self._lock:
            return dict(self._state)

    def __len__(self) -> int:
        with self._lock:
            return len(self._state)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._state


# ------------------------------- file stub -------------------------------- #


def _to_hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


def _from_hex(s: str) -> bytes:
    h = s[2:] if s.startswith(("0x", "0X")) else s
    return bytes.fromhex(h)


class FileStub(MemoryStub):
    """
    MemoryStub persisted to a JSON file of ``{"key": "0x<hex value>"}``.

    Committed state is loaded on construction. Every commit and direct write
    is written to the file first (atomically, via a temp file + rename) and
    reaches memory only once the file is in place.
    """

    def __init__(self, path: Union[str, Path], **kwargs) -> None:
        self.path = Path(path)
        super().__init__(self._load(self.path), **kwargs)

    @staticmethod
    def _load(path: Path) -> Dict[str, bytes]:
        if not path.exists():
            return {}
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise StateError(f"cannot read state file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise StateError(f"state file {path} must hold a JSON object")
        try:
            return {str(k): _from_hex(str(v)) for k, v in raw.items()}
        except ValueError as e:
            raise StateError(f"state file {path} holds a non-hex value: {e}") from e

    def _write(self, state: Dict[str, bytes]) -> None:
        data = {k: _to_hex(v) for k, v in sorted(state.items())}
        tmp: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".state-", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp, self.path)
        except OSError as e:
            if tmp is not None and os.path.exists(tmp):
                os.unlink(tmp)
            raise StateError(
                f"cannot write state file {self.path}: {e}", context={"path": str(self.path)}
            ) from e

    def _apply(self, writes: Dict[str, bytes]) -> None:
        with self._lock:
            merged = dict(self._state)
            merged.update(writes)
            self._write(merged)
            self._state.update(writes)


__all__ = [
    "COMPOSITE_KEY_NAMESPACE",
    "KV",
    "StateQueryIterator",
    "ChaincodeStub",
    "MemoryStub",
    "FileStub",
    "check_key",
    "check_value",
    "in_range",
]
