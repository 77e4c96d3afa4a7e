"""animal_chaincode.version — package version string.

Resolution order:
  1) ANIMAL_CC_VERSION environment override
  2) installed distribution metadata ("animal-chaincode")
  3) BASE_VERSION
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

BASE_VERSION = "0.1.0"
DIST_NAME = "animal-chaincode"


@lru_cache(maxsize=1)
def compute_version() -> str:
    env = os.getenv("ANIMAL_CC_VERSION")
    if env:
        return env.strip()
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
