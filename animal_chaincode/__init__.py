"""
Animal ledger chaincode — package marker and public entrypoints.

A minimal smart contract that stores animal records in a ledger's world state
and reads them back by key or by key range. Persistence, ordering and
consensus belong to the ledger platform; this package only talks to the
per-transaction stub.

- new_chaincode() -> Chaincode
    Dispatcher bound to a fresh AnimalContract.
- AnimalContract, Animal, QueryResult
    The contract and its record types.
- MemoryStub, FileStub
    Development world states for local runs and tests.
"""

from __future__ import annotations

from .contract import Animal, AnimalContract, QueryResult
from .errors import ChaincodeError
from .shim import Chaincode, FileStub, MemoryStub, Response, TransactionContext
from .version import __version__


def new_chaincode() -> Chaincode:
    """Return a dispatcher bound to a fresh AnimalContract."""
    return Chaincode(AnimalContract())


__all__ = [
    "__version__",
    "new_chaincode",
    "Animal",
    "AnimalContract",
    "QueryResult",
    "Chaincode",
    "ChaincodeError",
    "Response",
    "TransactionContext",
    "MemoryStub",
    "FileStub",
]
