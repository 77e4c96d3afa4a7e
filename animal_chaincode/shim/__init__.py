"""
Animal chaincode — shim package

The boundary between the contract and the ledger platform: the world-state
stub interface, the per-transaction context and the dispatcher that turns a
(function, args) invocation into a Response.

Convenience re-exports live here so callers can do:

    from animal_chaincode.shim import Chaincode, MemoryStub, TransactionContext
"""

from __future__ import annotations

from .chaincode import ERROR, OK, SYSTEM_METADATA_FN, Chaincode, Response
from .context import TransactionContext
from .state_adapter import StubAdapter, adapt_stub
from .stub import KV, ChaincodeStub, FileStub, MemoryStub, StateQueryIterator

__all__ = [
    "Chaincode",
    "Response",
    "OK",
    "ERROR",
    "SYSTEM_METADATA_FN",
    "TransactionContext",
    "ChaincodeStub",
    "StateQueryIterator",
    "KV",
    "MemoryStub",
    "FileStub",
    "StubAdapter",
    "adapt_stub",
]
