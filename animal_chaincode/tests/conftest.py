# -*- coding: utf-8 -*-
"""
animal_chaincode.tests.conftest
===============================

Pytest fixtures for the animal contract and its shim.

Goals:
- Give every test a clean configuration (no ANIMAL_CC_* leakage, fresh
  ``load_config`` cache).
- Provide an in-memory world state, a transaction context bound to it, the
  contract and a dispatcher.
- Offer a stub that fails on demand so error propagation can be asserted
  without a ledger network.

Usage (inside a test file):
    def test_seed(ctx, contract, stub):
        contract.init_ledger(ctx)
        assert "ANIMAL0" in stub
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

import pytest

from animal_chaincode.config import load_config
from animal_chaincode.contract import AnimalContract
from animal_chaincode.shim import Chaincode, MemoryStub, StateQueryIterator, TransactionContext
from animal_chaincode.shim.stub import KV

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("TZ", "UTC")


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ANIMAL_CC_"):
            monkeypatch.delenv(key, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


# --- failing stub -------------------------------------------------------------


class StubFailure(Exception):
    """Error raised by FailingStub, standing in for a platform error value."""


class _FailingIterator(StateQueryIterator):
    def __init__(self, rows: List[KV], fail_at: Optional[int]) -> None:
        super().__init__(rows)
        self._fail_at = fail_at
        self._served = 0
        self.close_calls = 0

    def next(self) -> KV:
        if self._fail_at is not None and self._served == self._fail_at:
            raise StubFailure("iterator broke")
        self._served += 1
        return super().next()

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class FailingStub(MemoryStub):
    """
    MemoryStub that raises StubFailure on selected operations.

    fail_get:         every get_state raises
    fail_put_keys:    put_state raises for these keys
    fail_range:       get_state_by_range raises
    fail_next_at:     the range iterator raises on the N-th next() (0-based)
    """

    def __init__(
        self,
        initial: Optional[Dict[str, bytes]] = None,
        *,
        fail_get: bool = False,
        fail_put_keys: tuple = (),
        fail_range: bool = False,
        fail_next_at: Optional[int] = None,
    ) -> None:
        super().__init__(initial)
        self.fail_get = fail_get
        self.fail_put_keys = set(fail_put_keys)
        self.fail_range = fail_range
        self.fail_next_at = fail_next_at
        self.puts: List[str] = []
        self.iterators: List[_FailingIterator] = []

    def get_state(self, key: str) -> Optional[bytes]:
        if self.fail_get:
            raise StubFailure("ledger unavailable")
        return super().get_state(key)

    def put_state(self, key: str, value: bytes) -> None:
        if key in self.fail_put_keys:
            raise StubFailure(f"write rejected for {key}")
        self.puts.append(key)
        super().put_state(key, value)

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        if self.fail_range:
            raise StubFailure("range query refused")
        rows = list(super().get_state_by_range(start_key, end_key))
        it = _FailingIterator(rows, self.fail_next_at)
        self.iterators.append(it)
        return it


# --- fixtures ----------------------------------------------------------------


def record(origin: str, name: str, colour: str) -> bytes:
    return json.dumps(
        {"origin": origin, "name": name, "colour": colour}, separators=(",", ":")
    ).encode("utf-8")


@pytest.fixture
def stub() -> MemoryStub:
    return MemoryStub()


@pytest.fixture
def ctx(stub: MemoryStub) -> TransactionContext:
    return TransactionContext(stub=stub, tx_id="tx-test", channel_id="testchannel", timestamp=0)


@pytest.fixture
def contract() -> AnimalContract:
    return AnimalContract()


@pytest.fixture
def chaincode(contract: AnimalContract) -> Chaincode:
    return Chaincode(contract)


@pytest.fixture
def seeded(ctx: TransactionContext, contract: AnimalContract, stub: MemoryStub) -> MemoryStub:
    contract.init_ledger(ctx)
    return stub


@pytest.fixture
def failing_ctx():
    """Factory: failing_ctx(**FailingStub kwargs) -> (ctx, stub)."""

    def _make(initial: Optional[Dict[str, bytes]] = None, **kwargs: Any):
        s = FailingStub(initial, **kwargs)
        return TransactionContext(stub=s, tx_id="tx-fail"), s

    return _make
