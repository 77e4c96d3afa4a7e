from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from animal_chaincode import new_chaincode
from animal_chaincode.errors import StateError
from animal_chaincode.shim import MemoryStub, StubAdapter, adapt_stub
from animal_chaincode.shim.stub import KV

from .conftest import record


class PascalStub:
    """Stub spelled the way Go-style SDKs spell it."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self.closed = 0

    def GetState(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def PutState(self, key: str, value: bytes) -> None:
        self.data[key] = value

    def GetStateByRange(self, start: str, end: str):
        stub = self
        rows = [SimpleNamespace(Key=k, Value=v) for k, v in sorted(self.data.items()) if start <= k < end]

        class _It:
            def HasNext(self) -> bool:
                return bool(rows)

            def Next(self):
                return rows.pop(0)

            def Close(self) -> None:
                stub.closed += 1

        return _It()


class CamelStub:
    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def getState(self, key: str):
        return self.data.get(key)

    def putState(self, key: str, value: bytes) -> None:
        self.data[key] = value.decode("utf-8")

    def getStateByRange(self, start: str, end: str) -> List[tuple]:
        return [(k, v) for k, v in sorted(self.data.items()) if start <= k < end]


def test_pascal_case_stub_runs_the_contract() -> None:
    target = PascalStub()
    cc = new_chaincode()
    assert cc.invoke(target, "InitLedger").ok
    assert target.data["ANIMAL1"] == record("Europe", "Cow", "brown")

    resp = cc.invoke(target, "QueryAllAnimals")
    assert resp.ok
    assert b'"Key":"ANIMAL2"' in resp.payload
    assert target.closed == 1


def test_camel_case_stub_with_str_values() -> None:
    target = CamelStub()
    cc = new_chaincode()
    cc.invoke(target, "CreateAnimal", ["ANIMAL4", "Asia", "Yak", "black"])
    assert target.data["ANIMAL4"] == '{"origin":"Asia","name":"Yak","colour":"black"}'
    resp = cc.invoke(target, "QueryAnimal", ["ANIMAL4"])
    assert resp.payload == record("Asia", "Yak", "black")
    assert b"Yak" in cc.invoke(target, "QueryAllAnimals").payload


def test_missing_capability_raises_state_error() -> None:
    adapter = StubAdapter(SimpleNamespace(get_state=lambda k: None))
    assert adapter.get_state("k") is None
    with pytest.raises(StateError, match="does not support put_state"):
        adapter.put_state("k", b"v")


def test_missing_capability_through_dispatcher() -> None:
    resp = new_chaincode().invoke(SimpleNamespace(), "CreateAnimal", ["k", "a", "b", "c"])
    assert not resp.ok
    assert "does not support put_state" in resp.message


def test_non_bytes_value_is_rejected() -> None:
    adapter = StubAdapter(SimpleNamespace(get_state=lambda k: 12))
    with pytest.raises(StateError):
        adapter.get_state("k")


def test_iterable_range_results() -> None:
    rows = [("a", b"1"), SimpleNamespace(key="b", value=b"2"), KV("c", b"3")]
    adapter = StubAdapter(SimpleNamespace(get_state_by_range=lambda s, e: iter(rows)))
    with adapter.get_state_by_range("", "") as it:
        assert [kv for kv in it] == [KV("a", b"1"), KV("b", b"2"), KV("c", b"3")]
    assert it.closed
    with pytest.raises(StateError):
        it.next()


def test_non_iterable_range_result() -> None:
    adapter = StubAdapter(SimpleNamespace(get_state_by_range=lambda s, e: 5))
    with pytest.raises(StateError, match="not iterable"):
        adapter.get_state_by_range("", "")


def test_adapt_stub_passes_native_stubs_through() -> None:
    native = MemoryStub()
    assert adapt_stub(native) is native
    foreign = PascalStub()
    wrapped = adapt_stub(foreign)
    assert isinstance(wrapped, StubAdapter)
    assert adapt_stub(wrapped) is wrapped


def test_journal_is_forwarded_when_present() -> None:
    calls: List[str] = []
    target = SimpleNamespace(
        begin=lambda: calls.append("begin"),
        commit=lambda: calls.append("commit"),
        rollback=lambda: calls.append("rollback"),
        PutState=lambda k, v: None,
    )
    cc = new_chaincode()
    cc.invoke(target, "CreateAnimal", ["k", "a", "b", "c"])
    cc.invoke(target, "QueryAnimal", ["k"])
    assert calls == ["begin", "commit", "begin", "rollback"]
