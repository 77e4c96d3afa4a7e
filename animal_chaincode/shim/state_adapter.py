"""
animal_chaincode.shim.state_adapter
-----------------------------------

Bridge that lets the contract run against a stub object that was not written
for this package: a peer SDK's stub, a test double, or a thin wrapper around
some other key/value service.

Design goals
============
- Duck-typed: adapts to a variety of stub shapes by probing for common method
  names (snake_case, PascalCase and camelCase spellings).
- Strict: a missing capability raises StateError at call time instead of
  silently degrading; the contract depends on all three operations.
- Non-invasive: objects that already satisfy ChaincodeStub are returned as-is
  by ``adapt_stub``.

What we look for on the provided object
=======================================
  - reads:   get_state, GetState, getState
  - writes:  put_state, PutState, putState
  - ranges:  get_state_by_range, GetStateByRange, getStateByRange

Range results may come back as:
  - an iterator object with has_next/HasNext/hasNext + next/Next and an
    optional close/Close;
  - any Python iterable of (key, value) pairs or of objects with key/value
    (or Key/Value) attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..errors import StateError
from .stub import KV, ChaincodeStub, StateQueryIterator

_GET_NAMES = ["get_state", "GetState", "getState"]
_PUT_NAMES = ["put_state", "PutState", "putState"]
_RANGE_NAMES = ["get_state_by_range", "GetStateByRange", "getStateByRange"]


# --------------------------------------------------------------------------- #
# Utilities                                                                   #
# --------------------------------------------------------------------------- #


def _first_attr(obj: Any, candidates: List[str]) -> Optional[Callable[..., Any]]:
    """Return the first callable attribute or None."""
    for name in candidates:
        fn = getattr(obj, name, None)
        if callable(fn):
            return fn
    return None


def _require(obj: Any, candidates: List[str], what: str) -> Callable[..., Any]:
    fn = _first_attr(obj, candidates)
    if fn is None:
        raise StateError(
            f"stub {type(obj).__name__} does not support {what}",
            context={"probed": list(candidates)},
        )
    return fn


def _as_bytes(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise StateError(f"stub returned a {type(value).__name__} value, expected bytes")


def _to_kv(row: Any) -> KV:
    if isinstance(row, KV):
        return row
    if isinstance(row, (tuple, list)) and len(row) == 2:
        key, value = row
    else:
        key = getattr(row, "key", getattr(row, "Key", None))
        value = getattr(row, "value", getattr(row, "Value", None))
        if key is None:
            raise StateError(f"cannot read a key from range row of type {type(row).__name__}")
    return KV(str(key), _as_bytes(value) or b"")


# --------------------------------------------------------------------------- #
# Iterator adapter                                                            #
# --------------------------------------------------------------------------- #


class ForeignIterator(StateQueryIterator):
    """
    StateQueryIterator over a foreign result object. Rows are pulled lazily so
    errors raised by the foreign ``next`` surface at the point of iteration.
    """

    def __init__(self, target: Any) -> None:
        super().__init__([])
        self._target = target
        self._has_next = _first_attr(target, ["has_next", "HasNext", "hasNext"])
        self._next = _first_attr(target, ["next", "Next"])
        self._close = _first_attr(target, ["close", "Close"])
        self._iter = None
        self._peeked: List[Any] = []
        if self._has_next is None or self._next is None:
            try:
                self._iter = iter(target)
            except TypeError as e:
                raise StateError(
                    f"range result of type {type(target).__name__} is not iterable"
                ) from e

    def has_next(self) -> bool:
        if self.closed:
            return False
        if self._iter is None:
            return bool(self._has_next())
        if self._peeked:
            return True
        try:
            self._peeked.append(next(self._iter))
        except StopIteration:
            return False
        return True

    def next(self) -> KV:
        if self.closed:
            raise StateError("range iterator is closed")
        if self._iter is None:
            return _to_kv(self._next())
        if not self.has_next():
            raise StateError("range iterator exhausted")
        return _to_kv(self._peeked.pop())

    def close(self) -> None:
        if not self.closed and self._close is not None:
            self._close()
        super().close()


# --------------------------------------------------------------------------- #
# Stub adapter                                                                #
# --------------------------------------------------------------------------- #


@dataclass
class StubAdapter:
    """
    Thin adapter that presents the ChaincodeStub API around a provided object.

    Transaction journaling (begin_tx/commit_tx/rollback_tx) is forwarded when
    the target has it and is a no-op otherwise.
    """

    target: Any

    def get_state(self, key: str) -> Optional[bytes]:
        return _as_bytes(_require(self.target, _GET_NAMES, "get_state")(key))

    def put_state(self, key: str, value: bytes) -> None:
        _require(self.target, _PUT_NAMES, "put_state")(key, bytes(value))

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        out = _require(self.target, _RANGE_NAMES, "get_state_by_range")(start_key, end_key)
        if isinstance(out, StateQueryIterator):
            return out
        return ForeignIterator(out)

    def begin_tx(self) -> None:
        fn = _first_attr(self.target, ["begin_tx", "begin"])
        if fn:
            fn()

    def commit_tx(self) -> None:
        fn = _first_attr(self.target, ["commit_tx", "commit"])
        if fn:
            fn()

    def rollback_tx(self) -> None:
        fn = _first_attr(self.target, ["rollback_tx", "rollback"])
        if fn:
            fn()


def adapt_stub(obj: Any) -> ChaincodeStub:
    """
    Return ``obj`` unchanged if it already satisfies ChaincodeStub, otherwise
    wrap it in a StubAdapter.
    """
    if isinstance(obj, (StubAdapter, ChaincodeStub)):
        return obj
    return StubAdapter(obj)


__all__ = ["StubAdapter", "ForeignIterator", "adapt_stub"]
