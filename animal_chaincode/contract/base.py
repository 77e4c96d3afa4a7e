"""
animal_chaincode.contract.base — contract base class and transaction registry.

A contract is a class whose transaction functions are marked with the
``@transaction`` decorator. Each transaction function receives the
TransactionContext as its first argument after ``self``, followed by the
string arguments of the invocation:

    class Counter(Contract):
        @transaction(name="Get", submit=False)
        def get(self, ctx, key): ...

Registration happens once, at class creation, in declaration order (base
classes first). The dispatcher (shim.chaincode) resolves names against
``transactions()``; ``metadata()`` describes the same table for clients.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Union

_TX_ATTR = "__chaincode_tx__"


@dataclass(frozen=True)
class TransactionInfo:
    name: str
    method_name: str
    params: Tuple[str, ...]
    submit: bool

    @property
    def tag(self) -> str:
        return "submit" if self.submit else "evaluate"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [{"name": p, "schema": {"type": "string"}} for p in self.params],
            "tag": [self.tag],
        }


def transaction(
    name: Union[str, Callable[..., Any], None] = None, *, submit: bool = True
) -> Any:
    """
    Mark a contract method as a transaction function. Usable bare
    (``@transaction``) or with arguments (``@transaction(name=..., submit=...)``).

    name:   externally visible function name (defaults to the method name)
    submit: True for transactions that write state, False for read-only
            (evaluate) transactions
    """
    if callable(name):
        return transaction()(name)
    if name is not None and not isinstance(name, str):
        raise TypeError(f"transaction name must be str, got {type(name).__name__}")

    def _wrap(fn: Callable[..., Any]) -> Callable[..., Any]:
        sig = inspect.signature(fn)
        params = list(sig.parameters.values())
        # Drop self and ctx.
        if len(params) < 2:
            raise TypeError(f"transaction {fn.__name__} must accept (self, ctx, ...)")
        for p in params[2:]:
            if p.kind not in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
                raise TypeError(f"transaction {fn.__name__}: parameter '{p.name}' must be positional")
        setattr(fn, _TX_ATTR, (name or fn.__name__, tuple(p.name for p in params[2:]), submit))
        return fn

    return _wrap


class Contract:
    """Base class for chaincode contracts."""

    # Contract name used for namespaced invocation ("<name>:<function>").
    # Defaults to the class name.
    contract_name: ClassVar[Optional[str]] = None

    _transactions: ClassVar[Dict[str, TransactionInfo]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: Dict[str, TransactionInfo] = {}
        for klass in reversed(cls.__mro__):
            for attr, member in vars(klass).items():
                marker = getattr(member, _TX_ATTR, None)
                if marker is None:
                    continue
                tx_name, params, submit = marker
                # Overrides replace the inherited entry under the same name.
                for existing in [k for k, v in table.items() if v.method_name == attr]:
                    del table[existing]
                if tx_name in table:
                    raise TypeError(f"{cls.__name__}: duplicate transaction name '{tx_name}'")
                table[tx_name] = TransactionInfo(tx_name, attr, params, submit)
        cls._transactions = table

    @property
    def name(self) -> str:
        return self.contract_name or type(self).__name__

    @classmethod
    def transactions(cls) -> Dict[str, TransactionInfo]:
        return dict(cls._transactions)

    def get_transaction(self, name: str) -> Optional[TransactionInfo]:
        return self._transactions.get(name)

    def metadata(self) -> Dict[str, Any]:
        txs: List[Dict[str, Any]] = [t.to_dict() for t in self._transactions.values()]
        return {
            "contracts": {
                self.name: {
                    "name": self.name,
                    "transactions": txs,
                }
            },
            "default_contract": self.name,
        }


__all__ = ["Contract", "TransactionInfo", "transaction"]
