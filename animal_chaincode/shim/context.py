"""
animal_chaincode.shim.context — per-transaction context handed to the contract.

A TransactionContext bundles the world-state stub with the transaction's
identity (tx id, channel, proposal timestamp). It carries no behaviour of its
own; the contract calls ``ctx.get_stub()`` and the dispatcher uses the identity
fields for logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..errors import ValidationError
from .stub import ChaincodeStub


def _require_non_negative_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ValidationError(f"{name} must be non-negative, got {v}")
    return v


def _require_str(name: str, v: Any) -> str:
    if not isinstance(v, str):
        raise ValidationError(f"{name} must be str, got {type(v).__name__}")
    return v


@dataclass(frozen=True)
class TransactionContext:
    """
    Fields
    ------
    stub:       World-state interface for this transaction.
    tx_id:      Transaction id assigned by the platform (or the local runner).
    channel_id: Channel the transaction was proposed on.
    timestamp:  Proposal timestamp in seconds since the epoch (0 if unknown).
    """

    stub: ChaincodeStub
    tx_id: str = ""
    channel_id: str = ""
    timestamp: int = 0

    def __post_init__(self) -> None:
        _require_str("tx_id", self.tx_id)
        _require_str("channel_id", self.channel_id)
        _require_non_negative_int("timestamp", self.timestamp)

    def get_stub(self) -> ChaincodeStub:
        return self.stub

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_id": self.tx_id,
            "channel_id": self.channel_id,
            "timestamp": self.timestamp,
        }


__all__ = ["TransactionContext"]
