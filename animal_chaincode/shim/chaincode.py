"""
animal_chaincode.shim.chaincode — transaction dispatcher.

The ledger platform invokes chaincode with a function name and a list of
string arguments. ``Chaincode.invoke`` resolves the name against the
contract's transaction table, runs the function inside the stub's write-set
journal (when the stub has one) and wraps the outcome in a Response:

    status 200  payload = encoded return value
    status 500  message = error text

Function names may be bare ("CreateAnimal") or namespaced with the contract
name ("SmartContract:CreateAnimal"). The system function
``org.hyperledger.fabric:GetMetadata`` returns the contract metadata as JSON.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..config import load_config
from ..contract.base import Contract, TransactionInfo
from ..contract.codec import encode_payload
from ..errors import ChaincodeError, UnknownTransaction, ValidationError
from ..logging import tx_context
from .context import TransactionContext
from .state_adapter import adapt_stub

log = logging.getLogger(__name__)

OK = 200
ERROR = 500

SYSTEM_NAMESPACE = "org.hyperledger.fabric"
SYSTEM_METADATA_FN = f"{SYSTEM_NAMESPACE}:GetMetadata"

Arg = Union[str, bytes, bytearray]


@dataclass(frozen=True)
class Response:
    status: int
    message: str = ""
    payload: bytes = b""

    @property
    def ok(self) -> bool:
        return self.status < 400

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "payload": self.payload.decode("utf-8", errors="replace"),
        }


def success(payload: bytes = b"") -> Response:
    return Response(status=OK, payload=payload)


def error(message: str) -> Response:
    return Response(status=ERROR, message=message)


def _decode_arg(i: int, arg: Arg) -> str:
    if isinstance(arg, str):
        return arg
    if isinstance(arg, (bytes, bytearray)):
        try:
            return bytes(arg).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"argument {i} is not valid UTF-8") from e
    raise ValidationError(f"argument {i} must be str or bytes, got {type(arg).__name__}")


class Chaincode:
    """Dispatches invocations to a single contract."""

    def __init__(self, contract: Contract) -> None:
        self.contract = contract

    def resolve(self, function: str) -> TransactionInfo:
        ns, sep, fn = function.rpartition(":")
        if sep and ns != self.contract.name:
            raise UnknownTransaction(
                f"Contract not found with name {ns}", context={"function": function}
            )
        info = self.contract.get_transaction(fn)
        if info is None:
            raise UnknownTransaction(
                f"Function {fn} not found in contract {self.contract.name}",
                context={"function": function},
            )
        return info

    def _call(self, ctx: TransactionContext, info: TransactionInfo, args: Sequence[Arg]) -> Any:
        if len(args) != len(info.params):
            raise ValidationError(
                f"Incorrect number of params. Expected {len(info.params)}, received {len(args)}",
                context={"function": info.name},
            )
        str_args = [_decode_arg(i, a) for i, a in enumerate(args)]
        return getattr(self.contract, info.method_name)(ctx, *str_args)

    def invoke(
        self,
        stub: Any,
        function: str,
        args: Sequence[Arg] = (),
        *,
        tx_id: Optional[str] = None,
        channel_id: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> Response:
        """
        Run one transaction and return its Response. Never raises for
        contract or state failures; those become status 500 responses.
        """
        if function == SYSTEM_METADATA_FN:
            return success(json.dumps(self.contract.metadata(), sort_keys=True).encode("utf-8"))

        stub = adapt_stub(stub)
        if tx_id is None:
            gen = getattr(stub, "next_tx_id", None)
            tx_id = gen() if callable(gen) else ""

        with tx_context(tx_id=tx_id, function=function):
            try:
                ctx = TransactionContext(
                    stub=stub,
                    tx_id=tx_id,
                    channel_id=channel_id if channel_id is not None else load_config().channel_id,
                    timestamp=int(time.time()) if timestamp is None else timestamp,
                )
                info = self.resolve(function)
            except ChaincodeError as e:
                log.warning("invalid invocation: %s", e)
                return error(str(e))
            return self._run(ctx, info, args)

    def _run(self, ctx: TransactionContext, info: TransactionInfo, args: Sequence[Arg]) -> Response:
        journal = _journal(ctx.get_stub())
        # Only a write set this call opened is rolled back; a caller's stays open.
        opened = False
        try:
            if journal:
                journal[0]()
                opened = True
            result = self._call(ctx, info, args)
            payload = encode_payload(result)
            if journal:
                journal[1]()
        except ChaincodeError as e:
            if opened:
                journal[2]()
            log.info("transaction failed: %s", e, extra={"code": e.code})
            return error(str(e))
        except Exception as e:
            if opened:
                journal[2]()
            log.exception("transaction raised unexpectedly")
            return error(str(e) or type(e).__name__)
        log.debug("transaction ok", extra={"payload_bytes": len(payload)})
        return success(payload)

    def metadata(self) -> Dict[str, Any]:
        return self.contract.metadata()


def _journal(stub: Any) -> Optional[Tuple[Any, Any, Any]]:
    begin = getattr(stub, "begin_tx", None)
    commit = getattr(stub, "commit_tx", None)
    rollback = getattr(stub, "rollback_tx", None)
    if callable(begin) and callable(commit) and callable(rollback):
        return begin, commit, rollback
    return None


__all__ = [
    "OK",
    "ERROR",
    "SYSTEM_METADATA_FN",
    "Response",
    "Chaincode",
    "success",
    "error",
]
