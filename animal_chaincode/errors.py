from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(eq=False)
class ChaincodeError(Exception):
    """
    Structured error raised by the contract, the dispatcher and the stubs.

    Supported call patterns:

        ChaincodeError("simple message")

        ChaincodeError("message", code="SOME_CODE", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message (also the ``str()`` of the error)
        context: optional extra fields for logging / responses
    """

    code: str
    message: str
    context: Dict[str, Any]

    default_code = "CHAINCODE_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        code: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "code", str(code or self.default_code))
        object.__setattr__(self, "message", str(message))
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class StateError(ChaincodeError):
    """The world state (stub) failed to serve a read, write or range query."""

    default_code = "STATE_ERROR"


class RecordNotFound(ChaincodeError):
    """No value stored under the requested key."""

    default_code = "NOT_FOUND"


class CodecError(ChaincodeError):
    """Stored bytes could not be decoded into a record."""

    default_code = "CODEC_ERROR"


class ValidationError(ChaincodeError):
    """Bad key, value or argument list."""

    default_code = "VALIDATION_ERROR"


class UnknownTransaction(ChaincodeError):
    """The requested contract or transaction function does not exist."""

    default_code = "UNKNOWN_TRANSACTION"


__all__ = [
    "ChaincodeError",
    "StateError",
    "RecordNotFound",
    "CodecError",
    "ValidationError",
    "UnknownTransaction",
]
