from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Animal:
    """Basic details of an animal. All fields are free-form strings."""

    origin: str = ""
    name: str = ""
    colour: str = ""


@dataclass(frozen=True)
class QueryResult:
    """One row of a range scan: the state key and the decoded record."""

    key: str
    record: Animal


__all__ = ["Animal", "QueryResult"]
