# -*- coding: utf-8 -*-
"""
JSON codec for animal records.

Records are stored as compact UTF-8 JSON objects with a fixed key order:

    {"origin":"Africa","name":"African Elefant","colour":"grey"}

Range results use the capitalised row shape clients already parse:

    [{"Key":"ANIMAL0","Record":{"origin":...,"name":...,"colour":...}}, ...]
"""
from __future__ import annotations

import json
from dataclasses import is_dataclass
from typing import Any, Dict, Iterable, List

from ..errors import CodecError
from .models import Animal, QueryResult

RECORD_FIELDS = ("origin", "name", "colour")

_SEPARATORS = (",", ":")


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, separators=_SEPARATORS, ensure_ascii=False).encode("utf-8")


def animal_to_dict(animal: Animal) -> Dict[str, str]:
    return {f: getattr(animal, f) for f in RECORD_FIELDS}


def result_to_dict(result: QueryResult) -> Dict[str, Any]:
    return {"Key": result.key, "Record": animal_to_dict(result.record)}


def encode_animal(animal: Animal) -> bytes:
    return _dumps(animal_to_dict(animal))


def decode_animal(raw: bytes) -> Animal:
    """
    Missing fields decode as "" and unknown fields are ignored; anything that
    is not a JSON object of strings is rejected.
    """
    try:
        obj = json.loads(bytes(raw).decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise CodecError(f"stored record is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise CodecError(f"stored record must be a JSON object, got {type(obj).__name__}")
    fields: Dict[str, str] = {}
    for f in RECORD_FIELDS:
        v = obj.get(f, "")
        if v is None:
            v = ""
        if not isinstance(v, str):
            raise CodecError(f"record field '{f}' must be a string", context={"field": f})
        fields[f] = v
    return Animal(**fields)


def encode_results(results: Iterable[QueryResult]) -> bytes:
    return _dumps([result_to_dict(r) for r in results])


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Animal):
        return animal_to_dict(value)
    if isinstance(value, QueryResult):
        return result_to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _to_jsonable(v) for k, v in vars(value).items()}
    return value


def encode_payload(value: Any) -> bytes:
    """Encode a transaction's return value as response payload bytes."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    try:
        return _dumps(_to_jsonable(value))
    except (TypeError, ValueError) as e:
        raise CodecError(f"cannot encode {type(value).__name__} return value: {e}") from e


def decode_results(raw: bytes) -> List[QueryResult]:
    """Inverse of encode_results, for clients and tests."""
    try:
        rows = json.loads(bytes(raw).decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise CodecError(f"range payload is not valid JSON: {e}") from e
    if not isinstance(rows, list):
        raise CodecError("range payload must be a JSON array")
    out: List[QueryResult] = []
    for row in rows:
        if not isinstance(row, dict) or "Key" not in row:
            raise CodecError("range row must be an object with a 'Key'")
        out.append(QueryResult(key=str(row["Key"]), record=decode_animal(_dumps(row.get("Record") or {}))))
    return out


__all__ = [
    "RECORD_FIELDS",
    "animal_to_dict",
    "result_to_dict",
    "encode_animal",
    "decode_animal",
    "encode_results",
    "decode_results",
    "encode_payload",
]
