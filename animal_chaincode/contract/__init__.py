from __future__ import annotations

from .animal import SEED_ANIMALS, AnimalContract
from .base import Contract, TransactionInfo, transaction
from .models import Animal, QueryResult

__all__ = [
    "Animal",
    "QueryResult",
    "AnimalContract",
    "SEED_ANIMALS",
    "Contract",
    "TransactionInfo",
    "transaction",
]
