# -*- coding: utf-8 -*-
"""
Animal ledger contract.

Stores animal records under caller-chosen keys and reads them back, one at a
time or as a range scan over the seeded key space. All persistence goes
through the transaction's stub; the contract only serializes records.

Transactions:
- InitLedger()                                   seed ANIMAL0..ANIMAL2
- CreateAnimal(animal_number, origin, name, colour)
- QueryAnimal(animal_number) -> Animal
- QueryAllAnimals() -> [QueryResult]             keys in [ANIMAL0, ANIMAL99)
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..config import load_config
from ..errors import RecordNotFound, StateError
from ..shim.context import TransactionContext
from .base import Contract, transaction
from .codec import decode_animal, encode_animal
from .models import Animal, QueryResult

log = logging.getLogger(__name__)

SEED_ANIMALS: Tuple[Animal, ...] = (
    Animal(origin="Africa", name="African Elefant", colour="grey"),
    Animal(origin="Europe", name="Cow", colour="brown"),
    Animal(origin="Asia", name="Asian Elefant", colour="grey"),
)


class AnimalContract(Contract):
    """Lists animals on the ledger."""

    contract_name = "SmartContract"

    def __init__(
        self,
        *,
        key_prefix: Optional[str] = None,
        range_start: Optional[str] = None,
        range_end: Optional[str] = None,
    ) -> None:
        cfg = load_config()
        self.key_prefix = key_prefix if key_prefix is not None else cfg.key_prefix
        self.range_start = range_start if range_start is not None else cfg.range_start
        self.range_end = range_end if range_end is not None else cfg.range_end

    @transaction(name="InitLedger")
    def init_ledger(self, ctx: TransactionContext) -> None:
        """Add the base set of animals to the ledger."""
        for i, animal in enumerate(SEED_ANIMALS):
            key = f"{self.key_prefix}{i}"
            try:
                ctx.get_stub().put_state(key, encode_animal(animal))
            except Exception as e:
                raise StateError(
                    f"Failed to put to world state. {e}", context={"key": key}
                ) from e
        log.info("ledger seeded", extra={"records": len(SEED_ANIMALS)})

    @transaction(name="CreateAnimal")
    def create_animal(
        self, ctx: TransactionContext, animal_number: str, origin: str, name: str, colour: str
    ) -> None:
        """Add a new animal (or overwrite an existing one) under ``animal_number``."""
        animal = Animal(origin=origin, name=name, colour=colour)
        ctx.get_stub().put_state(animal_number, encode_animal(animal))

    @transaction(name="QueryAnimal", submit=False)
    def query_animal(self, ctx: TransactionContext, animal_number: str) -> Animal:
        """Return the animal stored under ``animal_number``."""
        try:
            raw = ctx.get_stub().get_state(animal_number)
        except Exception as e:
            raise StateError(
                f"Failed to read from world state. {e}", context={"key": animal_number}
            ) from e
        # The platform reports deleted/never-written keys as empty.
        if not raw:
            raise RecordNotFound(f"{animal_number} does not exist", context={"key": animal_number})
        return decode_animal(raw)

    @transaction(name="QueryAllAnimals", submit=False)
    def query_all_animals(self, ctx: TransactionContext) -> List[QueryResult]:
        """Return every animal whose key falls in the scanned range."""
        results: List[QueryResult] = []
        iterator = ctx.get_stub().get_state_by_range(self.range_start, self.range_end)
        try:
            while iterator.has_next():
                kv = iterator.next()
                results.append(QueryResult(key=kv.key, record=decode_animal(kv.value)))
        finally:
            iterator.close()
        return results


__all__ = ["AnimalContract", "SEED_ANIMALS"]
