"""
animal_chaincode.cli — local runner for the animal contract.

Runs transactions against a JSON-file world state so the contract can be
exercised without a ledger network:

    animal-cc init
    animal-cc create ANIMAL7 Australia Kangaroo brown
    animal-cc query ANIMAL7
    animal-cc query-all
    animal-cc invoke QueryAnimal ANIMAL0
    animal-cc metadata
"""

from __future__ import annotations

from .main import app

__all__ = ["app"]
