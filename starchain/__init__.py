# starchain/__init__.py
"""
Starchain — a tamper-evident star registry.

Clients prove control of a Bitcoin-style address by signing a challenge
message, then record star observations in a hash-linked, SQLite-backed chain.
"""

from starchain.chain.blockchain import Blockchain
from starchain.core.types import Block
from starchain.registry.service import StarRegistry
from starchain.validation.registry import ValidationList
from starchain.validation.record import Validation

__version__ = "0.1.0-dev"

__all__ = ["Block", "Blockchain", "StarRegistry", "Validation", "ValidationList"]
