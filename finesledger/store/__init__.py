"""Mini README: Ledger store subsystem package initialiser.

Re-exports the abstract store, its batch and error types, and the concrete
backends. ``base`` holds the interface, ``memory`` and ``json_file`` the
implementations and ``registry`` the name-based factory.
"""

from .base import HISTORY, PLAYERS, Document, LedgerStore, StoreError, WriteBatch
from .json_file import JsonFileLedgerStore
from .memory import InMemoryLedgerStore
from .registry import REGISTRY, StoreRegistry, create_store

__all__ = [
    "Document",
    "HISTORY",
    "InMemoryLedgerStore",
    "JsonFileLedgerStore",
    "LedgerStore",
    "PLAYERS",
    "REGISTRY",
    "StoreError",
    "StoreRegistry",
    "WriteBatch",
    "create_store",
]
