"""Mini README: Registry mapping backend names to ledger store classes.

Structure:
    * StoreRegistry - registers ``LedgerStore`` implementations by name.
    * create_store - build the configured backend from settings.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Type

from ..configuration import FinesLedgerSettings, get_settings
from ..logging_utils import get_logger
from .base import LedgerStore
from .json_file import JsonFileLedgerStore
from .memory import InMemoryLedgerStore

LOGGER = get_logger(__name__)


class StoreRegistry:
    """Simple registry for mapping backend identifiers to classes."""

    def __init__(self) -> None:
        self._backends: Dict[str, Type[LedgerStore]] = {}

    def register(self, backend: Type[LedgerStore]) -> None:
        identifier = backend.backend_name.lower()
        LOGGER.debug("Registering store backend '%s'", identifier)
        self._backends[identifier] = backend

    def available_backends(self) -> Iterable[str]:
        return sorted(self._backends.keys())

    def get(self, identifier: str) -> Type[LedgerStore]:
        backend = self._backends.get(identifier.lower())
        if not backend:
            raise KeyError(f"Unknown ledger store backend '{identifier}'")
        return backend


REGISTRY = StoreRegistry()
REGISTRY.register(InMemoryLedgerStore)
REGISTRY.register(JsonFileLedgerStore)


def create_store(settings: Optional[FinesLedgerSettings] = None) -> LedgerStore:
    """Instantiate the backend named in settings."""

    settings = settings or get_settings()
    backend = REGISTRY.get(settings.store_backend)
    LOGGER.info("Creating '%s' ledger store", backend.backend_name)
    if issubclass(backend, JsonFileLedgerStore):
        return backend(settings.store_path)
    return backend()
