"""Mini README: Process-local ledger store backend.

``InMemoryLedgerStore`` keeps collections in dictionaries. Batches are
applied to a deep copy of the collections and swapped in only once every
operation succeeded, which gives the all-or-nothing guarantee. Subclasses
persist the result by overriding ``_persist``.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Optional, Sequence

from .base import LedgerStore, WriteOperation, apply_operation


Collections = Dict[str, Dict[str, Dict[str, Any]]]


class InMemoryLedgerStore(LedgerStore):
    """Dictionary-backed store used for tests and ephemeral deployments."""

    backend_name = "memory"

    def __init__(self, initial: Optional[Mapping[str, Mapping[str, Mapping[str, Any]]]] = None) -> None:
        super().__init__()
        self._collections: Collections = {
            name: {document_id: dict(data) for document_id, data in documents.items()}
            for name, documents in (initial or {}).items()
        }

    def _read(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.get(collection, {})

    def _commit(self, operations: Sequence[WriteOperation]) -> None:
        working = copy.deepcopy(self._collections)
        for operation in operations:
            self._apply_operation(working, operation)
        self._persist(working)
        self._collections = working

    def _apply_operation(self, working: Collections, operation: WriteOperation) -> None:
        apply_operation(working, operation)

    def _persist(self, collections: Collections) -> None:
        """Hook for durable backends; the in-memory store keeps nothing."""

