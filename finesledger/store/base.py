"""Mini README: Abstract document store used as the ledger's source of truth.

Structure:
    * StoreError - raised when a read or write cannot be completed.
    * Document - immutable snapshot of one stored document.
    * WriteOperation / WriteBatch - queued writes committed all-or-nothing.
    * LedgerStore - abstract interface implemented by concrete backends.

The store exposes named collections of auto-identified documents, snapshot
subscriptions that fire after every commit touching a collection, and atomic
batches. Backends only implement ``_commit`` and ``_read``; subscription
dispatch, id generation and the single-document helpers live here.
"""

from __future__ import annotations

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

PLAYERS = "players"
HISTORY = "history"


class StoreError(RuntimeError):
    """A store operation failed; no part of the attempted write was applied."""


@dataclass(frozen=True, slots=True)
class Document:
    """Snapshot of a stored document."""

    document_id: str
    data: Mapping[str, Any]


class WriteKind(str, Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True)
class WriteOperation:
    """One queued write inside a batch."""

    kind: WriteKind
    collection: str
    document_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[List[Document]], None]


@dataclass(slots=True)
class _Subscription:
    collection: str
    callback: SnapshotCallback
    order_by: Optional[str]
    descending: bool


class WriteBatch:
    """Collects writes and commits them together or not at all."""

    def __init__(self, store: "LedgerStore") -> None:
        self._store = store
        self._operations: List[WriteOperation] = []
        self._committed = False

    def set(self, collection: str, document_id: str, data: Mapping[str, Any]) -> "WriteBatch":
        """Create or replace a whole document."""

        self._queue(WriteOperation(WriteKind.SET, collection, document_id, dict(data)))
        return self

    def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> "WriteBatch":
        """Merge fields into an existing document; a missing document fails the batch."""

        self._queue(WriteOperation(WriteKind.UPDATE, collection, document_id, dict(fields)))
        return self

    def delete(self, collection: str, document_id: str) -> "WriteBatch":
        self._queue(WriteOperation(WriteKind.DELETE, collection, document_id))
        return self

    def __len__(self) -> int:
        return len(self._operations)

    def _queue(self, operation: WriteOperation) -> None:
        if self._committed:
            raise StoreError("Batch has already been committed")
        self._operations.append(operation)

    def commit(self) -> None:
        """Apply every queued write atomically, raising ``StoreError`` on failure."""

        if self._committed:
            raise StoreError("Batch has already been committed")
        self._store.commit_operations(self._operations)
        self._committed = True


class LedgerStore(ABC):
    """Base interface for ledger document stores."""

    backend_name: str = "generic"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscriptions: List[_Subscription] = []
        LOGGER.debug("Initialising %s ledger store", self.backend_name)

    @abstractmethod
    def _read(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Return the live documents of ``collection`` keyed by id."""

    @abstractmethod
    def _commit(self, operations: Sequence[WriteOperation]) -> None:
        """Apply ``operations`` all-or-nothing, raising ``StoreError`` on failure."""

    def new_document_id(self) -> str:
        return uuid.uuid4().hex

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def get(self, collection: str) -> List[Document]:
        """Return a snapshot of every document in ``collection``."""

        with self._lock:
            return [
                Document(document_id, copy.deepcopy(data))
                for document_id, data in self._read(collection).items()
            ]

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Create a document with a generated id and return the id."""

        document_id = self.new_document_id()
        self.batch().set(collection, document_id, data).commit()
        return document_id

    def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> None:
        self.batch().update(collection, document_id, fields).commit()

    def delete(self, collection: str, document_id: str) -> None:
        self.batch().delete(collection, document_id).commit()

    def commit_operations(self, operations: Sequence[WriteOperation]) -> None:
        """Commit a batch then notify subscribers of the touched collections."""

        if not operations:
            return
        with self._lock:
            self._commit(operations)
            touched = {operation.collection for operation in operations}
            LOGGER.debug(
                "Committed %s write(s) across %s", len(operations), ", ".join(sorted(touched))
            )
            for subscription in list(self._subscriptions):
                if subscription.collection not in touched:
                    continue
                try:
                    self._notify(subscription)
                except Exception:
                    # Batch already applied; only this reader's view stalls.
                    LOGGER.exception(
                        "Snapshot delivery for %s failed after commit", subscription.collection
                    )

    def subscribe(
        self,
        collection: str,
        callback: SnapshotCallback,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Callable[[], None]:
        """Deliver the current snapshot now and after each relevant commit.

        Returns a callable that cancels the subscription.
        """

        subscription = _Subscription(collection, callback, order_by, descending)
        with self._lock:
            self._subscriptions.append(subscription)
            self._notify(subscription)

        def unsubscribe() -> None:
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return unsubscribe

    def _notify(self, subscription: _Subscription) -> None:
        snapshot = self.get(subscription.collection)
        if subscription.order_by:
            key = subscription.order_by
            snapshot.sort(key=lambda document: document.data.get(key, 0), reverse=subscription.descending)
        subscription.callback(snapshot)


def apply_operation(
    collections: Dict[str, Dict[str, Dict[str, Any]]], operation: WriteOperation
) -> None:
    """Apply one write to an in-memory collection map, validating targets."""

    documents = collections.setdefault(operation.collection, {})
    if operation.kind is WriteKind.SET:
        documents[operation.document_id] = copy.deepcopy(operation.fields)
    elif operation.kind is WriteKind.UPDATE:
        if operation.document_id not in documents:
            raise StoreError(
                f"Cannot update missing document {operation.collection}/{operation.document_id}"
            )
        documents[operation.document_id].update(copy.deepcopy(operation.fields))
    elif operation.kind is WriteKind.DELETE:
        if operation.document_id not in documents:
            raise StoreError(
                f"Cannot delete missing document {operation.collection}/{operation.document_id}"
            )
        del documents[operation.document_id]
