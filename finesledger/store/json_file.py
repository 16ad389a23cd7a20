"""Mini README: JSON file persistence for the ledger store.

``JsonFileLedgerStore`` extends the in-memory store: it loads the file on
start and rewrites it after every successful batch. The file is written to a
temporary sibling then renamed over the original, so a crash mid-write
leaves the previous contents intact and a failed write aborts the batch.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from ..logging_utils import get_logger
from .base import StoreError
from .memory import Collections, InMemoryLedgerStore

LOGGER = get_logger(__name__)


class JsonFileLedgerStore(InMemoryLedgerStore):
    """Store persisting every committed batch to a JSON document file."""

    backend_name = "json"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(self._load(self.path))
        LOGGER.info("Ledger store backed by %s", self.path)

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise StoreError(f"Ledger file {path} could not be read") from error
        if not isinstance(payload, dict):
            raise StoreError(f"Ledger file {path} does not contain a collection map")
        return payload

    def _persist(self, collections: Collections) -> None:
        temporary = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temporary.write_text(json.dumps(collections, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(temporary, self.path)
        except OSError as error:
            raise StoreError(f"Ledger file {self.path} could not be written") from error
