"""Mini README: Shared pytest fixtures for the fines ledger tests.

Structure:
    * FailingStore - in-memory store that raises part-way through a batch.
    * store / controller - fresh in-memory ledger per test.
    * add_roster - helper fixture creating players with given balances.
"""

from __future__ import annotations

from typing import Callable, Dict

import pytest

from finesledger.controller import LedgerController
from finesledger.store import InMemoryLedgerStore, StoreError


class FailingStore(InMemoryLedgerStore):
    """Raise ``StoreError`` on the n-th operation of the next armed batch."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_on_operation = None
        self._seen = 0

    def arm(self, operation_index: int) -> None:
        self.fail_on_operation = operation_index
        self._seen = 0

    def _apply_operation(self, working, operation) -> None:
        if self.fail_on_operation is not None:
            self._seen += 1
            if self._seen == self.fail_on_operation:
                self.fail_on_operation = None
                raise StoreError("simulated network failure")
        super()._apply_operation(working, operation)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def controller(store: InMemoryLedgerStore) -> LedgerController:
    return LedgerController(store, clock=lambda: 1_700_000_000.0)


@pytest.fixture
def add_roster() -> Callable[..., Dict[str, str]]:
    """Return a helper adding ``name=balance`` players and mapping names to ids."""

    def _add(controller: LedgerController, **balances: float) -> Dict[str, str]:
        ids: Dict[str, str] = {}
        for name, balance in balances.items():
            player_id = controller.add_player(name)
            if balance:
                controller.set_player_total(player_id, balance)
            ids[name] = player_id
        return ids

    return _add
