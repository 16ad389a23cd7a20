"""Mini README: Application state controller for the fines ledger.

Structure:
    * LedgerWriteError - operator-facing failure of any write.
    * LedgerController - mirrors roster and history, dispatches CRUD writes,
      commits finished sessions and reverses deleted ones.

The controller's roster and history are a read-only mirror of the store,
refreshed solely by the store's snapshot subscriptions. Writes are proposed
to the store and only become visible once the store echoes them back, so a
failed write never leaves the cache ahead of the store.

Session commits compute new balances from the mirrored roster rather than
re-reading the store or asking it to increment. Two admins finishing
overlapping sessions at once can therefore overwrite each other's balance
(last writer wins); this matches the club's single-operator usage and is
recorded as an open decision in DESIGN.md.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .ledger.calculator import SessionAdjustment, build_transaction, is_reportable, session_added
from .ledger.models import Player, SessionRecord, round_money
from .logging_utils import get_logger
from .store import HISTORY, PLAYERS, Document, LedgerStore, StoreError

LOGGER = get_logger(__name__)

DEMO_ROSTER = [
    ("Player 1", 0.0),
    ("Player 2", 2.50),
    ("Player 3", 0.0),
    ("Player 4", 10.00),
    ("Player 5", 0.0),
]


class LedgerWriteError(RuntimeError):
    """A write to the ledger store failed and nothing was changed."""


def parse_balance(value: object) -> float:
    """Parse an operator-entered balance, rejecting non-numeric input."""

    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError) as error:
        raise ValueError(f"Balance must be a number, got {value!r}") from error
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        raise ValueError(f"Balance must be a finite number, got {value!r}")
    return round_money(parsed)


def clean_name(name: object) -> str:
    cleaned = str(name or "").strip()
    if not cleaned:
        raise ValueError("Player name cannot be empty")
    return cleaned


class LedgerController:
    """Own the mirrored roster/history and route every write to the store."""

    def __init__(self, store: LedgerStore, *, clock: Callable[[], float] = time.time) -> None:
        self.store = store
        self._clock = clock
        self._players: Dict[str, Player] = {}
        self._history: List[SessionRecord] = []
        self._players_loaded = False
        self._unsubscribers: List[Callable[[], None]] = []
        self.connect()

    # -- subscription mirror -------------------------------------------------

    def connect(self) -> None:
        """Subscribe to both collections; snapshots populate the cache."""

        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.store.subscribe(PLAYERS, self._on_players_snapshot),
            self.store.subscribe(
                HISTORY, self._on_history_snapshot, order_by="timestamp", descending=True
            ),
        ]

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_players_snapshot(self, documents: List[Document]) -> None:
        self._players = {
            document.document_id: Player.from_document(document.document_id, document.data)
            for document in documents
        }
        self._players_loaded = True
        LOGGER.debug("Roster mirror refreshed with %s players", len(self._players))

    def _on_history_snapshot(self, documents: List[Document]) -> None:
        self._history = [
            SessionRecord.from_document(document.document_id, document.data) for document in documents
        ]
        LOGGER.debug("History mirror refreshed with %s records", len(self._history))

    @property
    def loading(self) -> bool:
        return not self._players_loaded

    @property
    def players(self) -> List[Player]:
        """Roster in store order."""

        return list(self._players.values())

    @property
    def history(self) -> List[SessionRecord]:
        """History records, newest first."""

        return list(self._history)

    def get_player(self, player_id: str) -> Player:
        if player_id not in self._players:
            raise KeyError(f"Player {player_id} not found")
        return self._players[player_id]

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    def get_record(self, record_id: str) -> SessionRecord:
        for record in self._history:
            if record.record_id == record_id:
                return record
        raise KeyError(f"Session record {record_id} not found")

    # -- roster CRUD -----------------------------------------------------------

    def _write(self, description: str, action: Callable[[], object]) -> object:
        try:
            return action()
        except StoreError as error:
            LOGGER.error("Error %s: %s", description, error)
            raise LedgerWriteError(f"Failed {description}. Check the ledger store and retry.") from error

    def add_player(self, name: str) -> str:
        """Add a player with a zero balance and return the new id."""

        player = Player(player_id="", name=clean_name(name))
        player_id = self._write("adding player", lambda: self.store.add(PLAYERS, player.to_document()))
        LOGGER.info("Added player %s (%s)", player.name, player_id)
        return str(player_id)

    def rename_player(self, player_id: str, name: str) -> None:
        cleaned = clean_name(name)
        self.get_player(player_id)
        self._write("renaming player", lambda: self.store.update(PLAYERS, player_id, {"name": cleaned}))
        LOGGER.info("Renamed player %s to %s", player_id, cleaned)

    def set_player_total(self, player_id: str, total_owed: object) -> float:
        """Overwrite a player's balance after validating the input."""

        value = parse_balance(total_owed)
        self.get_player(player_id)
        self._write(
            "updating player", lambda: self.store.update(PLAYERS, player_id, {"totalOwed": value})
        )
        LOGGER.info("Set balance of %s to %.2f", player_id, value)
        return value

    def pay_off_player(self, player_id: str) -> None:
        self.set_player_total(player_id, 0.0)

    def remove_player(self, player_id: str) -> None:
        self.get_player(player_id)
        self._write("removing player", lambda: self.store.delete(PLAYERS, player_id))
        LOGGER.info("Removed player %s", player_id)

    def seed_demo_roster(self) -> int:
        """Add the demo roster when no players exist; returns players added."""

        if self._players:
            return 0
        batch = self.store.batch()
        for name, total in DEMO_ROSTER:
            batch.set(PLAYERS, self.store.new_document_id(), Player("", name, total).to_document())
        self._write("seeding roster", batch.commit)
        LOGGER.info("Seeded %s demo players", len(DEMO_ROSTER))
        return len(DEMO_ROSTER)

    # -- session commit and reversal ------------------------------------------

    def finish_session(
        self,
        session: Mapping[str, SessionAdjustment],
        opponent: str,
        selected: Optional[Sequence[str]] = None,
    ) -> Optional[SessionRecord]:
        """Commit a session's balance updates and history record atomically.

        ``selected`` limits the commit to the squad; adjustments for players
        no longer on the roster are ignored. Returns the record written, or
        ``None`` when no player had a reportable transaction.
        """

        squad = list(selected) if selected is not None else list(session.keys())
        batch = self.store.batch()
        record = SessionRecord(
            record_id=self.store.new_document_id(),
            timestamp=int(self._clock() * 1000),
            opponent=opponent.strip(),
        )

        for player in self.players:
            if player.player_id not in squad or player.player_id not in session:
                continue
            adjustment = session[player.player_id]
            added = session_added(adjustment)

            if is_reportable(adjustment):
                record.transactions.append(build_transaction(player, adjustment))

            if adjustment.is_paid_off:
                batch.update(PLAYERS, player.player_id, {"totalOwed": 0.0})
            elif added != 0:
                batch.update(
                    PLAYERS, player.player_id, {"totalOwed": round_money(player.total_owed + added)}
                )

        if record.transactions:
            batch.set(HISTORY, record.record_id, record.to_document())

        self._write("saving session", batch.commit)
        LOGGER.info(
            "Session vs %s committed: %s balance update(s), %s transaction(s)",
            record.opponent,
            len(batch) - (1 if record.transactions else 0),
            len(record.transactions),
        )
        return record if record.transactions else None

    def delete_session(self, record_id: str) -> List[str]:
        """Reverse a session's transactions and delete its record atomically.

        Returns the ids of players whose balance was reversed; transactions of
        players no longer on the roster are skipped.
        """

        record = self.get_record(record_id)
        batch = self.store.batch()
        reversed_players: List[str] = []
        for transaction in record.transactions:
            if not self.has_player(transaction.player_id):
                LOGGER.warning(
                    "Skipping reversal of %.2f for %s: player no longer on the roster",
                    transaction.amount,
                    transaction.player_name,
                )
                continue
            player = self._players[transaction.player_id]
            batch.update(
                PLAYERS,
                player.player_id,
                {"totalOwed": round_money(player.total_owed - transaction.amount)},
            )
            reversed_players.append(player.player_id)
        batch.delete(HISTORY, record_id)

        self._write("deleting session", batch.commit)
        LOGGER.info("Deleted session %s, reversed %s balance(s)", record_id, len(reversed_players))
        return reversed_players
