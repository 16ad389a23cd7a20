"""Mini README: Persistent data model for players and match history.

Structure:
    * Player - roster entry with a running balance.
    * HistoryTransaction - one player's net fine inside a session record.
    * SessionRecord - immutable match history entry.

Each dataclass converts to and from the camelCase document layout used by
the ledger store (``totalOwed``, ``playerId`` ...). Player names on a
transaction are snapshots taken at commit time so history survives renames
and roster deletions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .fines import Tag, normalise_tags


def round_money(value: float) -> float:
    """Round a currency amount to whole pence."""

    return round(float(value), 2)


@dataclass(slots=True)
class Player:
    """Roster entry owning a running fine balance."""

    player_id: str
    name: str
    total_owed: float = 0.0

    @classmethod
    def from_document(cls, document_id: str, data: Mapping[str, Any]) -> "Player":
        return cls(
            player_id=document_id,
            name=str(data.get("name", "")),
            total_owed=float(data.get("totalOwed", 0.0)),
        )

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "totalOwed": round_money(self.total_owed)}

    def as_dict(self) -> Dict[str, Any]:
        """Export the player for JSON responses."""

        return {"id": self.player_id, "name": self.name, "total_owed": self.total_owed}


@dataclass(slots=True)
class HistoryTransaction:
    """Net fine applied to one player when a session was committed."""

    player_id: str
    player_name: str
    amount: float
    tags: List[Tag] = field(default_factory=list)
    is_paid_off: bool = False

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "HistoryTransaction":
        return cls(
            player_id=str(data["playerId"]),
            player_name=str(data.get("playerName", "")),
            amount=float(data.get("amount", 0.0)),
            tags=normalise_tags(data.get("tags") or []),
            is_paid_off=bool(data.get("isPaidOff", False)),
        )

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "amount": round_money(self.amount),
            "tags": [tag.value for tag in self.tags],
        }
        if self.is_paid_off:
            document["isPaidOff"] = True
        return document

    def as_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "amount": self.amount,
            "tags": [tag.value for tag in self.tags],
            "tag_labels": [tag.label for tag in self.tags],
            "is_paid_off": self.is_paid_off,
        }


@dataclass(slots=True)
class SessionRecord:
    """Immutable history entry for one match's committed fines."""

    record_id: str
    timestamp: int
    opponent: str
    transactions: List[HistoryTransaction] = field(default_factory=list)

    @property
    def total_fines(self) -> float:
        """Sum of the transaction amounts, as shown on the history list."""

        return round_money(sum(transaction.amount for transaction in self.transactions))

    @classmethod
    def from_document(cls, document_id: str, data: Mapping[str, Any]) -> "SessionRecord":
        return cls(
            record_id=document_id,
            timestamp=int(data.get("timestamp", 0)),
            opponent=str(data.get("opponent", "")),
            transactions=[
                HistoryTransaction.from_document(entry) for entry in data.get("transactions") or []
            ],
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "opponent": self.opponent,
            "transactions": [transaction.to_document() for transaction in self.transactions],
        }
