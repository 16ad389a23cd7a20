"""Mini README: Read models for the public leaderboard and match history.

Structure:
    * format_currency / format_date - display helpers.
    * build_standings - roster ordered by balance with ranks and flags.
    * summarise_history - history records with their total fines.

These functions only read the controller's mirrored state, so they are
safe to call from request handlers without touching the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List

from .ledger.models import Player, SessionRecord, round_money


def format_currency(amount: float, symbol: str = "£") -> str:
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):.2f}"


def format_date(timestamp_ms: int) -> str:
    """Render an epoch-millisecond timestamp the way the history list shows it."""

    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%a %d %b %Y")


def build_standings(
    players: Iterable[Player], *, high_debt_threshold: float = 10.0, symbol: str = "£"
) -> Dict[str, Any]:
    """Rank players by balance, highest first, and total the outstanding debt."""

    ordered = sorted(players, key=lambda player: player.total_owed, reverse=True)
    total_debt = round_money(sum(player.total_owed for player in ordered))
    standings: List[Dict[str, Any]] = [
        {
            "rank": index + 1,
            "id": player.player_id,
            "name": player.name,
            "total_owed": player.total_owed,
            "display": format_currency(player.total_owed, symbol),
            "high_debt": player.total_owed > high_debt_threshold,
        }
        for index, player in enumerate(ordered)
    ]
    return {
        "total_debt": total_debt,
        "total_debt_display": format_currency(total_debt, symbol),
        "players": standings,
    }


def summarise_history(records: Iterable[SessionRecord], *, symbol: str = "£") -> List[Dict[str, Any]]:
    """Export history records, newest first as mirrored, with totals."""

    return [
        {
            "id": record.record_id,
            "timestamp": record.timestamp,
            "date": format_date(record.timestamp),
            "opponent": record.opponent,
            "total_fines": record.total_fines,
            "total_fines_display": format_currency(record.total_fines, symbol),
            "player_count": len(record.transactions),
            "transactions": [transaction.as_dict() for transaction in record.transactions],
        }
        for record in records
    ]
