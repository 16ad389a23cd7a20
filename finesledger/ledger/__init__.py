"""Mini README: Pure fine arithmetic and the ledger data model.

Nothing in this package touches the store: ``calculator`` and ``voting``
operate on in-memory session adjustments, ``models`` converts between
dataclasses and store documents, and ``fines`` holds the fine schedule.
"""

from .calculator import SessionAdjustment, projected_total, session_added
from .fines import FineKind, Tag
from .models import HistoryTransaction, Player, SessionRecord
from .voting import VoteTally, finalize_voting, resolve_winners

__all__ = [
    "FineKind",
    "HistoryTransaction",
    "Player",
    "SessionAdjustment",
    "SessionRecord",
    "Tag",
    "VoteTally",
    "finalize_voting",
    "projected_total",
    "resolve_winners",
    "session_added",
]
