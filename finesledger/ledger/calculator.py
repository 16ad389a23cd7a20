"""Mini README: Per-player fine arithmetic for an in-progress session.

Structure:
    * SessionAdjustment - typed working record for one selected player.
    * session_added / projected_total - the two derived amounts shown live.
    * is_reportable / build_transaction - what ends up in the match history.

A session maps player ids to ``SessionAdjustment`` entries. ``added_amount``
holds manual taps plus any voting bonus; the missing-item fine is derived
from ``item_brought`` rather than stored, so toggling the item never drifts
the total. Any tap or item toggle clears ``is_paid_off`` so the operator has
to confirm the pay-off again against the new figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .fines import ITEM_FINE, FineKind, Tag, fine_for
from .models import HistoryTransaction, Player, round_money


@dataclass(slots=True)
class SessionAdjustment:
    """Working fine state for one player selected into the session."""

    added_amount: float = 0.0
    is_paid_off: bool = False
    tags: List[Tag] = field(default_factory=list)
    item_brought: bool = False

    def apply_tap(self, amount: float, tag: Optional[Tag] = None) -> None:
        """Add a signed manual amount, recording ``tag`` once if supplied."""

        self.added_amount = round_money(self.added_amount + amount)
        self.is_paid_off = False
        if tag is not None and tag not in self.tags:
            self.tags.append(tag)

    def apply_fine(self, kind: FineKind) -> None:
        """Apply one of the scheduled fine buttons."""

        amount, tag = fine_for(kind)
        self.apply_tap(amount, tag)

    def toggle_item(self) -> None:
        self.item_brought = not self.item_brought
        self.is_paid_off = False

    def toggle_paid_off(self) -> None:
        self.is_paid_off = not self.is_paid_off

    def add_award(self, tag: Tag, bonus: float) -> None:
        """Apply a voting award without clearing the paid-off flag."""

        self.added_amount = round_money(self.added_amount + bonus)
        if tag not in self.tags:
            self.tags.append(tag)

    def remove_award(self, tag: Tag, bonus: float) -> bool:
        """Strip a previously applied award, returning whether one was present."""

        if tag not in self.tags:
            return False
        self.tags.remove(tag)
        self.added_amount = round_money(self.added_amount - bonus)
        return True

    @property
    def item_fine(self) -> float:
        return 0.0 if self.item_brought else ITEM_FINE

    def effective_tags(self) -> List[Tag]:
        """Tags recorded on commit: event tags plus ``ITEM`` when missing."""

        tags = list(self.tags)
        if not self.item_brought and Tag.ITEM not in tags:
            tags.append(Tag.ITEM)
        return tags


def session_added(adjustment: SessionAdjustment) -> float:
    """Manual taps and awards plus the missing-item fine."""

    return round_money(adjustment.added_amount + adjustment.item_fine)


def projected_total(total_owed: float, adjustment: SessionAdjustment) -> float:
    """Balance the player would carry if the session were committed now."""

    if adjustment.is_paid_off:
        return 0.0
    return round_money(total_owed + session_added(adjustment))


def is_reportable(adjustment: SessionAdjustment) -> bool:
    """Whether the adjustment produces a transaction in the match history."""

    return session_added(adjustment) > 0 or adjustment.is_paid_off


def build_transaction(player: Player, adjustment: SessionAdjustment) -> HistoryTransaction:
    """Snapshot a player's session outcome as a history transaction."""

    return HistoryTransaction(
        player_id=player.player_id,
        player_name=player.name,
        amount=session_added(adjustment),
        tags=adjustment.effective_tags(),
        is_paid_off=adjustment.is_paid_off,
    )
