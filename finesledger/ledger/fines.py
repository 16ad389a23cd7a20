"""Mini README: Fixed fine schedule and the finite tag vocabulary.

Structure:
    * Tag - enumeration of event codes stored against a transaction.
    * FineKind - manual fine buttons available during a live session.
    * FINE_AMOUNTS / ITEM_FINE / AWARD_BONUSES - the club's fine schedule.
    * normalise_tags - coerce arbitrary tag input into an ordered tag set.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Tuple


class Tag(str, Enum):
    """Event codes recorded on a history transaction."""

    GRN = "GRN"
    YLW = "YLW"
    RED = "RED"
    ITEM = "ITEM"
    MOTM = "MOTM"
    DOTD = "DOTD"

    @classmethod
    def from_str(cls, value: str) -> "Tag":
        """Coerce arbitrary casing into a known tag, rejecting unknown codes."""

        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported fine tag: {value}") from error

    @property
    def label(self) -> str:
        """Short label shown in the match history."""

        return TAG_LABELS[self]


TAG_LABELS = {
    Tag.MOTM: "MoM",
    Tag.DOTD: "DoD",
    Tag.GRN: "Grn",
    Tag.YLW: "Ylw",
    Tag.RED: "Red",
    Tag.ITEM: "Item Missing",
}


class FineKind(str, Enum):
    """Manual fine buttons offered for each player in the active session."""

    STANDARD = "standard"
    UNDO = "undo"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

    @classmethod
    def from_str(cls, value: str) -> "FineKind":
        """Coerce arbitrary casing into a valid fine kind."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported fine kind: {value}") from error


STANDARD_INCREMENT = 0.50
GREEN_CARD = 2.00
YELLOW_CARD = 5.00
RED_CARD = 10.00
MOTM_BONUS = 2.00
DOTD_BONUS = 2.00
ITEM_FINE = 1.00

FINE_AMOUNTS = {
    FineKind.STANDARD: (STANDARD_INCREMENT, None),
    FineKind.UNDO: (-STANDARD_INCREMENT, None),
    FineKind.GREEN: (GREEN_CARD, Tag.GRN),
    FineKind.YELLOW: (YELLOW_CARD, Tag.YLW),
    FineKind.RED: (RED_CARD, Tag.RED),
}

AWARD_BONUSES = {
    Tag.MOTM: MOTM_BONUS,
    Tag.DOTD: DOTD_BONUS,
}


def fine_for(kind: FineKind) -> Tuple[float, Optional[Tag]]:
    """Return the signed amount and optional tag applied by a fine button."""

    return FINE_AMOUNTS[kind]


def normalise_tags(tags: Iterable[object]) -> List[Tag]:
    """Return tags as an ordered set, parsing strings and dropping repeats."""

    ordered: List[Tag] = []
    for raw in tags:
        tag = raw if isinstance(raw, Tag) else Tag.from_str(str(raw))
        if tag not in ordered:
            ordered.append(tag)
    return ordered
