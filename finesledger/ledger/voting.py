"""Mini README: Man-of-the-Match and Dick-of-the-Day vote handling.

Structure:
    * VoteTally - per-category nominee counts edited during the voting step.
    * resolve_winners - every co-leader at the highest non-zero count.
    * finalize_voting - strip old awards then apply bonuses and tags.

Ties are not broken: every player sharing the top count wins the award.
Finalising is idempotent because existing ``MOTM``/``DOTD`` tags and their
bonuses are removed before the winners are recomputed.
"""

from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Mapping, Optional, Tuple

from ..logging_utils import get_logger
from .calculator import SessionAdjustment
from .fines import AWARD_BONUSES, Tag

LOGGER = get_logger(__name__)


class VoteTally:
    """Vote counts for a single award category."""

    def __init__(self, category: Tag, votes: Optional[Mapping[str, int]] = None) -> None:
        if category not in AWARD_BONUSES:
            raise ValueError(f"{category.value} is not a voted award")
        self.category = category
        self._votes: Dict[str, int] = {}
        for player_id, count in (votes or {}).items():
            if count > 0:
                self._votes[player_id] = int(count)

    def add_nominee(self, player_id: str) -> int:
        """Nominate a player, which counts as their first vote."""

        if not player_id:
            raise ValueError("A nominee must be chosen")
        return self.change(player_id, 1)

    def change(self, player_id: str, delta: int) -> int:
        """Adjust a nominee's votes, never below zero; zero drops the nominee."""

        count = max(0, self._votes.get(player_id, 0) + delta)
        if count == 0:
            self._votes.pop(player_id, None)
        else:
            self._votes[player_id] = count
        return count

    def clear(self) -> None:
        self._votes.clear()

    def votes(self) -> Dict[str, int]:
        return dict(self._votes)

    def candidates(self, selected: Optional[Collection[str]] = None) -> List[Tuple[str, int]]:
        """Nominees sorted by votes descending, optionally limited to a squad."""

        entries = [
            (player_id, count)
            for player_id, count in self._votes.items()
            if selected is None or player_id in selected
        ]
        return sorted(entries, key=lambda entry: entry[1], reverse=True)

    def leaders(self, selected: Collection[str]) -> List[str]:
        return resolve_winners(self._votes, selected)


def resolve_winners(votes: Mapping[str, int], selected: Collection[str]) -> List[str]:
    """Return every selected player sharing the highest non-zero vote count."""

    eligible = {player_id: count for player_id, count in votes.items() if player_id in selected}
    if not eligible:
        return []
    top = max(eligible.values())
    if top <= 0:
        return []
    return [player_id for player_id, count in eligible.items() if count == top]


def available_nominees(
    tally: VoteTally, selected: Iterable[str], names: Mapping[str, str]
) -> List[str]:
    """Selected players not yet nominated, ordered by display name."""

    nominated = tally.votes()
    remaining = [player_id for player_id in selected if player_id not in nominated]
    return sorted(remaining, key=lambda player_id: names.get(player_id, player_id).lower())


def strip_awards(session: Mapping[str, SessionAdjustment]) -> None:
    """Remove every previously applied award and its bonus."""

    for player_id, adjustment in session.items():
        for tag, bonus in AWARD_BONUSES.items():
            if adjustment.remove_award(tag, bonus):
                LOGGER.debug("Stripped %s from %s before re-finalising votes", tag.value, player_id)


def finalize_voting(
    session: Mapping[str, SessionAdjustment],
    tallies: Iterable[VoteTally],
    selected: Collection[str],
) -> Dict[Tag, List[str]]:
    """Apply award bonuses and tags to the winners of each tally.

    Returns the winners per category. Players without a session entry are
    ignored.
    """

    strip_awards(session)
    winners: Dict[Tag, List[str]] = {}
    for tally in tallies:
        category_winners = tally.leaders(selected)
        bonus = AWARD_BONUSES[tally.category]
        for player_id in category_winners:
            adjustment = session.get(player_id)
            if adjustment is None:
                continue
            adjustment.add_award(tally.category, bonus)
        winners[tally.category] = category_winners
        LOGGER.info("%s awarded to %s", tally.category.value, category_winners or "nobody")
    return winners
