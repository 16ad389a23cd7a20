"""Mini README: Session wizard driving one match's fine recording.

Structure:
    * WizardStep - SELECT, VOTING, ACTIVE plus the two terminal states.
    * WizardStateError - raised for transitions the current step forbids.
    * SessionWizard - squad selection, award voting, live fines, commit.

Nothing is written to the store until ``finish``; ``cancel`` simply
discards the working data. Adjustments are kept for players who are
deselected and re-selected, so flicking a player off and on again does not
lose their fines. A failed commit leaves the wizard ACTIVE for a retry.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from ..controller import LedgerController
from ..ledger.calculator import SessionAdjustment, projected_total, session_added
from ..ledger.fines import FineKind, Tag
from ..ledger.models import SessionRecord
from ..ledger.voting import VoteTally, available_nominees, finalize_voting
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class WizardStep(str, Enum):
    SELECT = "select"
    VOTING = "voting"
    ACTIVE = "active"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class WizardStateError(RuntimeError):
    """The requested action is not allowed in the wizard's current step."""


class SessionWizard:
    """Collects one match's fines and commits them through the controller."""

    def __init__(self, controller: LedgerController) -> None:
        self.controller = controller
        self.step = WizardStep.SELECT
        self.opponent = ""
        self._selected: List[str] = []
        self._session: Dict[str, SessionAdjustment] = {}
        self.tallies: Dict[Tag, VoteTally] = {
            Tag.MOTM: VoteTally(Tag.MOTM),
            Tag.DOTD: VoteTally(Tag.DOTD),
        }
        self._committing = False

    def _require(self, *steps: WizardStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(step.value for step in steps)
            raise WizardStateError(f"Action requires step {allowed}; wizard is {self.step.value}")

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def adjustment(self, player_id: str) -> SessionAdjustment:
        if player_id not in self._selected:
            raise KeyError(f"Player {player_id} is not in this session")
        return self._session[player_id]

    # -- SELECT ----------------------------------------------------------------

    def set_opponent(self, opponent: str) -> None:
        self._require(WizardStep.SELECT)
        self.opponent = opponent.strip()

    def toggle_player(self, player_id: str) -> bool:
        """Toggle a roster player's selection; returns True when now selected."""

        self._require(WizardStep.SELECT)
        self.controller.get_player(player_id)
        if player_id in self._selected:
            self._selected.remove(player_id)
            return False
        self._selected.append(player_id)
        self._session.setdefault(player_id, SessionAdjustment())
        return True

    def start_voting(self) -> None:
        self._require(WizardStep.SELECT)
        if not self._selected:
            raise ValueError("Select at least one player before continuing")
        if not self.opponent:
            raise ValueError("Enter the opponent's name before continuing")
        self.step = WizardStep.VOTING

    def back_to_selection(self) -> None:
        self._require(WizardStep.VOTING)
        self.step = WizardStep.SELECT

    # -- VOTING ----------------------------------------------------------------

    def _tally(self, category: Tag) -> VoteTally:
        if category not in self.tallies:
            raise ValueError(f"{category.value} is not a voted award")
        return self.tallies[category]

    def add_nominee(self, category: Tag, player_id: str) -> int:
        self._require(WizardStep.VOTING)
        if player_id not in self._selected:
            raise ValueError("Only players in the squad can be nominated")
        return self._tally(category).add_nominee(player_id)

    def change_vote(self, category: Tag, player_id: str, delta: int) -> int:
        self._require(WizardStep.VOTING)
        if player_id not in self._selected:
            raise ValueError("Only players in the squad can receive votes")
        return self._tally(category).change(player_id, delta)

    def nominee_options(self, category: Tag) -> List[str]:
        names = {player.player_id: player.name for player in self.controller.players}
        return available_nominees(self._tally(category), self._selected, names)

    def finalize_voting(self) -> Dict[Tag, List[str]]:
        """Apply the award winners and move on to the live session."""

        self._require(WizardStep.VOTING)
        winners = finalize_voting(self._session, self.tallies.values(), set(self._selected))
        self.step = WizardStep.ACTIVE
        return winners

    def skip_voting(self) -> None:
        self._require(WizardStep.VOTING)
        for tally in self.tallies.values():
            tally.clear()
        self.step = WizardStep.ACTIVE

    # -- ACTIVE ----------------------------------------------------------------

    def back_to_voting(self) -> None:
        """Reopen voting; tallies and fines are kept for re-finalising."""

        self._require(WizardStep.ACTIVE)
        self.step = WizardStep.VOTING

    def apply_fine(self, player_id: str, kind: FineKind) -> SessionAdjustment:
        self._require(WizardStep.ACTIVE)
        adjustment = self.adjustment(player_id)
        adjustment.apply_fine(kind)
        LOGGER.debug("Applied %s fine to %s", kind.value, player_id)
        return adjustment

    def toggle_item(self, player_id: str) -> SessionAdjustment:
        self._require(WizardStep.ACTIVE)
        adjustment = self.adjustment(player_id)
        adjustment.toggle_item()
        return adjustment

    def toggle_paid_off(self, player_id: str) -> SessionAdjustment:
        """Mark or unmark a pay-off; marking needs something to pay."""

        self._require(WizardStep.ACTIVE)
        adjustment = self.adjustment(player_id)
        if not adjustment.is_paid_off and self.projected_total(player_id) <= 0:
            raise ValueError("Nothing to pay off for this player")
        adjustment.toggle_paid_off()
        return adjustment

    def projected_total(self, player_id: str) -> float:
        player = self.controller.get_player(player_id)
        return projected_total(player.total_owed, self.adjustment(player_id))

    def finish(self) -> Optional[SessionRecord]:
        """Commit the session; the wizard closes only when the commit succeeds."""

        self._require(WizardStep.ACTIVE)
        if self._committing:
            raise WizardStateError("Session commit already in progress")
        self._committing = True
        try:
            record = self.controller.finish_session(self._session, self.opponent, self._selected)
        finally:
            self._committing = False
        self.step = WizardStep.COMMITTED
        return record

    def cancel(self) -> None:
        self._require(WizardStep.SELECT, WizardStep.VOTING, WizardStep.ACTIVE)
        self._session.clear()
        self._selected.clear()
        self.step = WizardStep.CANCELLED
        LOGGER.info("Session vs %s cancelled", self.opponent or "unknown opponent")

    # -- presentation ------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """Export the wizard's state for JSON responses."""

        players: List[Dict[str, Any]] = []
        for player_id in self._selected:
            if not self.controller.has_player(player_id):
                continue
            player = self.controller.get_player(player_id)
            adjustment = self._session[player_id]
            players.append(
                {
                    "player_id": player_id,
                    "name": player.name,
                    "base": player.total_owed,
                    "added_amount": adjustment.added_amount,
                    "session_added": session_added(adjustment),
                    "item_brought": adjustment.item_brought,
                    "is_paid_off": adjustment.is_paid_off,
                    "tags": [tag.value for tag in adjustment.tags],
                    "projected_total": projected_total(player.total_owed, adjustment),
                }
            )
        return {
            "step": self.step.value,
            "opponent": self.opponent,
            "selected": self.selected,
            "votes": {
                category.value: tally.candidates(self._selected)
                for category, tally in self.tallies.items()
            },
            "players": players,
        }
