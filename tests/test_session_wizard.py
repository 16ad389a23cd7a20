"""Mini README: Tests for the session wizard state machine.

Walks the SELECT -> VOTING -> ACTIVE flow, checks guards on each step and
verifies that nothing is persisted before ``finish``.
"""

from __future__ import annotations

import pytest

from finesledger.controller import LedgerController, LedgerWriteError
from finesledger.ledger import FineKind, Tag
from finesledger.session import SessionWizard, WizardStateError, WizardStep


def _ready_wizard(controller: LedgerController, *player_ids: str) -> SessionWizard:
    wizard = SessionWizard(controller)
    wizard.set_opponent("Riverside")
    for player_id in player_ids:
        wizard.toggle_player(player_id)
    wizard.start_voting()
    return wizard


def test_voting_requires_squad_and_opponent(controller: LedgerController, add_roster) -> None:
    """Voting opens only once a squad and an opponent are set."""

    ids = add_roster(controller, A=0.0)
    wizard = SessionWizard(controller)

    with pytest.raises(ValueError):
        wizard.start_voting()
    wizard.toggle_player(ids["A"])
    with pytest.raises(ValueError):
        wizard.start_voting()
    wizard.set_opponent("  Rovers ")
    wizard.start_voting()
    assert wizard.step is WizardStep.VOTING
    assert wizard.opponent == "Rovers"


def test_reselecting_player_keeps_previous_adjustment(controller: LedgerController, add_roster) -> None:
    """Deselecting then reselecting a player keeps their earlier fines."""

    ids = add_roster(controller, A=0.0)
    wizard = SessionWizard(controller)
    wizard.toggle_player(ids["A"])
    wizard._session[ids["A"]].apply_fine(FineKind.GREEN)

    assert wizard.toggle_player(ids["A"]) is False
    assert wizard.toggle_player(ids["A"]) is True
    assert wizard.adjustment(ids["A"]).tags == [Tag.GRN]


def test_skip_voting_clears_votes(controller: LedgerController, add_roster) -> None:
    """Skipping voting drops the tallies and applies no awards."""

    ids = add_roster(controller, A=0.0)
    wizard = _ready_wizard(controller, ids["A"])
    wizard.add_nominee(Tag.MOTM, ids["A"])

    wizard.skip_voting()

    assert wizard.step is WizardStep.ACTIVE
    assert wizard.tallies[Tag.MOTM].votes() == {}
    assert wizard.adjustment(ids["A"]).tags == []


def test_nominee_must_be_in_squad(controller: LedgerController, add_roster) -> None:
    """Only selected players can be nominated or offered as nominees."""

    ids = add_roster(controller, A=0.0, B=0.0)
    wizard = _ready_wizard(controller, ids["A"])

    with pytest.raises(ValueError):
        wizard.add_nominee(Tag.DOTD, ids["B"])
    assert wizard.nominee_options(Tag.DOTD) == [ids["A"]]


def test_full_flow_commits_awards_and_fines(controller: LedgerController, add_roster) -> None:
    """Awards, cards and item fines all land in balances and tags on finish."""

    ids = add_roster(controller, A=1.0, B=0.0)
    wizard = _ready_wizard(controller, ids["A"], ids["B"])
    wizard.add_nominee(Tag.MOTM, ids["A"])
    wizard.add_nominee(Tag.MOTM, ids["B"])
    wizard.add_nominee(Tag.DOTD, ids["B"])

    winners = wizard.finalize_voting()
    assert sorted(winners[Tag.MOTM]) == sorted([ids["A"], ids["B"]])

    wizard.toggle_item(ids["B"])
    wizard.apply_fine(ids["A"], FineKind.YELLOW)
    assert wizard.projected_total(ids["A"]) == pytest.approx(1.0 + 2.0 + 5.0 + 1.0)
    assert controller.get_player(ids["A"]).total_owed == pytest.approx(1.0)

    record = wizard.finish()

    assert wizard.step is WizardStep.COMMITTED
    assert controller.get_player(ids["A"]).total_owed == pytest.approx(9.0)
    assert controller.get_player(ids["B"]).total_owed == pytest.approx(4.0)
    tags = {transaction.player_id: transaction.tags for transaction in record.transactions}
    assert tags[ids["A"]] == [Tag.MOTM, Tag.YLW, Tag.ITEM]
    assert tags[ids["B"]] == [Tag.MOTM, Tag.DOTD]


def test_deselected_players_are_not_committed(controller: LedgerController, add_roster) -> None:
    """Players taken out of the squad are left out of the commit."""

    ids = add_roster(controller, A=0.0, B=0.0)
    wizard = SessionWizard(controller)
    wizard.set_opponent("Town")
    wizard.toggle_player(ids["A"])
    wizard.toggle_player(ids["B"])
    wizard.toggle_player(ids["B"])
    wizard.start_voting()
    wizard.skip_voting()

    wizard.finish()

    assert controller.get_player(ids["A"]).total_owed == pytest.approx(1.0)
    assert controller.get_player(ids["B"]).total_owed == 0


def test_pay_off_needs_positive_projection(controller: LedgerController, add_roster) -> None:
    """Pay-off can only be marked when the projected total is positive."""

    ids = add_roster(controller, A=0.0)
    wizard = _ready_wizard(controller, ids["A"])
    wizard.skip_voting()
    wizard.toggle_item(ids["A"])

    with pytest.raises(ValueError):
        wizard.toggle_paid_off(ids["A"])

    wizard.apply_fine(ids["A"], FineKind.STANDARD)
    assert wizard.toggle_paid_off(ids["A"]).is_paid_off is True
    assert wizard.projected_total(ids["A"]) == 0
    assert wizard.toggle_paid_off(ids["A"]).is_paid_off is False


def test_cancel_discards_without_writing(controller: LedgerController, add_roster) -> None:
    """Cancelling discards the session and closes the wizard without writing."""

    ids = add_roster(controller, A=0.0)
    wizard = _ready_wizard(controller, ids["A"])
    wizard.skip_voting()
    wizard.apply_fine(ids["A"], FineKind.RED)

    wizard.cancel()

    assert wizard.step is WizardStep.CANCELLED
    assert controller.get_player(ids["A"]).total_owed == 0
    assert controller.history == []
    with pytest.raises(WizardStateError):
        wizard.finish()


def test_failed_finish_stays_active_for_retry(failing_store) -> None:
    """A failed commit leaves the wizard active so the operator can retry."""

    controller = LedgerController(failing_store)
    player_id = controller.add_player("A")
    wizard = _ready_wizard(controller, player_id)
    wizard.skip_voting()
    failing_store.arm(1)

    with pytest.raises(LedgerWriteError):
        wizard.finish()
    assert wizard.step is WizardStep.ACTIVE

    wizard.finish()
    assert controller.get_player(player_id).total_owed == pytest.approx(1.0)


def test_fines_rejected_outside_active_step(controller: LedgerController, add_roster) -> None:
    """Fines cannot be applied before the session is active."""

    ids = add_roster(controller, A=0.0)
    wizard = SessionWizard(controller)
    wizard.toggle_player(ids["A"])

    with pytest.raises(WizardStateError):
        wizard.apply_fine(ids["A"], FineKind.STANDARD)


def test_back_to_voting_refinalises_without_double_charging(
    controller: LedgerController, add_roster
) -> None:
    """Going back to voting and finalising again keeps each award and bonus exactly once."""

    ids = add_roster(controller, A=0.0, B=0.0, C=0.0)
    wizard = _ready_wizard(controller, ids["A"], ids["B"], ids["C"])
    wizard.add_nominee(Tag.MOTM, ids["A"])
    wizard.add_nominee(Tag.DOTD, ids["C"])
    wizard.finalize_voting()
    wizard.apply_fine(ids["A"], FineKind.GREEN)

    wizard.back_to_voting()
    assert wizard.step is WizardStep.VOTING
    assert wizard.tallies[Tag.MOTM].votes() == {ids["A"]: 1}
    wizard.add_nominee(Tag.MOTM, ids["B"])
    winners = wizard.finalize_voting()

    assert sorted(winners[Tag.MOTM]) == sorted([ids["A"], ids["B"]])
    assert wizard.adjustment(ids["A"]).tags == [Tag.GRN, Tag.MOTM]
    assert wizard.adjustment(ids["A"]).added_amount == pytest.approx(2.0 + 2.0)
    assert wizard.adjustment(ids["B"]).tags == [Tag.MOTM]
    assert wizard.adjustment(ids["B"]).added_amount == pytest.approx(2.0)
    assert wizard.adjustment(ids["C"]).tags == [Tag.DOTD]
    assert wizard.adjustment(ids["C"]).added_amount == pytest.approx(2.0)

    wizard.back_to_voting()
    wizard.finalize_voting()
    record = wizard.finish()

    amounts = {transaction.player_id: transaction.amount for transaction in record.transactions}
    assert amounts[ids["A"]] == pytest.approx(2.0 + 2.0 + 1.0)
    assert amounts[ids["B"]] == pytest.approx(2.0 + 1.0)
    assert amounts[ids["C"]] == pytest.approx(2.0 + 1.0)


def test_back_to_voting_only_from_active(controller: LedgerController, add_roster) -> None:
    """Voting can only be reopened from the live session."""

    ids = add_roster(controller, A=0.0)
    wizard = _ready_wizard(controller, ids["A"])

    with pytest.raises(WizardStateError):
        wizard.back_to_voting()


def test_votes_only_for_squad_players(controller: LedgerController, add_roster) -> None:
    """Votes for players outside the squad are refused rather than silently tallied."""

    ids = add_roster(controller, A=0.0, B=0.0)
    wizard = _ready_wizard(controller, ids["A"])

    with pytest.raises(ValueError):
        wizard.change_vote(Tag.MOTM, ids["B"], 1)
    with pytest.raises(ValueError):
        wizard.change_vote(Tag.DOTD, "never-selected", 3)
    assert wizard.tallies[Tag.MOTM].votes() == {}
    assert wizard.tallies[Tag.DOTD].votes() == {}

    wizard.add_nominee(Tag.MOTM, ids["A"])
    assert wizard.change_vote(Tag.MOTM, ids["A"], 1) == 2
