"""Governance Workflow — proposal, objection and voting transition rules.

Tests cover:
    - Submission opens the objection window, or skips it for rule changes
    - Threshold 2 with 3 objections triggers voting exactly once
    - Objections after the window or from the same contributor are rejected
    - Constitutional votings use the constitutional period and threshold
    - Tally: weighted percentages, strict threshold, reject never approves
"""

from datetime import timedelta

import pytest

from cookgov.core.domain_types import ProposalStatus, ProposalType, VotingStatus
from cookgov.core.errors import StateConflictError, ValidationError
from cookgov.core.ledger_types import TeamConfig
from cookgov.core.workflow import (
    check_threshold, objection_totals, open_objection_window, plan_submission,
    plan_voting, proposal_outcome, should_trigger_voting, tally_votes,
    validate_close_objection_window, validate_objection, validate_tally,
    validate_trigger_voting, validate_vote, validate_withdrawal,
)
from tests.core.helpers import NOW

CONFIG = TeamConfig(objection_window_days=7, objection_threshold=2)


# ─── Submission ──────────────────────────────────────────────────

def test_submission_opens_objection_window():
    plan = plan_submission(ProposalType.BINDING_DECISION, ProposalStatus.DRAFT, CONFIG, NOW)
    assert plan.status == ProposalStatus.OBJECTION_WINDOW_OPEN
    assert plan.objection_window_closes_at == NOW + timedelta(days=7)
    assert plan.objection_threshold == 2
    assert plan.voting_triggered is False


def test_rule_changes_skip_objection_window():
    for proposal_type in (ProposalType.POLICY_CHANGE, ProposalType.CONSTITUTIONAL_CHALLENGE):
        plan = plan_submission(proposal_type, ProposalStatus.DRAFT, CONFIG, NOW)
        assert plan.status == ProposalStatus.VOTING_TRIGGERED
        assert plan.voting_triggered is True
        assert plan.objection_window_closes_at is None


def test_submission_requires_draft():
    with pytest.raises(StateConflictError):
        plan_submission(ProposalType.OTHER, ProposalStatus.APPROVED, CONFIG, NOW)


def test_objection_window_rejects_bad_arguments():
    with pytest.raises(ValidationError):
        open_objection_window(ProposalStatus.DRAFT, CONFIG, NOW, window_days=0)
    with pytest.raises(ValidationError):
        open_objection_window(ProposalStatus.DRAFT, CONFIG, NOW, threshold=-1)


# ─── Objections ──────────────────────────────────────────────────

def test_third_objection_triggers_voting_once():
    status = ProposalStatus.OBJECTION_WINDOW_OPEN
    triggered = False
    fired = []
    for count in (1, 2, 3, 4, 5):
        if should_trigger_voting(status, triggered, count, 0.0, threshold=2):
            status, triggered = ProposalStatus.VOTING_TRIGGERED, True
            fired.append(count)

    assert fired == [3]
    assert status == ProposalStatus.VOTING_TRIGGERED
    assert should_trigger_voting(status, triggered, 9, 9.0, threshold=2) is False


def test_weighted_count_alone_can_exceed_threshold():
    assert check_threshold(1, 2.5, 2) is True
    assert check_threshold(2, 2.0, 2) is False


def test_objection_totals_treat_missing_weight_as_zero():
    assert objection_totals([1.5, None, 2.0]) == (3, 3.5)


def test_objection_after_window_rejected():
    with pytest.raises(StateConflictError):
        validate_objection(
            ProposalStatus.OBJECTION_WINDOW_OPEN, NOW, [], "bob", NOW + timedelta(seconds=1),
        )


def test_duplicate_objection_rejected():
    with pytest.raises(StateConflictError):
        validate_objection(
            ProposalStatus.OBJECTION_WINDOW_OPEN, NOW + timedelta(days=1), ["bob"], "bob", NOW,
        )


def test_trigger_voting_only_once():
    validate_trigger_voting(ProposalStatus.OBJECTION_WINDOW_OPEN, False)
    with pytest.raises(StateConflictError):
        validate_trigger_voting(ProposalStatus.VOTING_TRIGGERED, True)


def test_close_window_requires_expiry_and_no_excess():
    closes = NOW
    with pytest.raises(StateConflictError):
        validate_close_objection_window(
            ProposalStatus.OBJECTION_WINDOW_OPEN, closes, 0, 0.0, 2, NOW - timedelta(hours=1),
        )
    with pytest.raises(StateConflictError):
        validate_close_objection_window(
            ProposalStatus.OBJECTION_WINDOW_OPEN, closes, 3, 0.0, 2, NOW,
        )
    validate_close_objection_window(ProposalStatus.OBJECTION_WINDOW_OPEN, closes, 1, 1.0, 2, NOW)


def test_withdrawal_rules():
    validate_withdrawal(ProposalStatus.DRAFT, "alice", "alice")
    with pytest.raises(ValidationError):
        validate_withdrawal(ProposalStatus.OBJECTION_WINDOW_OPEN, "alice", "bob")
    with pytest.raises(StateConflictError):
        validate_withdrawal(ProposalStatus.APPROVED, "alice", "alice")
    with pytest.raises(StateConflictError):
        validate_withdrawal(ProposalStatus.VOTING_TRIGGERED, "alice", "alice")


# ─── Voting ──────────────────────────────────────────────────────

def test_plan_voting_defaults():
    plan = plan_voting(ProposalStatus.VOTING_TRIGGERED, ProposalType.OTHER, TeamConfig(), NOW)
    assert plan.options == ["approve", "reject"]
    assert plan.approval_threshold == 50
    assert plan.closes_at == NOW + timedelta(days=7)
    assert plan.is_constitutional is False


def test_constitutional_voting_uses_constitutional_settings():
    config = TeamConfig(constitutional_voting_period_days=21, constitutional_approval_threshold=75)
    plan = plan_voting(
        ProposalStatus.VOTING_TRIGGERED, ProposalType.CONSTITUTIONAL_CHALLENGE, config, NOW,
    )
    assert plan.is_constitutional is True
    assert plan.approval_threshold == 75
    assert plan.closes_at == NOW + timedelta(days=21)


def test_plan_voting_rejects_bad_options():
    with pytest.raises(ValidationError):
        plan_voting(ProposalStatus.VOTING_TRIGGERED, ProposalType.OTHER, CONFIG, NOW, ["only"])
    with pytest.raises(ValidationError):
        plan_voting(ProposalStatus.VOTING_TRIGGERED, ProposalType.OTHER, CONFIG, NOW, ["a", "a"])
    with pytest.raises(StateConflictError):
        plan_voting(ProposalStatus.DRAFT, ProposalType.OTHER, CONFIG, NOW)


def test_vote_validation():
    options = ["approve", "reject"]
    closes = NOW + timedelta(days=1)
    validate_vote(VotingStatus.OPEN, closes, options, [], "a", "approve", NOW)
    with pytest.raises(ValidationError):
        validate_vote(VotingStatus.OPEN, closes, options, [], "a", "maybe", NOW)
    with pytest.raises(StateConflictError):
        validate_vote(VotingStatus.OPEN, closes, options, ["a"], "a", "reject", NOW)
    with pytest.raises(StateConflictError):
        validate_vote(VotingStatus.CLOSED, closes, options, [], "a", "approve", NOW)
    with pytest.raises(StateConflictError):
        validate_vote(VotingStatus.OPEN, NOW, options, [], "a", "approve", NOW)


def test_tally_waits_for_close_or_expiry():
    with pytest.raises(StateConflictError):
        validate_tally(VotingStatus.OPEN, NOW + timedelta(days=1), NOW)
    validate_tally(VotingStatus.OPEN, NOW, NOW)
    validate_tally(VotingStatus.CLOSED, NOW + timedelta(days=1), NOW)
    with pytest.raises(StateConflictError):
        validate_tally(VotingStatus.COMPLETED, NOW, NOW)


def test_tally_is_weighted():
    tally = tally_votes(
        [("approve", 30.0), ("reject", 10.0), ("approve", 20.0)],
        ["approve", "reject"],
        approval_threshold=50,
    )
    approve, reject = tally.results
    assert approve.vote_count == 2
    assert approve.weighted_vote_count == 50
    assert approve.percentage == pytest.approx(50 / 60 * 100)
    assert reject.percentage == pytest.approx(10 / 60 * 100)
    assert tally.total_votes == 3
    assert tally.winning_option == "approve"
    assert proposal_outcome(tally.winning_option) == ProposalStatus.APPROVED


def test_tally_tie_at_threshold_has_no_winner():
    tally = tally_votes([("approve", 5.0), ("reject", 5.0)], ["approve", "reject"], 50)
    assert tally.winning_option is None
    assert proposal_outcome(tally.winning_option) == ProposalStatus.REJECTED


def test_tally_without_votes():
    tally = tally_votes([], ["approve", "reject"], 50)
    assert tally.total_weight == 0
    assert all(r.percentage == 0.0 for r in tally.results)
    assert tally.winning_option is None


def test_reject_winning_rejects_proposal():
    tally = tally_votes([("reject", 9.0), ("approve", 1.0)], ["approve", "reject"], 50)
    assert tally.winning_option == "reject"
    assert proposal_outcome(tally.winning_option) == ProposalStatus.REJECTED
