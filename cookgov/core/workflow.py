"""Governance Workflow — proposal, objection and voting transition rules.

Invariants:
    - Every transition validates the current status first (StateConflictError otherwise)
    - Threshold exceeded ⇔ objection_count > threshold OR weighted_objection_count > threshold
    - The transition to VOTING_TRIGGERED fires at most once per proposal
    - A winning option must EXCEED the approval threshold; ties at the threshold do not win
    - Functions are PURE: they return plans and verdicts, the shell applies the mutation

Design Decisions:
    - POLICY_CHANGE and CONSTITUTIONAL_CHALLENGE skip the objection window on submission
    - Constitutional votings take the constitutional period and threshold from TeamConfig
    - Tally is allowed once the voting is CLOSED or its period has elapsed
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from cookgov.core.domain_types import (
    APPROVE_OPTION, EQUITY_TOTAL, REJECT_OPTION, TERMINAL_PROPOSAL_STATUSES,
    ProposalStatus, ProposalType, VotingStatus,
)
from cookgov.core.errors import StateConflictError, ValidationError
from cookgov.core.ledger_types import TeamConfig


SKIP_OBJECTION_WINDOW_TYPES = frozenset({
    ProposalType.POLICY_CHANGE,
    ProposalType.CONSTITUTIONAL_CHALLENGE,
})
DEFAULT_VOTE_OPTIONS: tuple[str, ...] = (APPROVE_OPTION, REJECT_OPTION)


@dataclass(frozen=True)
class SubmissionPlan:
    status: ProposalStatus
    voting_triggered: bool
    objection_threshold: float
    objection_window_opens_at: datetime | None = None
    objection_window_closes_at: datetime | None = None


@dataclass(frozen=True)
class VotingPlan:
    options: list[str]
    approval_threshold: float
    is_constitutional: bool
    opened_at: datetime
    closes_at: datetime


@dataclass(frozen=True)
class OptionResult:
    option: str
    vote_count: int
    weighted_vote_count: float
    percentage: float


@dataclass(frozen=True)
class TallyResult:
    total_votes: int
    total_weight: float
    approval_threshold: float
    winning_option: str | None
    results: list[OptionResult] = field(default_factory=list)


def require_status(current: str, allowed: Iterable[str], action: str) -> None:
    allowed = list(allowed)
    if current not in allowed:
        expected = " or ".join(str(getattr(s, "value", s)) for s in allowed)
        current_value = getattr(current, "value", current)
        raise StateConflictError(
            f"Cannot {action}: status is '{current_value}', expected {expected}",
            current_status=str(current_value),
        )


# ─── Objection window ────────────────────────────────────────────

def plan_submission(
    proposal_type: ProposalType,
    status: ProposalStatus,
    config: TeamConfig,
    now: datetime,
    objection_window_days: int | None = None,
    objection_threshold: float | None = None,
) -> SubmissionPlan:
    """Plan DRAFT → OBJECTION_WINDOW_OPEN, or straight to VOTING_TRIGGERED for skip types."""
    require_status(status, [ProposalStatus.DRAFT], "submit proposal")
    threshold = (
        config.objection_threshold if objection_threshold is None else objection_threshold
    )
    if threshold < 0:
        raise ValidationError("objection_threshold must be non-negative", field="objection_threshold")

    if proposal_type in SKIP_OBJECTION_WINDOW_TYPES:
        return SubmissionPlan(
            status=ProposalStatus.VOTING_TRIGGERED,
            voting_triggered=True,
            objection_threshold=threshold,
        )
    return open_objection_window(status, config, now, objection_window_days, threshold)


def open_objection_window(
    status: ProposalStatus,
    config: TeamConfig,
    now: datetime,
    window_days: int | None = None,
    threshold: float | None = None,
) -> SubmissionPlan:
    require_status(status, [ProposalStatus.DRAFT], "open objection window")
    days = config.objection_window_days if window_days is None else window_days
    if days <= 0:
        raise ValidationError("objection window must be at least one day", field="objection_window_days")
    threshold = config.objection_threshold if threshold is None else threshold
    if threshold < 0:
        raise ValidationError("objection_threshold must be non-negative", field="objection_threshold")
    return SubmissionPlan(
        status=ProposalStatus.OBJECTION_WINDOW_OPEN,
        voting_triggered=False,
        objection_threshold=threshold,
        objection_window_opens_at=now,
        objection_window_closes_at=now + timedelta(days=days),
    )


def validate_objection(
    status: ProposalStatus,
    closes_at: datetime | None,
    existing_objector_ids: Iterable[str],
    objector_id: str,
    now: datetime,
) -> None:
    require_status(status, [ProposalStatus.OBJECTION_WINDOW_OPEN], "add objection")
    if closes_at is not None and now >= closes_at:
        raise StateConflictError(
            "Objection window has closed", current_status=status.value,
        )
    if objector_id in set(existing_objector_ids):
        raise StateConflictError(
            f"Contributor '{objector_id}' has already objected",
            current_status=status.value,
        )


def objection_totals(weights: Iterable[float | None]) -> tuple[int, float]:
    """(objection_count, weighted_objection_count). Unweighted objections add 0 weight."""
    weights = list(weights)
    return len(weights), sum(w or 0.0 for w in weights)


def check_threshold(count: int, weighted_count: float, threshold: float) -> bool:
    return count > threshold or weighted_count > threshold


def should_trigger_voting(
    status: ProposalStatus,
    voting_triggered: bool,
    count: int,
    weighted_count: float,
    threshold: float,
) -> bool:
    """True only for the first threshold crossing while the window is open."""
    if voting_triggered or status != ProposalStatus.OBJECTION_WINDOW_OPEN:
        return False
    return check_threshold(count, weighted_count, threshold)


def validate_trigger_voting(status: ProposalStatus, voting_triggered: bool) -> None:
    if voting_triggered or status == ProposalStatus.VOTING_TRIGGERED:
        raise StateConflictError(
            "Voting has already been triggered for this proposal",
            current_status=status.value,
        )
    require_status(status, [ProposalStatus.OBJECTION_WINDOW_OPEN], "trigger voting")


def validate_close_objection_window(
    status: ProposalStatus,
    closes_at: datetime | None,
    count: int,
    weighted_count: float,
    threshold: float,
    now: datetime,
) -> None:
    """Closing approves the proposal, so the window must have run out unopposed."""
    require_status(status, [ProposalStatus.OBJECTION_WINDOW_OPEN], "close objection window")
    if closes_at is not None and now < closes_at:
        raise StateConflictError(
            f"Objection window is open until {closes_at.isoformat()}",
            current_status=status.value,
        )
    if check_threshold(count, weighted_count, threshold):
        raise StateConflictError(
            "Objection threshold exceeded; the proposal must go to a vote",
            current_status=status.value,
        )


def validate_withdrawal(status: ProposalStatus, proposed_by: str, actor_id: str) -> None:
    if status in TERMINAL_PROPOSAL_STATUSES:
        raise StateConflictError(
            f"Proposal is already {status.value}", current_status=status.value,
        )
    require_status(
        status,
        [ProposalStatus.DRAFT, ProposalStatus.OBJECTION_WINDOW_OPEN],
        "withdraw proposal",
    )
    if actor_id != proposed_by:
        raise ValidationError("Only the proposer can withdraw a proposal", field="actor_id")


# ─── Voting ──────────────────────────────────────────────────────

def plan_voting(
    proposal_status: ProposalStatus,
    proposal_type: ProposalType,
    config: TeamConfig,
    now: datetime,
    options: Sequence[str] | None = None,
) -> VotingPlan:
    require_status(proposal_status, [ProposalStatus.VOTING_TRIGGERED], "create voting")
    chosen = list(options) if options else list(DEFAULT_VOTE_OPTIONS)
    if len(chosen) < 2:
        raise ValidationError("A voting needs at least two options", field="options")
    if len(set(chosen)) != len(chosen):
        raise ValidationError("Voting options must be unique", field="options")

    constitutional = proposal_type == ProposalType.CONSTITUTIONAL_CHALLENGE
    if constitutional:
        days = config.constitutional_voting_period_days
        threshold = config.constitutional_approval_threshold
    else:
        days = config.voting_period_days
        threshold = config.approval_threshold

    return VotingPlan(
        options=chosen,
        approval_threshold=threshold,
        is_constitutional=constitutional,
        opened_at=now,
        closes_at=now + timedelta(days=days),
    )


def validate_vote(
    status: VotingStatus,
    closes_at: datetime | None,
    options: Sequence[str],
    existing_voter_ids: Iterable[str],
    voter_id: str,
    option: str,
    now: datetime,
) -> None:
    require_status(status, [VotingStatus.OPEN], "cast vote")
    if closes_at is not None and now >= closes_at:
        raise StateConflictError("Voting period has ended", current_status=status.value)
    if option not in options:
        raise ValidationError(
            f"Invalid option '{option}'; expected one of {', '.join(options)}",
            field="option",
        )
    if voter_id in set(existing_voter_ids):
        raise StateConflictError(
            f"Contributor '{voter_id}' has already voted", current_status=status.value,
        )


def validate_close_voting(status: VotingStatus) -> None:
    require_status(status, [VotingStatus.OPEN], "close voting")


def validate_tally(status: VotingStatus, closes_at: datetime | None, now: datetime) -> None:
    require_status(status, [VotingStatus.OPEN, VotingStatus.CLOSED], "tally voting")
    if status == VotingStatus.OPEN and closes_at is not None and now < closes_at:
        raise StateConflictError(
            f"Voting is open until {closes_at.isoformat()}; close it before tallying",
            current_status=status.value,
        )


def tally_votes(
    votes: Iterable[tuple[str, float]],
    options: Sequence[str],
    approval_threshold: float,
) -> TallyResult:
    """Per-option counts and weighted percentages. votes is (option, weight) pairs."""
    counts = {o: 0 for o in options}
    weighted = {o: 0.0 for o in options}
    for option, weight in votes:
        counts[option] += 1
        weighted[option] += weight

    total_weight = sum(weighted.values())
    results = [
        OptionResult(
            option=o,
            vote_count=counts[o],
            weighted_vote_count=weighted[o],
            percentage=(weighted[o] / total_weight * EQUITY_TOTAL) if total_weight > 0 else 0.0,
        )
        for o in options
    ]

    winners = [r for r in results if r.percentage > approval_threshold]
    winning = max(winners, key=lambda r: r.percentage).option if winners else None

    return TallyResult(
        total_votes=sum(counts.values()),
        total_weight=total_weight,
        approval_threshold=approval_threshold,
        winning_option=winning,
        results=results,
    )


def proposal_outcome(winning_option: str | None) -> ProposalStatus:
    """APPROVED iff some option other than 'reject' exceeded the threshold."""
    if winning_option is None or winning_option == REJECT_OPTION:
        return ProposalStatus.REJECTED
    return ProposalStatus.APPROVED
