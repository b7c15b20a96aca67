"""Service Term Rules — term lifecycle checks and eligibility exclusion reasons.

Invariants:
    - A term can only be ended from ACTIVE; COMPLETED and TERMINATED are final
    - duration_days is set only when a term ends
    - Cooling-off applies iff 0 <= whole days since end < cooling_off_days
    - Reasons are human-readable strings, one per exclusion category
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from cookgov.core.domain_types import SECONDS_PER_DAY, ServiceTermStatus
from cookgov.core.errors import StateConflictError, ValidationError


@dataclass(frozen=True)
class ServiceTermSnapshot:
    contributor_id: str
    committee_id: str
    committee_name: str
    status: ServiceTermStatus
    start_date: datetime
    end_date: datetime | None = None


@dataclass(frozen=True)
class ProposalUnderReview:
    """A proposal whose objection window is open, with everyone party to it."""
    title: str
    proposed_by: str
    objector_ids: tuple[str, ...] = field(default_factory=tuple)


# ─── Term lifecycle ──────────────────────────────────────────────

def whole_days_between(start: datetime, end: datetime) -> int:
    return math.floor((end - start).total_seconds() / SECONDS_PER_DAY)


def validate_term_end(
    status: ServiceTermStatus, final_status: ServiceTermStatus,
) -> None:
    """Raise unless an ACTIVE term is being moved to COMPLETED or TERMINATED."""
    if final_status == ServiceTermStatus.ACTIVE:
        raise ValidationError(
            "A service term can only end as completed or terminated", field="status",
        )
    if status != ServiceTermStatus.ACTIVE:
        raise StateConflictError(
            f"Service term already ended with status '{status.value}'",
            current_status=status.value,
        )


def compute_term_duration(start_date: datetime, end_date: datetime) -> int:
    return max(0, whole_days_between(start_date, end_date))


def has_active_term(
    terms: Iterable[ServiceTermSnapshot], contributor_id: str, committee_id: str,
) -> bool:
    return any(
        t.contributor_id == contributor_id
        and t.committee_id == committee_id
        and t.status == ServiceTermStatus.ACTIVE
        for t in terms
    )


# ─── Exclusions ──────────────────────────────────────────────────

def _in_cooling_off(term: ServiceTermSnapshot, cooling_off_days: int, now: datetime) -> bool:
    if cooling_off_days <= 0 or term.end_date is None:
        return False
    if term.status == ServiceTermStatus.ACTIVE:
        return False
    days_since_end = whole_days_between(term.end_date, now)
    return 0 <= days_since_end < cooling_off_days


def derive_exclusion_reasons(
    terms: Iterable[ServiceTermSnapshot],
    cooling_off_days: int,
    now: datetime,
    proposals_under_review: Iterable[ProposalUnderReview] = (),
) -> dict[str, list[str]]:
    """Map contributor_id → exclusion reasons. Contributors with none are absent."""
    serving: dict[str, list[str]] = {}
    cooling: dict[str, list[str]] = {}
    reviewing: dict[str, list[str]] = {}

    for term in terms:
        if term.status == ServiceTermStatus.ACTIVE:
            serving.setdefault(term.contributor_id, []).append(term.committee_name)
        elif _in_cooling_off(term, cooling_off_days, now):
            cooling.setdefault(term.contributor_id, []).append(term.committee_name)

    for proposal in proposals_under_review:
        for party in {proposal.proposed_by, *proposal.objector_ids}:
            reviewing.setdefault(party, []).append(proposal.title)

    reasons: dict[str, list[str]] = {}
    for cid, names in serving.items():
        reasons.setdefault(cid, []).append(f"Currently serving on: {', '.join(names)}")
    for cid, names in cooling.items():
        reasons.setdefault(cid, []).append(
            f"In cooling-off period ({cooling_off_days} days) "
            f"after serving on: {', '.join(names)}"
        )
    for cid, titles in reviewing.items():
        for title in titles:
            reasons.setdefault(cid, []).append(f"Under proposal review: {title}")
    return reasons
