"""Committee Eligibility — windowed raw activity plus exclusion filtering.

Invariants:
    - active_value is a RAW (undecayed) sum of entries issued within the trailing window
    - window_months <= 0 ⇒ every entry counts
    - is_eligible ⇔ active_value > minimum_active_value AND no exclusion reasons
    - Every contributor gets a result, eligible or not, with full reasoning

Design Decisions:
    - The window is measured in calendar months (same day-of-month, clamped to month end),
      unlike decay age which uses average months
    - Raw windowed activity and decayed governance weight stay separate quantities
"""

import calendar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from cookgov.core.ledger_types import ContributionEntry


@dataclass(frozen=True)
class CommitteeEligibilityResult:
    contributor_id: str
    is_eligible: bool
    active_value: float
    total_value: float
    window_months: int
    exclusion_reasons: list[str] = field(default_factory=list)


def subtract_months(moment: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier, day clamped to month length."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(now: datetime, window_months: int) -> datetime | None:
    if window_months <= 0:
        return None
    return subtract_months(now, window_months)


def compute_active_value(
    entries: Iterable[ContributionEntry], window_months: int, now: datetime,
) -> float:
    start = window_start(now, window_months)
    return sum(
        e.value for e in entries
        if start is None or e.issued_at >= start
    )


def _insufficient_activity_reason(active_value: float, window_months: int) -> str:
    if window_months <= 0:
        return f"Insufficient active COOK ({active_value:g} COOK)"
    return (
        f"Insufficient active COOK in recent {window_months} months "
        f"({active_value:g} COOK)"
    )


def evaluate_eligibility(
    entries_by_contributor: Mapping[str, Sequence[ContributionEntry]],
    window_months: int,
    minimum_active_value: float,
    exclusions: Mapping[str, Sequence[str]],
    now: datetime,
) -> list[CommitteeEligibilityResult]:
    """Evaluate every contributor. Sorted by contributor_id."""
    results = []
    for cid in sorted(entries_by_contributor):
        entries = entries_by_contributor[cid]
        active = compute_active_value(entries, window_months, now)
        reasons = list(exclusions.get(cid, ()))
        if active <= minimum_active_value:
            reasons.insert(0, _insufficient_activity_reason(active, window_months))
        results.append(CommitteeEligibilityResult(
            contributor_id=cid,
            is_eligible=not reasons,
            active_value=active,
            total_value=sum(e.value for e in entries),
            window_months=window_months,
            exclusion_reasons=reasons,
        ))
    return results


def eligible_subset(
    results: Iterable[CommitteeEligibilityResult],
) -> list[CommitteeEligibilityResult]:
    return [r for r in results if r.is_eligible]
