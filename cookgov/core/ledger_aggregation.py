"""Ledger Aggregation — monthly and yearly COOK totals for ledger reporting.

Invariants:
    - Buckets are keyed "YYYY-MM" (month) or "YYYY" (year) on issued_at
    - total == self_total + spend_total for every bucket
    - Output sorted by period key, oldest first
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from cookgov.core.domain_types import Attribution
from cookgov.core.ledger_types import ContributionEntry


class AggregationPeriod(str, Enum):
    MONTH = "month"
    YEAR = "year"


@dataclass
class PeriodTotal:
    period: str
    total: float = 0.0
    self_total: float = 0.0
    spend_total: float = 0.0
    entry_count: int = 0


def period_key(entry: ContributionEntry, period: AggregationPeriod) -> str:
    if period == AggregationPeriod.YEAR:
        return f"{entry.issued_at.year:04d}"
    return f"{entry.issued_at.year:04d}-{entry.issued_at.month:02d}"


def aggregate_ledger(
    entries: Iterable[ContributionEntry], period: AggregationPeriod,
) -> list[PeriodTotal]:
    buckets: dict[str, PeriodTotal] = {}
    for entry in entries:
        key = period_key(entry, period)
        bucket = buckets.setdefault(key, PeriodTotal(period=key))
        bucket.total += entry.value
        bucket.entry_count += 1
        if entry.attribution == Attribution.SPEND:
            bucket.spend_total += entry.value
        else:
            bucket.self_total += entry.value
    return [buckets[k] for k in sorted(buckets)]
