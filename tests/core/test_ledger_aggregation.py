"""Ledger Aggregation — period buckets split by attribution."""

from datetime import datetime, timezone

from cookgov.core.domain_types import Attribution
from cookgov.core.ledger_aggregation import AggregationPeriod, aggregate_ledger
from tests.core.helpers import entry


def _at(year: int, month: int) -> datetime:
    return datetime(year, month, 10, tzinfo=timezone.utc)


ENTRIES = [
    entry("a", 10, _at(2026, 2)),
    entry("b", 5, _at(2025, 12), attribution=Attribution.SPEND),
    entry("a", 7, _at(2026, 2), attribution=Attribution.SPEND),
    entry("b", 3, _at(2026, 1)),
]


def test_monthly_buckets_sorted_oldest_first():
    totals = aggregate_ledger(ENTRIES, AggregationPeriod.MONTH)
    assert [t.period for t in totals] == ["2025-12", "2026-01", "2026-02"]
    feb = totals[-1]
    assert (feb.total, feb.self_total, feb.spend_total, feb.entry_count) == (17, 10, 7, 2)


def test_yearly_buckets():
    totals = aggregate_ledger(ENTRIES, AggregationPeriod.YEAR)
    assert [(t.period, t.total) for t in totals] == [("2025", 5), ("2026", 20)]
    assert all(t.total == t.self_total + t.spend_total for t in totals)


def test_empty_ledger():
    assert aggregate_ledger([], AggregationPeriod.MONTH) == []
