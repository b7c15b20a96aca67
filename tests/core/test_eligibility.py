"""Committee Eligibility — windowed raw activity and exclusion reasons.

Tests cover:
    - Pool {A:100, B:0, C:50} with minimum 0 → A and C eligible, B insufficient
    - The window counts raw values issued within the trailing calendar months
    - window_months <= 0 counts the whole history
    - Exclusion reasons make an otherwise active contributor ineligible
"""

from datetime import datetime, timezone

from cookgov.core.eligibility import (
    compute_active_value, eligible_subset, evaluate_eligibility, subtract_months,
)
from tests.core.helpers import NOW, entry, months_ago


def test_zero_activity_contributor_is_excluded():
    results = evaluate_eligibility(
        {
            "A": [entry("A", 100)],
            "B": [entry("B", 40, months_ago(10))],
            "C": [entry("C", 50)],
        },
        window_months=6,
        minimum_active_value=0,
        exclusions={},
        now=NOW,
    )
    assert [r.contributor_id for r in eligible_subset(results)] == ["A", "C"]

    b = next(r for r in results if r.contributor_id == "B")
    assert b.is_eligible is False
    assert b.active_value == 0
    assert b.total_value == 40
    assert b.exclusion_reasons == ["Insufficient active COOK in recent 6 months (0 COOK)"]


def test_active_value_is_raw_not_decayed():
    entries = [entry("a", 100, months_ago(5)), entry("a", 10, months_ago(8))]
    assert compute_active_value(entries, 6, NOW) == 100


def test_non_positive_window_counts_everything():
    entries = [entry("a", 100, months_ago(40)), entry("a", 1)]
    assert compute_active_value(entries, 0, NOW) == 101


def test_minimum_is_exclusive():
    results = evaluate_eligibility(
        {"a": [entry("a", 25)]}, 6, 25, {}, NOW,
    )
    assert results[0].is_eligible is False
    assert results[0].exclusion_reasons[0].startswith("Insufficient active COOK")


def test_exclusion_reasons_block_eligibility():
    results = evaluate_eligibility(
        {"a": [entry("a", 500)]},
        6,
        0,
        {"a": ["Currently serving on: Treasury"]},
        NOW,
    )
    assert results[0].is_eligible is False
    assert results[0].exclusion_reasons == ["Currently serving on: Treasury"]


def test_subtract_months_clamps_day_to_month_end():
    moment = datetime(2026, 3, 31, 9, 30, tzinfo=timezone.utc)
    assert subtract_months(moment, 1) == datetime(2026, 2, 28, 9, 30, tzinfo=timezone.utc)
    assert subtract_months(moment, 15) == datetime(2024, 12, 31, 9, 30, tzinfo=timezone.utc)
