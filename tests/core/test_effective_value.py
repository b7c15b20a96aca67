"""Effective Value — decay per entry, cap on the sum.

Tests cover:
    - decay_factor is 1.0 when decay is disabled, strictly decreasing otherwise
    - 100 COOK at 12 months with 5%/month decay ≈ 54.88
    - A cap of 50 clamps the decayed sum and tracks the excess
    - Decay applies before the cap, never after
    - Future-dated entries are not inflated
"""

import math

import pytest

from cookgov.core.effective_value import (
    age_in_months, apply_cap, compute_effective_value, decay_factor,
    group_entries_by_contributor,
)
from cookgov.core.ledger_types import TeamConfig
from tests.core.helpers import NOW, entry, months_ago


# ─── decay_factor ────────────────────────────────────────────────

def test_decay_disabled_when_rate_missing_or_non_positive():
    assert decay_factor(24, None) == 1.0
    assert decay_factor(24, 0.0) == 1.0
    assert decay_factor(24, -0.1) == 1.0


def test_decay_factor_strictly_decreasing_with_age():
    factors = [decay_factor(age, 0.05) for age in (0, 1, 6, 12, 36)]
    assert factors[0] == 1.0
    assert all(a > b for a, b in zip(factors, factors[1:]))
    assert all(0 < f <= 1 for f in factors)


def test_age_in_months_never_negative():
    assert age_in_months(months_ago(-3), NOW) == 0.0


# ─── compute_effective_value ─────────────────────────────────────

def test_twelve_month_old_entry_decays_to_e_minus_point_six():
    config = TeamConfig(decay_rate=0.05)
    result = compute_effective_value([entry("a", 100, months_ago(12))], config, NOW)

    assert result.entries[0].decay_factor == pytest.approx(math.exp(-0.6))
    assert result.decayed_value == pytest.approx(54.88, abs=0.01)
    assert result.effective_value == pytest.approx(54.88, abs=0.01)
    assert result.decay_applied is True
    assert result.cap_applied is False
    assert result.excess_over_cap == 0.0


def test_cap_clamps_decayed_value_and_tracks_excess():
    config = TeamConfig(decay_rate=0.05, cap=50)
    result = compute_effective_value([entry("a", 100, months_ago(12))], config, NOW)

    assert result.effective_value == 50
    assert result.cap_applied is True
    assert result.excess_over_cap == pytest.approx(4.88, abs=0.01)
    assert result.raw_value == 100


def test_decay_runs_before_cap():
    # Capping first would give 80 * factor; decaying first keeps the sum under the cap
    config = TeamConfig(decay_rate=0.05, cap=80)
    result = compute_effective_value([entry("a", 100, months_ago(12))], config, NOW)
    assert result.effective_value == pytest.approx(100 * math.exp(-0.6))
    assert result.excess_over_cap == 0.0


def test_effective_value_never_exceeds_cap():
    config = TeamConfig(cap=120)
    entries = [entry("a", 90, months_ago(m)) for m in (0, 1, 2)]
    result = compute_effective_value(entries, config, NOW)
    assert result.effective_value == 120
    assert result.excess_over_cap == pytest.approx(150)


def test_no_entries_yields_zero():
    result = compute_effective_value([], TeamConfig(decay_rate=0.1, cap=10), NOW)
    assert result.effective_value == 0.0
    assert result.entries == []


def test_future_entry_counts_at_face_value():
    config = TeamConfig(decay_rate=0.05)
    result = compute_effective_value([entry("a", 40, months_ago(-2))], config, NOW)
    assert result.effective_value == 40


def test_apply_cap_without_cap_is_identity():
    assert apply_cap(321.5, None) == (321.5, 0.0)


# ─── group_entries_by_contributor ────────────────────────────────

def test_grouping_preserves_ledger_order():
    first = entry("a", 1, months_ago(3))
    second = entry("b", 2)
    third = entry("a", 3)
    grouped = group_entries_by_contributor([first, second, third])
    assert grouped == {"a": [first, third], "b": [second]}
