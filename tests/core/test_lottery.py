"""Weighted Lottery — seeded selection and independent verification.

Tests cover:
    - Pool {A:3, B:1}, one seat, seed "fixed" → identical pick on every run
    - Selections are distinct, complete and drawn from the pool
    - Zero total weight falls back to a uniform, still deterministic, pick
    - The verifier accepts genuine results and rejects injected or tampered ones
    - Invalid inputs raise before any draw
"""

import dataclasses
from collections import Counter

import pytest

from cookgov.core.errors import InsufficientDataError, ValidationError
from cookgov.core.lottery import (
    LotteryCandidate, lottery_verification_failures, select_committee_members,
    verify_lottery_result,
)
from tests.core.helpers import NOW

POOL = [LotteryCandidate("A", 3.0), LotteryCandidate("B", 1.0)]


# ─── Determinism ─────────────────────────────────────────────────

def test_fixed_seed_reproduces_pick():
    first = select_committee_members(POOL, 1, seed="fixed", now=NOW)
    second = select_committee_members(POOL, 1, seed="fixed", now=NOW)

    assert first.selected_ids == second.selected_ids
    assert first.draws == second.draws
    assert first.selected_ids[0] in {"A", "B"}
    assert first.reproducible is True
    assert first.seed == "fixed"
    assert first.total_weight == 4.0


def test_missing_seed_is_recorded_and_flagged():
    result = select_committee_members(POOL, 1, now=NOW)
    assert result.reproducible is False
    assert result.seed == f"auto-{NOW.isoformat()}"
    assert verify_lottery_result(result, POOL) is True


def test_weights_bias_selection():
    picks = Counter(
        select_committee_members(POOL, 1, seed=f"seed-{i}", now=NOW).selected_ids[0]
        for i in range(400)
    )
    assert picks["A"] > picks["B"]


def test_selection_is_distinct_and_complete():
    pool = [LotteryCandidate(f"c{i}", float(i + 1)) for i in range(6)]
    result = select_committee_members(pool, 6, seed="all-seats", now=NOW)
    assert sorted(result.selected_ids) == sorted(c.contributor_id for c in pool)
    assert [d.seat for d in result.draws] == list(range(6))


def test_draw_records_cumulative_boundaries():
    result = select_committee_members(POOL, 1, seed="fixed", now=NOW)
    draw = result.draws[0]
    assert [d.cumulative_weight for d in draw.details] == [3.0, 4.0]
    assert 0 <= draw.random_value < draw.pool_weight == 4.0
    assert sum(d.selected for d in draw.details) == 1


def test_zero_weight_pool_falls_back_to_uniform():
    pool = [LotteryCandidate("x", 0.0), LotteryCandidate("y", 0.0), LotteryCandidate("z", 0.0)]
    result = select_committee_members(pool, 2, seed="zeros", now=NOW)
    again = select_committee_members(pool, 2, seed="zeros", now=NOW)

    assert result.selected_ids == again.selected_ids
    assert len(set(result.selected_ids)) == 2
    assert all(d.uniform_fallback for d in result.draws)


def test_zero_weight_candidate_never_beats_positive_weight():
    pool = [LotteryCandidate("idle", 0.0), LotteryCandidate("busy", 5.0)]
    for i in range(50):
        result = select_committee_members(pool, 1, seed=f"s{i}", now=NOW)
        assert result.selected_ids == ["busy"]


# ─── Validation ──────────────────────────────────────────────────

def test_empty_pool_is_insufficient_data():
    with pytest.raises(InsufficientDataError):
        select_committee_members([], 1, seed="x")


def test_seat_count_must_fit_pool():
    with pytest.raises(ValidationError):
        select_committee_members(POOL, 0, seed="x")
    with pytest.raises(ValidationError):
        select_committee_members(POOL, 3, seed="x")


def test_negative_weight_rejected():
    with pytest.raises(ValidationError):
        select_committee_members([LotteryCandidate("a", -1.0)], 1, seed="x")


def test_duplicate_candidate_rejected():
    with pytest.raises(ValidationError):
        select_committee_members(
            [LotteryCandidate("a", 1.0), LotteryCandidate("a", 2.0)], 1, seed="x",
        )


# ─── Verification ────────────────────────────────────────────────

def test_verifier_accepts_genuine_result():
    result = select_committee_members(POOL, 2, seed="fixed", now=NOW)
    assert verify_lottery_result(result, POOL) is True


def test_verifier_rejects_injected_id():
    result = select_committee_members(POOL, 1, seed="fixed", now=NOW)
    forged = dataclasses.replace(result, selected_ids=["mallory"])
    failures = lottery_verification_failures(forged, POOL)

    assert verify_lottery_result(forged, POOL) is False
    assert failures == ["Selected ids not in eligible pool: mallory"]


def test_verifier_rejects_duplicates_and_wrong_count():
    result = select_committee_members(POOL, 2, seed="fixed", now=NOW)
    forged = dataclasses.replace(result, selected_ids=["A", "A", "B"])
    failures = lottery_verification_failures(forged, POOL)
    assert "Duplicate ids in selection" in failures
    assert "Selected 3 members for 2 seats" in failures


def test_verifier_rejects_weight_mismatch():
    result = select_committee_members(POOL, 1, seed="fixed", now=NOW)
    heavier_pool = [LotteryCandidate("A", 30.0), LotteryCandidate("B", 1.0)]
    assert verify_lottery_result(result, heavier_pool) is False


def test_verifier_rejects_swapped_pick():
    result = select_committee_members(POOL, 1, seed="fixed", now=NOW)
    other = "B" if result.selected_ids == ["A"] else "A"
    forged = dataclasses.replace(result, selected_ids=[other])
    assert lottery_verification_failures(forged, POOL) == [
        "Replaying the recorded seed yields a different selection",
    ]
