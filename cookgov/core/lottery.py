"""Weighted Lottery — seeded, without-replacement weighted sampling plus its verifier.

Invariants:
    - Same (pool, seats, seed) ⇒ identical selection, identical draw records
    - Seat draws run strictly sequentially; each draw removes its winner from the pool
    - len(selected_ids) == seats, no duplicates, every id drawn from the pool
    - Remaining total weight 0 ⇒ uniform pick among the remainder, same generator
    - Omitted seed ⇒ seed derived from the clock and reproducible=False

Design Decisions:
    - random.Random seeded with the seed string: local generator, global random state
      never touched, deterministic across runs for str seeds
    - The verifier replays the draw from the recorded seed in addition to the set checks
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from cookgov.core.domain_types import LOTTERY_WEIGHT_TOLERANCE
from cookgov.core.errors import InsufficientDataError, ValidationError


@dataclass(frozen=True)
class LotteryCandidate:
    contributor_id: str
    weight: float


@dataclass(frozen=True)
class SelectionDetail:
    """One candidate as seen by one draw: its cumulative boundary and whether it won."""
    contributor_id: str
    weight: float
    cumulative_weight: float
    random_value: float
    selected: bool


@dataclass(frozen=True)
class LotteryDraw:
    seat: int
    random_value: float
    pool_weight: float
    uniform_fallback: bool
    selected_id: str
    details: list[SelectionDetail] = field(default_factory=list)


@dataclass(frozen=True)
class WeightedLotteryResult:
    selected_ids: list[str]
    seats: int
    seed: str
    reproducible: bool
    total_weight: float
    selected_at: datetime
    draws: list[LotteryDraw] = field(default_factory=list)


# ─── Validation ──────────────────────────────────────────────────

def validate_lottery_input(pool: Sequence[LotteryCandidate], seats: int) -> None:
    if not pool:
        raise InsufficientDataError("Eligible pool is empty")
    if seats <= 0:
        raise ValidationError(f"seats must be positive, got {seats}", field="seats")
    if seats > len(pool):
        raise ValidationError(
            f"Cannot select {seats} members from a pool of {len(pool)}", field="seats",
        )

    seen: set[str] = set()
    for candidate in pool:
        if candidate.weight < 0:
            raise ValidationError(
                f"Candidate '{candidate.contributor_id}' has negative weight "
                f"{candidate.weight}",
                field="weight",
            )
        if candidate.contributor_id in seen:
            raise ValidationError(
                f"Candidate '{candidate.contributor_id}' appears twice in the pool",
                field="pool",
            )
        seen.add(candidate.contributor_id)


# ─── Draws ───────────────────────────────────────────────────────

def _weighted_draw(
    rng: random.Random, remaining: list[LotteryCandidate], seat: int,
) -> LotteryDraw:
    pool_weight = sum(c.weight for c in remaining)

    if pool_weight <= 0:
        r = rng.random()
        winner_index = min(int(r * len(remaining)), len(remaining) - 1)
        details = [
            SelectionDetail(c.contributor_id, c.weight, 0.0, r, i == winner_index)
            for i, c in enumerate(remaining)
        ]
        return LotteryDraw(
            seat, r, 0.0, True, remaining[winner_index].contributor_id, details,
        )

    r = rng.random() * pool_weight
    winner_index = None
    cumulative = 0.0
    boundaries = []
    for i, candidate in enumerate(remaining):
        cumulative += candidate.weight
        boundaries.append(cumulative)
        if winner_index is None and r < cumulative:
            winner_index = i
    if winner_index is None:
        # float rounding left r at the upper edge; last positive weight owns it
        winner_index = max(i for i, c in enumerate(remaining) if c.weight > 0)

    details = [
        SelectionDetail(c.contributor_id, c.weight, boundaries[i], r, i == winner_index)
        for i, c in enumerate(remaining)
    ]
    return LotteryDraw(
        seat, r, pool_weight, False, remaining[winner_index].contributor_id, details,
    )


def select_committee_members(
    pool: Sequence[LotteryCandidate],
    seats: int,
    seed: str | None = None,
    now: datetime | None = None,
) -> WeightedLotteryResult:
    """Select `seats` distinct candidates, probability proportional to weight."""
    validate_lottery_input(pool, seats)

    selected_at = now or datetime.now(timezone.utc)
    reproducible = seed is not None
    if seed is None:
        seed = f"auto-{selected_at.isoformat()}"

    rng = random.Random(seed)
    remaining = list(pool)
    draws: list[LotteryDraw] = []

    for seat in range(seats):
        draw = _weighted_draw(rng, remaining, seat)
        draws.append(draw)
        remaining = [c for c in remaining if c.contributor_id != draw.selected_id]

    return WeightedLotteryResult(
        selected_ids=[d.selected_id for d in draws],
        seats=seats,
        seed=seed,
        reproducible=reproducible,
        total_weight=sum(c.weight for c in pool),
        selected_at=selected_at,
        draws=draws,
    )


# ─── Verification ────────────────────────────────────────────────

def lottery_verification_failures(
    result: WeightedLotteryResult, pool: Sequence[LotteryCandidate],
) -> list[str]:
    """Independent re-check of a lottery result. Empty list ⇒ the result is valid."""
    failures = []
    pool_ids = {c.contributor_id for c in pool}

    outsiders = [cid for cid in result.selected_ids if cid not in pool_ids]
    if outsiders:
        failures.append(f"Selected ids not in eligible pool: {', '.join(outsiders)}")
    if len(set(result.selected_ids)) != len(result.selected_ids):
        failures.append("Duplicate ids in selection")
    if len(result.selected_ids) != result.seats:
        failures.append(
            f"Selected {len(result.selected_ids)} members for {result.seats} seats"
        )

    recomputed = sum(c.weight for c in pool)
    if abs(recomputed - result.total_weight) > LOTTERY_WEIGHT_TOLERANCE:
        failures.append(
            f"Total weight mismatch: recorded {result.total_weight}, "
            f"recomputed {recomputed}"
        )

    if failures:
        return failures

    try:
        replay = select_committee_members(
            pool, result.seats, result.seed, now=result.selected_at,
        )
    except (ValidationError, InsufficientDataError) as e:
        return [f"Pool cannot be replayed: {e.message}"]
    if replay.selected_ids != result.selected_ids:
        failures.append("Replaying the recorded seed yields a different selection")
    return failures


def verify_lottery_result(
    result: WeightedLotteryResult, pool: Sequence[LotteryCandidate],
) -> bool:
    return not lottery_verification_failures(result, pool)
