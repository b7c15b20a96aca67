"""Effective Value — decay then cap over a contributor's full ledger history.

Invariants:
    - decay_factor ∈ (0, 1] and strictly decreasing in age when decay_rate > 0
    - decay_rate absent or <= 0 ⇒ factor 1.0 for every age
    - Decay is applied per entry BEFORE the cap is applied to the sum, never the reverse
    - effective_value <= cap whenever a cap is configured
    - Pure: no IO, no clock reads (callers pass `now`)

Design Decisions:
    - Age is measured in average months (AVERAGE_DAYS_PER_MONTH days) and clamped at 0,
      so entries dated in the future count at face value instead of growing
    - cap_applied reports that a cap is configured; excess_over_cap reports the clamped amount
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from cookgov.core.domain_types import AVERAGE_DAYS_PER_MONTH, SECONDS_PER_DAY
from cookgov.core.ledger_types import ContributionEntry, TeamConfig


@dataclass(frozen=True)
class EntryDecayDetail:
    """Per-entry audit detail: how much of one entry survives decay."""
    entry_id: str
    age_months: float
    raw_value: float
    decay_factor: float
    decayed_value: float


@dataclass(frozen=True)
class EffectiveValueResult:
    raw_value: float
    decayed_value: float
    effective_value: float
    excess_over_cap: float
    decay_amount: float
    cap_applied: bool
    decay_applied: bool
    entries: list[EntryDecayDetail] = field(default_factory=list)


# ─── Decay ───────────────────────────────────────────────────────

def age_in_months(issued_at: datetime, now: datetime) -> float:
    """Elapsed average months between issue and now. Never negative."""
    seconds = (now - issued_at).total_seconds()
    return max(0.0, seconds / (SECONDS_PER_DAY * AVERAGE_DAYS_PER_MONTH))


def decay_factor(age_months: float, decay_rate: float | None) -> float:
    if decay_rate is None or decay_rate <= 0:
        return 1.0
    return math.exp(-decay_rate * max(0.0, age_months))


def apply_decay(value: float, age_months: float, decay_rate: float | None) -> float:
    return value * decay_factor(age_months, decay_rate)


# ─── Cap ─────────────────────────────────────────────────────────

def apply_cap(total: float, cap: float | None) -> tuple[float, float]:
    """Clamp an aggregate against the cap. Returns (capped_value, excess_over_cap)."""
    if cap is None:
        return total, 0.0
    return min(total, cap), max(0.0, total - cap)


# ─── Pipeline ────────────────────────────────────────────────────

def compute_effective_value(
    entries: Iterable[ContributionEntry], config: TeamConfig, now: datetime,
) -> EffectiveValueResult:
    """Compose decay (per entry) and cap (on the sum) over one contributor's history."""
    details: list[EntryDecayDetail] = []
    raw_total = 0.0
    decayed_total = 0.0

    for entry in entries:
        age = age_in_months(entry.issued_at, now)
        factor = decay_factor(age, config.decay_rate)
        decayed = entry.value * factor
        raw_total += entry.value
        decayed_total += decayed
        details.append(EntryDecayDetail(
            entry_id=entry.id,
            age_months=age,
            raw_value=entry.value,
            decay_factor=factor,
            decayed_value=decayed,
        ))

    effective, excess = apply_cap(decayed_total, config.cap)

    return EffectiveValueResult(
        raw_value=raw_total,
        decayed_value=decayed_total,
        effective_value=effective,
        excess_over_cap=excess,
        decay_amount=raw_total - decayed_total,
        cap_applied=config.cap is not None,
        decay_applied=config.decay_rate is not None and config.decay_rate > 0,
        entries=details,
    )


def group_entries_by_contributor(
    entries: Iterable[ContributionEntry],
) -> dict[str, list[ContributionEntry]]:
    """Bucket a team's ledger per contributor, preserving ledger order."""
    grouped: dict[str, list[ContributionEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.contributor_id, []).append(entry)
    return grouped
