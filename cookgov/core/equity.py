"""Equity Distributor — normalizes effective values across a team into percentages.

Invariants:
    - Σ equity ≈ 100 (± EQUITY_SUM_TOLERANCE) whenever the team total is > 0
    - Team total == 0 ⇒ every equity is 0 (no division by zero)
    - Whole-team batch: a distribution always covers every contributor with ledger entries
    - No contributors ⇒ InsufficientDataError

Design Decisions:
    - Model dispatch through _MODEL_CALCULATORS; PROPORTIONAL and CUSTOM resolve to the
      slicing computation until they are defined
    - Output sorted by contributor_id so identical snapshots yield identical lists
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Sequence

from cookgov.core.domain_types import EQUITY_TOTAL, EquityModel
from cookgov.core.effective_value import EffectiveValueResult, compute_effective_value
from cookgov.core.errors import InsufficientDataError
from cookgov.core.ledger_types import ContributionEntry, TeamConfig


@dataclass(frozen=True)
class EquityShare:
    contributor_id: str
    equity: float
    effective_value: float
    raw_value: float
    model: EquityModel
    total_team_effective_value: float
    cap_applied: bool
    decay_applied: bool


def _slicing(effective_values: Mapping[str, float]) -> dict[str, float]:
    total = sum(effective_values.values())
    if total <= 0:
        return {cid: 0.0 for cid in effective_values}
    return {cid: value / total * EQUITY_TOTAL for cid, value in effective_values.items()}


_MODEL_CALCULATORS: dict[EquityModel, Callable[[Mapping[str, float]], dict[str, float]]] = {
    EquityModel.SLICING: _slicing,
    EquityModel.PROPORTIONAL: _slicing,
    EquityModel.CUSTOM: _slicing,
}


def compute_equity_distribution(
    values: Mapping[str, EffectiveValueResult], model: EquityModel,
) -> list[EquityShare]:
    """Normalize precomputed effective values into equity shares."""
    if not values:
        raise InsufficientDataError("No contributors to distribute equity over")

    effective = {cid: result.effective_value for cid, result in values.items()}
    total = sum(effective.values())
    shares = _MODEL_CALCULATORS[model](effective)

    return [
        EquityShare(
            contributor_id=cid,
            equity=shares[cid],
            effective_value=values[cid].effective_value,
            raw_value=values[cid].raw_value,
            model=model,
            total_team_effective_value=total,
            cap_applied=values[cid].cap_applied,
            decay_applied=values[cid].decay_applied,
        )
        for cid in sorted(values)
    ]


def distribute_team_equity(
    entries_by_contributor: Mapping[str, Sequence[ContributionEntry]],
    config: TeamConfig,
    now: datetime,
) -> list[EquityShare]:
    """Full batch: effective value per contributor, then normalization."""
    values = {
        cid: compute_effective_value(entries, config, now)
        for cid, entries in entries_by_contributor.items()
    }
    return compute_equity_distribution(values, config.equity_model)
