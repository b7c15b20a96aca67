"""Governance Weight — voting and lottery weight, defined as effective value.

Invariants:
    - weight == effective_value for the same (entries, config, now)
    - Computed on demand; never derived from an equity share

Design Decisions:
    - Separate record type from EquityShare so equity-model changes never alter weights
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence

from cookgov.core.effective_value import compute_effective_value
from cookgov.core.ledger_types import ContributionEntry, TeamConfig


@dataclass(frozen=True)
class GovernanceWeight:
    contributor_id: str
    weight: float
    raw_value: float
    effective_value: float
    cap_applied: bool
    decay_applied: bool


def compute_governance_weight(
    contributor_id: str,
    entries: Sequence[ContributionEntry],
    config: TeamConfig,
    now: datetime,
) -> GovernanceWeight:
    result = compute_effective_value(entries, config, now)
    return GovernanceWeight(
        contributor_id=contributor_id,
        weight=result.effective_value,
        raw_value=result.raw_value,
        effective_value=result.effective_value,
        cap_applied=result.cap_applied,
        decay_applied=result.decay_applied,
    )


def compute_team_weights(
    entries_by_contributor: Mapping[str, Sequence[ContributionEntry]],
    config: TeamConfig,
    now: datetime,
) -> dict[str, GovernanceWeight]:
    return {
        cid: compute_governance_weight(cid, entries, config, now)
        for cid, entries in entries_by_contributor.items()
    }
