"""Audit Entries — pure construction of immutable governance audit records.

Invariants:
    - AuditEntry is frozen; there is no update or delete operation anywhere
    - total_weight == sum(weights.values())
    - participants defaults to the weighted contributors, in insertion order
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from cookgov.core.domain_types import SYSTEM_ACTOR, GovernanceActionType


@dataclass(frozen=True)
class AuditEntry:
    team_id: str
    action_type: GovernanceActionType
    actor_id: str
    outcome: str
    timestamp: datetime
    participants: list[str] = field(default_factory=list)
    weights: dict[str, float] = field(default_factory=dict)
    total_weight: float = 0.0
    outcome_details: dict[str, Any] = field(default_factory=dict)
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def build_audit_entry(
    team_id: str,
    action_type: GovernanceActionType,
    outcome: str,
    now: datetime,
    actor_id: str | None = None,
    participants: Sequence[str] | None = None,
    weights: Mapping[str, float] | None = None,
    outcome_details: Mapping[str, Any] | None = None,
    related_entity_id: str | None = None,
    related_entity_type: str | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> AuditEntry:
    weights = dict(weights or {})
    return AuditEntry(
        team_id=team_id,
        action_type=action_type,
        actor_id=actor_id or SYSTEM_ACTOR,
        outcome=outcome,
        timestamp=now,
        participants=list(participants) if participants is not None else list(weights),
        weights=weights,
        total_weight=sum(weights.values()),
        outcome_details=dict(outcome_details or {}),
        related_entity_id=related_entity_id,
        related_entity_type=related_entity_type,
        metadata=dict(metadata or {}),
    )
