"""Audit Schemas — read-only view of audit log entries."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    action_type: str
    actor_id: str
    participants: list[str]
    outcome: str
    outcome_details: dict[str, Any]
    weights: dict[str, float]
    total_weight: float
    related_entity_id: str | None
    related_entity_type: str | None
    metadata: dict[str, Any] = Field(validation_alias="extra_metadata")
    timestamp: datetime
