"""AuditLogEntry ORM — immutable record of one governance action.

Invariants:
    - Insert-only: no service, repository or route updates or deletes rows
    - total_weight == sum(weights.values())
    - `metadata` column is exposed as `extra_metadata` (the name is reserved on Base)
"""

from datetime import datetime

from sqlalchemy import String, Text, Float, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class AuditLogEntry(Base):
    __tablename__ = "audit_log_entries"
    __table_args__ = (
        Index("ix_audit_log_team_timestamp", "team_id", "timestamp"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    participants: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    outcome: Mapped[str] = mapped_column(Text, nullable=False)
    outcome_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    weights: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    total_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    related_entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    related_entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    extra_metadata: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict,
    )
    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
