"""GovernanceWeightRecord ORM — latest voting/lottery weight per (team, contributor).

Invariants:
    - Unique per (team_id, contributor_id); recompute overwrites
    - weight == effective_value
"""

from datetime import datetime

from sqlalchemy import String, Float, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class GovernanceWeightRecord(Base):
    __tablename__ = "governance_weight_records"
    __table_args__ = (
        UniqueConstraint("team_id", "contributor_id", name="uq_weight_team_contributor"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    contributor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    raw_value: Mapped[float] = mapped_column(Float, nullable=False)
    effective_value: Mapped[float] = mapped_column(Float, nullable=False)
    cap_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    decay_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_updated: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
