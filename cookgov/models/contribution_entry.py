"""ContributionEntry ORM — one append-only COOK ledger row.

Invariants:
    - Rows are inserted, never updated or deleted (no service exposes either)
    - value > 0, attribution ∈ {self, spend}
"""

from datetime import datetime

from sqlalchemy import String, Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class ContributionEntry(Base):
    __tablename__ = "contribution_entries"
    __table_args__ = (
        Index("ix_contribution_entries_team_contributor", "team_id", "contributor_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    contributor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    task_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    attribution: Mapped[str] = mapped_column(String(10), nullable=False, default="self")
    issued_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
