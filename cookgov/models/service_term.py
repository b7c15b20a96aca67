"""ServiceTerm ORM — one contributor's period of service on a committee.

Invariants:
    - status transitions: active -> completed | terminated, never back
    - end_date and duration_days are set only when the term ends
    - At most one active term per (contributor_id, committee_id), enforced in the service
"""

from datetime import datetime

from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class ServiceTerm(Base):
    __tablename__ = "service_terms"
    __table_args__ = (
        Index("ix_service_terms_team_status", "team_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    committee_id: Mapped[str] = mapped_column(String(36), nullable=False)
    committee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contributor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    start_date: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    duration_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
