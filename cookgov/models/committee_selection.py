"""CommitteeSelection ORM — a verified lottery outcome and its eligibility snapshot.

Invariants:
    - Written only after the lottery result passed verification
    - lottery_result holds every draw record; it is the audit trail of the selection
    - Rows are never updated
"""

from datetime import datetime

from sqlalchemy import String, Integer, Float, Boolean, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class CommitteeSelection(Base):
    __tablename__ = "committee_selections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    committee_id: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=new_id,
    )
    committee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    seed: Mapped[str] = mapped_column(String(200), nullable=False)
    reproducible: Mapped[bool] = mapped_column(Boolean, nullable=False)
    total_weight: Mapped[float] = mapped_column(Float, nullable=False)
    selected_members: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    eligible_members: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    lottery_result: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
