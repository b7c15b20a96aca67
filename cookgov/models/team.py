"""Team ORM — a team and its governance configuration.

Invariants:
    - id is caller-supplied (the team id from the identity system)
    - Config columns are nullable: NULL means "use the Settings default"
    - cap > 0 and 0 <= decay_rate <= 1 when set (validated in core before write)
"""

from datetime import datetime

from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base
from cookgov.db.types import UTCDateTime, utc_now


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # COOK valuation
    cap: Mapped[float | None] = mapped_column(Float, nullable=True)
    decay_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    equity_model: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Committees
    eligibility_window_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    minimum_active_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    cooling_off_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lottery_weight_source: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Proposals and voting
    objection_window_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    objection_threshold: Mapped[float | None] = mapped_column(Float, nullable=True)
    voting_period_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    approval_threshold: Mapped[float | None] = mapped_column(Float, nullable=True)
    constitutional_voting_period_days: Mapped[int | None] = mapped_column(
        Integer, nullable=True,
    )
    constitutional_approval_threshold: Mapped[float | None] = mapped_column(
        Float, nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now,
    )
