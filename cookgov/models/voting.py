"""Voting ORM — a weighted vote on a proposal, its ballots and its tally.

Invariants:
    - status transitions: open -> closed -> completed (open -> completed once the period ends)
    - One vote per (voting_id, voter_id); weight is the voter's governance weight at cast time
    - results / winning_option are written once, by the tally
"""

from datetime import datetime

from sqlalchemy import (
    String, Float, Boolean, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class Voting(Base):
    __tablename__ = "votings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    proposal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("governance_proposals.id"), nullable=False, unique=True,
    )
    options: Mapped[list] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    is_constitutional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approval_threshold: Mapped[float] = mapped_column(Float, nullable=False)
    opened_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
    closes_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # Tally
    results: Mapped[list | None] = mapped_column(JSON, nullable=True)
    total_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    winning_option: Mapped[str | None] = mapped_column(String(100), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    votes: Mapped[list["Vote"]] = relationship(
        "Vote", back_populates="voting",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Vote.cast_at",
    )


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("voting_id", "voter_id", name="uq_vote_voting_voter"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    voting_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("votings.id", ondelete="CASCADE"), nullable=False,
    )
    voter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    option: Mapped[str] = mapped_column(String(100), nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    cast_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )

    voting: Mapped["Voting"] = relationship("Voting", back_populates="votes")
