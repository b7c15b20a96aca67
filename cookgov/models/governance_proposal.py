"""GovernanceProposal ORM — a proposal and the objections raised against it.

Invariants:
    - status transitions: draft -> objection_window_open -> approved | voting_triggered
      -> approved | rejected; draft/objection_window_open -> withdrawn
    - voting_triggered flips False -> True at most once
    - objection_count / weighted_objection_count always match the objections rows
    - One objection per (proposal_id, objector_id)
"""

from datetime import datetime

from sqlalchemy import (
    String, Text, Float, Integer, Boolean, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class GovernanceProposal(Base):
    __tablename__ = "governance_proposals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    proposed_by: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")

    # Rule change carried by policy / constitutional proposals
    rule_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    rule_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    change_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Objection window
    objection_window_opens_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    objection_window_closes_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    objection_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    objection_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weighted_objection_count: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )

    voting_triggered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    voting_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    objections: Mapped[list["Objection"]] = relationship(
        "Objection", back_populates="proposal",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Objection.created_at",
    )


class Objection(Base):
    __tablename__ = "objections"
    __table_args__ = (
        UniqueConstraint("proposal_id", "objector_id", name="uq_objection_proposal_objector"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    proposal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("governance_proposals.id", ondelete="CASCADE"),
        nullable=False,
    )
    objector_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    governance_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )

    proposal: Mapped["GovernanceProposal"] = relationship(
        "GovernanceProposal", back_populates="objections",
    )
