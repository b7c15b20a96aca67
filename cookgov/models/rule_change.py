"""Rule Change ORM — versioned constitutional and policy changes.

Invariants:
    - version = previous + 1 per (team_id, rule name), starting at 1
    - (team_id, rule_name, version) and (team_id, policy_name, version) are unique,
      so a concurrent adoption of the same version fails instead of duplicating it
    - Rows are never updated or deleted
"""

from datetime import datetime

from sqlalchemy import String, Text, Float, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cookgov.db.base import Base, new_id
from cookgov.db.types import UTCDateTime, utc_now


class ConstitutionalChange(Base):
    __tablename__ = "constitutional_changes"
    __table_args__ = (
        UniqueConstraint("team_id", "rule_name", "version", name="uq_constitutional_rule_version"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    rule_name: Mapped[str] = mapped_column(String(200), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_version: Mapped[int | None] = mapped_column(Integer, nullable=True)
    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rule_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    approval_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    proposal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("governance_proposals.id"), nullable=False, unique=True,
    )
    voting_id: Mapped[str] = mapped_column(String(36), nullable=False)
    adopted_by: Mapped[str] = mapped_column(String(64), nullable=False, default="voting")
    adopted_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )


class PolicyChange(Base):
    __tablename__ = "policy_changes"
    __table_args__ = (
        UniqueConstraint("team_id", "policy_name", "version", name="uq_policy_version"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.id"), nullable=False,
    )
    policy_name: Mapped[str] = mapped_column(String(200), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_version: Mapped[int | None] = mapped_column(Integer, nullable=True)
    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    policy_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    approval_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    proposal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("governance_proposals.id"), nullable=False, unique=True,
    )
    voting_id: Mapped[str] = mapped_column(String(36), nullable=False)
    adopted_by: Mapped[str] = mapped_column(String(64), nullable=False, default="voting")
    adopted_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now,
    )
