"""Initial schema — teams, ledger, equity, committees, proposals, votings, rules, audit.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _team_fk() -> sa.Column:
    return sa.Column("team_id", sa.String(64), sa.ForeignKey("teams.id"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("cap", sa.Float, nullable=True),
        sa.Column("decay_rate", sa.Float, nullable=True),
        sa.Column("equity_model", sa.String(20), nullable=True),
        sa.Column("eligibility_window_months", sa.Integer, nullable=True),
        sa.Column("minimum_active_value", sa.Float, nullable=True),
        sa.Column("cooling_off_days", sa.Integer, nullable=True),
        sa.Column("lottery_weight_source", sa.String(30), nullable=True),
        sa.Column("objection_window_days", sa.Integer, nullable=True),
        sa.Column("objection_threshold", sa.Float, nullable=True),
        sa.Column("voting_period_days", sa.Integer, nullable=True),
        sa.Column("approval_threshold", sa.Float, nullable=True),
        sa.Column("constitutional_voting_period_days", sa.Integer, nullable=True),
        sa.Column("constitutional_approval_threshold", sa.Float, nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )

    op.create_table(
        "contribution_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        _team_fk(),
        sa.Column("contributor_id", sa.String(64), nullable=False),
        sa.Column("task_id", sa.String(64), nullable=True),
        sa.Column("value", sa.Float, nullable=False),
        sa.Column("attribution", sa.String(10), nullable=False, server_default="self"),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        _ts("created_at"),
    )
    op.create_index(
        "ix_contribution_entries_team_contributor",
        "contribution_entries", ["team_id", "contributor_id"],
    )

    for table, constraint in (
        ("equity_records", "uq_equity_team_contributor"),
        ("governance_weight_records", "uq_weight_team_contributor"),
    ):
        extra = (
            [
                sa.Column("equity", sa.Float, nullable=False),
                sa.Column("model", sa.String(20), nullable=False),
                sa.Column("total_team_effective_value", sa.Float, nullable=False),
            ]
            if table == "equity_records"
            else [sa.Column("weight", sa.Float, nullable=False)]
        )
        op.create_table(
            table,
            sa.Column("id", sa.String(36), primary_key=True),
            _team_fk(),
            sa.Column("contributor_id", sa.String(64), nullable=False),
            *extra,
            sa.Column("raw_value", sa.Float, nullable=False),
            sa.Column("effective_value", sa.Float, nullable=False),
            sa.Column("cap_applied", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("decay_applied", sa.Boolean, nullable=False, server_default=sa.false()),
            _ts("last_updated"),
            sa.UniqueConstraint("team_id", "contributor_id", name=constraint),
        )

    op.create_table(
        "service_terms",
        sa.Column("id", sa.String(36), primary_key=True),
        _team_fk(),
        sa.Column("committee_id", sa.String(36), nullable=False),
        sa.Column("committee_name", sa.String(200), nullable=False),
        sa.Column("contributor_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _ts("start_date"),
        _ts("end_date", nullable=True),
        sa.Column("duration_days", sa.Integer, nullable=True),
    )
    op.create_index("ix_service_terms_team_status", "service_terms", ["team_id", "status"])

    op.create_table(
        "committee_selections",
        sa.Column("id", sa.String(36), primary_key=True),
        _team_fk(),
        sa.Column("committee_id", sa.String(36), nullable=False, unique=True),
        sa.Column("committee_name", sa.String(200), nullable=False),
        sa.Column("seats", sa.Integer, nullable=False),
        sa.Column("seed", sa.String(200), nullable=False),
        sa.Column("reproducible", sa.Boolean, nullable=False),
        sa.Column("total_weight", sa.Float, nullable=False),
        sa.Column("selected_members", sa.JSON, nullable=False),
        sa.Column("eligible_members", sa.JSON, nullable=False),
        sa.Column("lottery_result", sa.JSON, nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        _ts("created_at"),
    )

    op.create_table(
        "governance_proposals",
        sa.Column("id", sa.String(36), primary_key=True),
        _team_fk(),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("proposed_by", sa.String(64), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="draft"),
        sa.Column("rule_name", sa.String(200), nullable=True),
        sa.Column("rule_text", sa.Text, nullable=True),
        sa.Column("change_type", sa.String(20), nullable=True),
        _ts("objection_window_opens_at", nullable=True),
        _ts("objection_window_closes_at", nullable=True),
        sa.Column("objection_threshold", sa.Float, nullable=False, server_default="0"),
        sa.Column("objection_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("weighted_objection_count", sa.Float, nullable=False, server_default="0"),
        sa.Column("voting_triggered", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("voting_id", sa.String(36), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("resolved_at", nullable=True),
    )

    op.create_table(
        "objections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "proposal_id", sa.String(36),
            sa.ForeignKey("governance_proposals.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("objector_id", sa.String(64), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("governance_weight", sa.Float, nullable=True),
        _ts("created_at"),
        sa.UniqueConstraint("proposal_id", "objector_id", name="uq_objection_proposal_objector"),
    )

    op.create_table(
        "votings",
        sa.Column("id", sa.String(36), primary_key=True),
        _team_fk(),
        sa.Column(
            "proposal_id", sa.String(36), sa.ForeignKey("governance_proposals.id"),
            nullable=False, unique=True,
        ),
        sa.Column("options", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("is_constitutional", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("approval_threshold", sa.Float, nullable=False),
        _ts("opened_at"),
        sa.Column("closes_at", sa.DateTime(timezone=True), nullable=False),
        _ts("closed_at", nullable=True),
        sa.Column("results", sa.JSON, nullable=True),
        sa.Column("total_weight", sa.Float, nullable=True),
        sa.Column("winning_option", sa.String(100), nullable=True),
        _ts("completed_at", nullable=True),
    )

    op.create_table(
        "votes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "voting_id", sa.String(36),
            sa.ForeignKey("votings.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("voter_id", sa.String(64), nullable=False),
        sa.Column("option", sa.String(100), nullable=False),
        sa.Column("weight", sa.Float, nullable=False),
        _ts("cast_at"),
        sa.UniqueConstraint("voting_id", "voter_id", name="uq_vote_voting_voter"),
    )

    for table, name_col, text_col, constraint in (
        ("constitutional_changes", "rule_name", "rule_text", "uq_constitutional_rule_version"),
        ("policy_changes", "policy_name", "policy_text", "uq_policy_version"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.String(36), primary_key=True),
            _team_fk(),
            sa.Column(name_col, sa.String(200), nullable=False),
            sa.Column("version", sa.Integer, nullable=False),
            sa.Column("previous_version", sa.Integer, nullable=True),
            sa.Column("change_type", sa.String(20), nullable=False),
            sa.Column(text_col, sa.Text, nullable=True),
            sa.Column("approval_percentage", sa.Float, nullable=False),
            sa.Column(
                "proposal_id", sa.String(36), sa.ForeignKey("governance_proposals.id"),
                nullable=False, unique=True,
            ),
            sa.Column("voting_id", sa.String(36), nullable=False),
            sa.Column("adopted_by", sa.String(64), nullable=False, server_default="voting"),
            _ts("adopted_at"),
            sa.UniqueConstraint("team_id", name_col, "version", name=constraint),
        )

    op.create_table(
        "audit_log_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(64), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("participants", sa.JSON, nullable=False),
        sa.Column("outcome", sa.Text, nullable=False),
        sa.Column("outcome_details", sa.JSON, nullable=False),
        sa.Column("weights", sa.JSON, nullable=False),
        sa.Column("total_weight", sa.Float, nullable=False, server_default="0"),
        sa.Column("related_entity_id", sa.String(64), nullable=True),
        sa.Column("related_entity_type", sa.String(50), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=False),
        _ts("timestamp"),
    )
    op.create_index("ix_audit_log_team_timestamp", "audit_log_entries", ["team_id", "timestamp"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_team_timestamp", table_name="audit_log_entries")
    op.drop_table("audit_log_entries")
    op.drop_table("policy_changes")
    op.drop_table("constitutional_changes")
    op.drop_table("votes")
    op.drop_table("votings")
    op.drop_table("objections")
    op.drop_table("governance_proposals")
    op.drop_table("committee_selections")
    op.drop_index("ix_service_terms_team_status", table_name="service_terms")
    op.drop_table("service_terms")
    op.drop_table("governance_weight_records")
    op.drop_table("equity_records")
    op.drop_index("ix_contribution_entries_team_contributor", table_name="contribution_entries")
    op.drop_table("contribution_entries")
    op.drop_table("teams")
