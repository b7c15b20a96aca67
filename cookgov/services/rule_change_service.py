"""Rule Change Service — adopt versioned constitutional and policy changes.

Invariants:
    - version = latest version for (team, rule) + 1, starting at 1
    - A proposal is adopted at most once (proposal_id is unique per change table)
    - approval_percentage is the winning option's weighted share from the voting tally
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import (
    ChangeType, GovernanceActionType, ProposalStatus, ProposalType, VotingStatus,
)
from cookgov.core.errors import NotFoundError, StateConflictError
from cookgov.core.rule_versioning import RuleVersion, plan_rule_version, validate_adoption
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlTeamConfigReader
from cookgov.models.governance_proposal import GovernanceProposal
from cookgov.models.rule_change import ConstitutionalChange, PolicyChange
from cookgov.models.voting import Voting
from cookgov.services.audit_recorder import AuditRecorder

logger = logging.getLogger(__name__)


def _winning_percentage(voting: Voting) -> float:
    for result in voting.results or []:
        if result["option"] == voting.winning_option:
            return result["percentage"]
    return 0.0


class RuleChangeService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.teams = SqlTeamConfigReader(db)
        self.audit = AuditRecorder.for_session(db)

    async def _latest(self, model, name_column, team_id: str, name: str) -> RuleVersion | None:
        result = await self.db.execute(
            select(model)
            .where(model.team_id == team_id, name_column == name)
            .order_by(model.version.desc())
            .limit(1),
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return RuleVersion(version=row.version, change_type=ChangeType(row.change_type))

    async def _load_adoptable(
        self, proposal_id: str, expected_type: ProposalType, model,
    ) -> tuple[GovernanceProposal, Voting]:
        proposal = await self.db.get(GovernanceProposal, proposal_id)
        if proposal is None:
            raise NotFoundError("GovernanceProposal", proposal_id)
        voting = await self.db.get(Voting, proposal.voting_id) if proposal.voting_id else None

        validate_adoption(
            ProposalType(proposal.type),
            ProposalStatus(proposal.status),
            expected_type,
            VotingStatus(voting.status) if voting else None,
            voting.winning_option if voting else None,
        )
        existing = await self.db.execute(
            select(model.id).where(model.proposal_id == proposal_id),
        )
        if existing.first() is not None:
            raise StateConflictError(
                "Proposal has already been adopted", current_status=proposal.status,
            )
        return proposal, voting

    async def _adopt(
        self,
        proposal_id: str,
        expected_type: ProposalType,
        model,
        name_attr: str,
        text_attr: str,
        action_type: GovernanceActionType,
        adopted_by: str,
    ):
        proposal, voting = await self._load_adoptable(proposal_id, expected_type, model)
        name_column = getattr(model, name_attr)
        latest = await self._latest(model, name_column, proposal.team_id, proposal.rule_name or "")

        if proposal.change_type:
            change_type = ChangeType(proposal.change_type)
        elif latest is None or latest.change_type == ChangeType.DELETED:
            change_type = ChangeType.CREATED
        else:
            change_type = ChangeType.MODIFIED
        plan = plan_rule_version(proposal.rule_name or "", latest, change_type)

        now = self.clock()
        change = model(
            team_id=proposal.team_id,
            version=plan.version,
            previous_version=plan.previous_version,
            change_type=plan.change_type.value,
            approval_percentage=_winning_percentage(voting),
            proposal_id=proposal.id,
            voting_id=voting.id,
            adopted_by=adopted_by,
            adopted_at=now,
            **{name_attr: plan.rule_name, text_attr: proposal.rule_text},
        )
        self.db.add(change)
        await self.db.commit()

        logger.info(
            f"{plan.rule_name} adopted at version {plan.version}",
            extra={
                "team_id": proposal.team_id,
                "proposal_id": proposal.id,
                "voting_id": voting.id,
                "action_type": action_type.value,
            },
        )
        await self.audit.record(build_audit_entry(
            team_id=proposal.team_id,
            action_type=action_type,
            outcome=f"version {plan.version}",
            now=now,
            actor_id=adopted_by,
            weights={v.voter_id: v.weight for v in voting.votes},
            outcome_details={
                "rule_name": plan.rule_name,
                "version": plan.version,
                "previous_version": plan.previous_version,
                "change_type": plan.change_type.value,
                "approval_percentage": change.approval_percentage,
            },
            related_entity_id=change.id,
            related_entity_type=model.__tablename__,
            metadata={"proposal_id": proposal.id, "voting_id": voting.id},
        ))
        return change

    async def adopt_constitutional_change(
        self, proposal_id: str, adopted_by: str = "voting",
    ) -> ConstitutionalChange:
        return await self._adopt(
            proposal_id,
            ProposalType.CONSTITUTIONAL_CHALLENGE,
            ConstitutionalChange,
            "rule_name",
            "rule_text",
            GovernanceActionType.CONSTITUTIONAL_CHANGE_ADOPTED,
            adopted_by,
        )

    async def adopt_policy_change(
        self, proposal_id: str, adopted_by: str = "voting",
    ) -> PolicyChange:
        return await self._adopt(
            proposal_id,
            ProposalType.POLICY_CHANGE,
            PolicyChange,
            "policy_name",
            "policy_text",
            GovernanceActionType.POLICY_CHANGE_ADOPTED,
            adopted_by,
        )

    async def constitutional_history(
        self, team_id: str, rule_name: str | None = None,
    ) -> list[ConstitutionalChange]:
        await self.teams.get_team(team_id)
        query = select(ConstitutionalChange).where(ConstitutionalChange.team_id == team_id)
        if rule_name:
            query = query.where(ConstitutionalChange.rule_name == rule_name)
        result = await self.db.execute(
            query.order_by(ConstitutionalChange.rule_name, ConstitutionalChange.version),
        )
        return list(result.scalars().all())

    async def policy_history(
        self, team_id: str, policy_name: str | None = None,
    ) -> list[PolicyChange]:
        await self.teams.get_team(team_id)
        query = select(PolicyChange).where(PolicyChange.team_id == team_id)
        if policy_name:
            query = query.where(PolicyChange.policy_name == policy_name)
        result = await self.db.execute(
            query.order_by(PolicyChange.policy_name, PolicyChange.version),
        )
        return list(result.scalars().all())
