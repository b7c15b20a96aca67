"""Voting Service — open votings, cast weighted votes, close and tally.

Invariants:
    - A voting exists only for a VOTING_TRIGGERED proposal, at most one per proposal
    - A vote's weight is the voter's governance weight computed from the ledger at cast time
    - Tally writes results once, moves the voting to COMPLETED and resolves the proposal
      to APPROVED or REJECTED in the same commit
"""

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import AuditEntry, build_audit_entry
from cookgov.core.domain_types import (
    GovernanceActionType, ProposalStatus, ProposalType, VotingStatus,
)
from cookgov.core.errors import NotFoundError, StateConflictError
from cookgov.core.ledger_types import TeamConfig
from cookgov.core.workflow import (
    plan_voting, proposal_outcome, require_status, tally_votes,
    validate_close_voting, validate_tally, validate_vote,
)
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlTeamConfigReader
from cookgov.models.governance_proposal import GovernanceProposal
from cookgov.models.voting import Vote, Voting
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.governance_weight_service import GovernanceWeightService

logger = logging.getLogger(__name__)


def voting_created_audit(
    voting: Voting, now: datetime, actor_id: str | None,
) -> AuditEntry:
    return build_audit_entry(
        team_id=voting.team_id,
        action_type=GovernanceActionType.VOTING_CREATED,
        outcome="open",
        now=now,
        actor_id=actor_id,
        outcome_details={
            "proposal_id": voting.proposal_id,
            "options": list(voting.options),
            "approval_threshold": voting.approval_threshold,
            "is_constitutional": voting.is_constitutional,
            "closes_at": voting.closes_at.isoformat(),
        },
        related_entity_id=voting.id,
        related_entity_type="voting",
    )


class VotingService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.teams = SqlTeamConfigReader(db)
        self.weights = GovernanceWeightService(db, clock)
        self.audit = AuditRecorder.for_session(db)

    async def get_voting(self, voting_id: str) -> Voting:
        voting = await self.db.get(Voting, voting_id)
        if voting is None:
            raise NotFoundError("Voting", voting_id)
        return voting

    async def _get_proposal(self, proposal_id: str) -> GovernanceProposal:
        proposal = await self.db.get(GovernanceProposal, proposal_id)
        if proposal is None:
            raise NotFoundError("GovernanceProposal", proposal_id)
        return proposal

    async def open_voting(
        self,
        proposal: GovernanceProposal,
        config: TeamConfig,
        options: Sequence[str] | None = None,
    ) -> Voting:
        """Stage a voting for a VOTING_TRIGGERED proposal. Caller commits."""
        if proposal.voting_id is not None:
            raise StateConflictError(
                "Proposal already has a voting", current_status=proposal.status,
            )
        plan = plan_voting(
            ProposalStatus(proposal.status),
            ProposalType(proposal.type),
            config,
            self.clock(),
            options,
        )
        voting = Voting(
            team_id=proposal.team_id,
            proposal_id=proposal.id,
            options=plan.options,
            status=VotingStatus.OPEN.value,
            is_constitutional=plan.is_constitutional,
            approval_threshold=plan.approval_threshold,
            opened_at=plan.opened_at,
            closes_at=plan.closes_at,
            votes=[],
        )
        self.db.add(voting)
        await self.db.flush()
        proposal.voting_id = voting.id
        return voting

    async def create_voting(
        self,
        proposal_id: str,
        options: Sequence[str] | None = None,
        actor_id: str | None = None,
    ) -> Voting:
        proposal = await self._get_proposal(proposal_id)
        config = await self.teams.get_config(proposal.team_id)
        voting = await self.open_voting(proposal, config, options)
        await self.db.commit()

        logger.info(
            "Voting created",
            extra={"team_id": proposal.team_id, "proposal_id": proposal.id, "voting_id": voting.id},
        )
        await self.audit.record(voting_created_audit(voting, self.clock(), actor_id))
        return voting

    async def cast_vote(self, voting_id: str, voter_id: str, option: str) -> Vote:
        voting = await self.get_voting(voting_id)
        now = self.clock()
        validate_vote(
            VotingStatus(voting.status),
            voting.closes_at,
            voting.options,
            [v.voter_id for v in voting.votes],
            voter_id,
            option,
            now,
        )
        weight = await self.weights.current_weight(voting.team_id, voter_id)

        vote = Vote(voter_id=voter_id, option=option, weight=weight, cast_at=now)
        voting.votes.append(vote)
        await self.db.commit()

        logger.info(
            f"Vote cast for '{option}' with weight {weight:.4f}",
            extra={"team_id": voting.team_id, "voting_id": voting.id, "contributor_id": voter_id},
        )
        await self.audit.record(build_audit_entry(
            team_id=voting.team_id,
            action_type=GovernanceActionType.VOTE_CAST,
            outcome=option,
            now=now,
            actor_id=voter_id,
            weights={voter_id: weight},
            outcome_details={"proposal_id": voting.proposal_id},
            related_entity_id=voting.id,
            related_entity_type="voting",
        ))
        return vote

    async def close_voting(self, voting_id: str, actor_id: str | None = None) -> Voting:
        voting = await self.get_voting(voting_id)
        validate_close_voting(VotingStatus(voting.status))
        voting.status = VotingStatus.CLOSED.value
        voting.closed_at = self.clock()
        await self.db.commit()

        logger.info(
            f"Voting closed with {len(voting.votes)} vote(s)",
            extra={"team_id": voting.team_id, "voting_id": voting.id},
        )
        await self.audit.record(build_audit_entry(
            team_id=voting.team_id,
            action_type=GovernanceActionType.VOTING_CLOSED,
            outcome="closed",
            now=self.clock(),
            actor_id=actor_id,
            weights={v.voter_id: v.weight for v in voting.votes},
            related_entity_id=voting.id,
            related_entity_type="voting",
        ))
        return voting

    async def tally_voting(self, voting_id: str, actor_id: str | None = None) -> Voting:
        voting = await self.get_voting(voting_id)
        now = self.clock()
        validate_tally(VotingStatus(voting.status), voting.closes_at, now)
        proposal = await self._get_proposal(voting.proposal_id)
        require_status(
            ProposalStatus(proposal.status),
            [ProposalStatus.VOTING_TRIGGERED],
            "resolve proposal from tally",
        )

        tally = tally_votes(
            [(v.option, v.weight) for v in voting.votes],
            voting.options,
            voting.approval_threshold,
        )
        voting.results = [dataclasses.asdict(r) for r in tally.results]
        voting.total_weight = tally.total_weight
        voting.winning_option = tally.winning_option
        voting.status = VotingStatus.COMPLETED.value
        voting.closed_at = voting.closed_at or now
        voting.completed_at = now

        outcome = proposal_outcome(tally.winning_option)
        proposal.status = outcome.value
        proposal.resolved_at = now
        await self.db.commit()

        logger.info(
            f"Voting tallied: winner={tally.winning_option}, proposal {outcome.value}",
            extra={
                "team_id": voting.team_id,
                "voting_id": voting.id,
                "proposal_id": proposal.id,
            },
        )
        await self.audit.record(build_audit_entry(
            team_id=voting.team_id,
            action_type=GovernanceActionType.VOTING_RESULTS_CALCULATED,
            outcome=outcome.value,
            now=now,
            actor_id=actor_id,
            weights={v.voter_id: v.weight for v in voting.votes},
            outcome_details={
                "winning_option": tally.winning_option,
                "approval_threshold": tally.approval_threshold,
                "total_votes": tally.total_votes,
                "results": voting.results,
            },
            related_entity_id=voting.id,
            related_entity_type="voting",
            metadata={"proposal_id": proposal.id},
        ))
        return voting

    async def list_votings(self, team_id: str) -> list[Voting]:
        await self.teams.get_team(team_id)
        result = await self.db.execute(
            select(Voting).where(Voting.team_id == team_id).order_by(Voting.opened_at.desc()),
        )
        return list(result.scalars().all())
