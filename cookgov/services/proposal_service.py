"""Proposal Service — proposal lifecycle from draft through the objection window.

Invariants:
    - Every transition validates the current status in core/workflow before mutating
    - Each objection carries the objector's governance weight at the time it was raised
    - Crossing the objection threshold triggers voting exactly once and opens the voting
      in the same commit
    - Policy and constitutional proposals go straight to voting on submission
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import AuditEntry, build_audit_entry
from cookgov.core.domain_types import (
    ChangeType, GovernanceActionType, ProposalStatus, ProposalType,
)
from cookgov.core.errors import NotFoundError, ValidationError
from cookgov.core.ledger_types import TeamConfig
from cookgov.core.workflow import (
    SKIP_OBJECTION_WINDOW_TYPES, check_threshold, objection_totals, plan_submission,
    open_objection_window, should_trigger_voting, validate_close_objection_window,
    validate_objection, validate_trigger_voting, validate_withdrawal,
)
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlTeamConfigReader
from cookgov.models.governance_proposal import GovernanceProposal, Objection
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.governance_weight_service import GovernanceWeightService
from cookgov.services.voting_service import VotingService, voting_created_audit

logger = logging.getLogger(__name__)

RULE_CHANGE_TYPES = frozenset({
    ProposalType.POLICY_CHANGE,
    ProposalType.CONSTITUTIONAL_CHALLENGE,
})


def _proposal_audit(
    proposal: GovernanceProposal,
    action_type: GovernanceActionType,
    outcome: str,
    now: datetime,
    actor_id: str | None,
    **kwargs,
) -> AuditEntry:
    return build_audit_entry(
        team_id=proposal.team_id,
        action_type=action_type,
        outcome=outcome,
        now=now,
        actor_id=actor_id,
        related_entity_id=proposal.id,
        related_entity_type="governance_proposal",
        **kwargs,
    )


class ProposalService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.teams = SqlTeamConfigReader(db)
        self.weights = GovernanceWeightService(db, clock)
        self.votings = VotingService(db, clock)
        self.audit = AuditRecorder.for_session(db)

    async def get_proposal(self, proposal_id: str) -> GovernanceProposal:
        proposal = await self.db.get(GovernanceProposal, proposal_id)
        if proposal is None:
            raise NotFoundError("GovernanceProposal", proposal_id)
        return proposal

    async def list_proposals(
        self, team_id: str, status: ProposalStatus | None = None,
    ) -> list[GovernanceProposal]:
        await self.teams.get_team(team_id)
        query = select(GovernanceProposal).where(GovernanceProposal.team_id == team_id)
        if status:
            query = query.where(GovernanceProposal.status == status.value)
        result = await self.db.execute(query.order_by(GovernanceProposal.created_at.desc()))
        return list(result.scalars().all())

    # ─── Draft ───────────────────────────────────────────────────

    async def create_proposal(
        self,
        team_id: str,
        proposal_type: ProposalType,
        title: str,
        proposed_by: str,
        description: str = "",
        rule_name: str | None = None,
        rule_text: str | None = None,
        change_type: ChangeType | None = None,
    ) -> GovernanceProposal:
        await self.teams.get_team(team_id)
        if not title.strip():
            raise ValidationError("title must not be empty", field="title")
        if proposal_type in RULE_CHANGE_TYPES and not (rule_name or "").strip():
            raise ValidationError(
                f"{proposal_type.value} proposals must name the rule they change",
                field="rule_name",
            )

        proposal = GovernanceProposal(
            team_id=team_id,
            type=proposal_type.value,
            title=title,
            description=description,
            proposed_by=proposed_by,
            status=ProposalStatus.DRAFT.value,
            rule_name=rule_name.strip() if rule_name else None,
            rule_text=rule_text,
            change_type=change_type.value if change_type else None,
            objections=[],
        )
        self.db.add(proposal)
        await self.db.commit()

        logger.info(
            f"Proposal created: {title}",
            extra={"team_id": team_id, "proposal_id": proposal.id},
        )
        await self.audit.record(_proposal_audit(
            proposal, GovernanceActionType.GOVERNANCE_PROPOSAL_CREATED, "draft",
            self.clock(), proposed_by,
            outcome_details={"type": proposal_type.value, "title": title},
        ))
        return proposal

    # ─── Objection window ────────────────────────────────────────

    async def submit_proposal(
        self,
        proposal_id: str,
        actor_id: str | None = None,
        objection_window_days: int | None = None,
        objection_threshold: float | None = None,
    ) -> GovernanceProposal:
        """DRAFT → objection window, or straight to voting for rule-change proposals."""
        proposal = await self.get_proposal(proposal_id)
        if ProposalType(proposal.type) not in SKIP_OBJECTION_WINDOW_TYPES:
            return await self.open_objection_window(
                proposal_id, actor_id, objection_window_days, objection_threshold,
            )

        config = await self.teams.get_config(proposal.team_id)
        plan = plan_submission(
            ProposalType(proposal.type),
            ProposalStatus(proposal.status),
            config,
            self.clock(),
            objection_window_days,
            objection_threshold,
        )
        proposal.objection_threshold = plan.objection_threshold
        voting = await self._trigger(proposal, config)
        await self.db.commit()

        now = self.clock()
        await self.audit.record_many([
            _proposal_audit(
                proposal, GovernanceActionType.VOTING_TRIGGERED, "voting_triggered",
                now, actor_id, outcome_details={"reason": "objection window skipped"},
            ),
            voting_created_audit(voting, now, actor_id),
        ])
        return proposal

    async def open_objection_window(
        self,
        proposal_id: str,
        actor_id: str | None = None,
        window_days: int | None = None,
        threshold: float | None = None,
    ) -> GovernanceProposal:
        proposal = await self.get_proposal(proposal_id)
        if ProposalType(proposal.type) in SKIP_OBJECTION_WINDOW_TYPES:
            raise ValidationError(
                f"{proposal.type} proposals have no objection window", field="type",
            )
        config = await self.teams.get_config(proposal.team_id)
        plan = open_objection_window(
            ProposalStatus(proposal.status), config, self.clock(), window_days, threshold,
        )
        proposal.status = plan.status.value
        proposal.objection_threshold = plan.objection_threshold
        proposal.objection_window_opens_at = plan.objection_window_opens_at
        proposal.objection_window_closes_at = plan.objection_window_closes_at
        await self.db.commit()

        logger.info(
            f"Objection window open until {plan.objection_window_closes_at.isoformat()}",
            extra={"team_id": proposal.team_id, "proposal_id": proposal.id},
        )
        await self.audit.record(_proposal_audit(
            proposal, GovernanceActionType.OBJECTION_WINDOW_OPENED,
            "objection_window_open", self.clock(), actor_id,
            outcome_details={
                "objection_threshold": plan.objection_threshold,
                "closes_at": plan.objection_window_closes_at.isoformat(),
            },
        ))
        return proposal

    async def add_objection(
        self, proposal_id: str, objector_id: str, reason: str | None = None,
    ) -> GovernanceProposal:
        proposal = await self.get_proposal(proposal_id)
        now = self.clock()
        validate_objection(
            ProposalStatus(proposal.status),
            proposal.objection_window_closes_at,
            [o.objector_id for o in proposal.objections],
            objector_id,
            now,
        )
        weight = await self.weights.current_weight(proposal.team_id, objector_id)
        proposal.objections.append(Objection(
            objector_id=objector_id, reason=reason,
            governance_weight=weight, created_at=now,
        ))
        count, weighted = objection_totals(o.governance_weight for o in proposal.objections)
        proposal.objection_count = count
        proposal.weighted_objection_count = weighted

        voting = None
        if should_trigger_voting(
            ProposalStatus(proposal.status), proposal.voting_triggered,
            count, weighted, proposal.objection_threshold,
        ):
            config = await self.teams.get_config(proposal.team_id)
            voting = await self._trigger(proposal, config)
        await self.db.commit()

        logger.info(
            f"Objection added ({count} total, weighted {weighted:.4f})",
            extra={
                "team_id": proposal.team_id,
                "proposal_id": proposal.id,
                "contributor_id": objector_id,
            },
        )
        entries = [_proposal_audit(
            proposal, GovernanceActionType.OBJECTION_ADDED, "objection_added",
            now, objector_id,
            weights={objector_id: weight},
            outcome_details={
                "reason": reason,
                "objection_count": count,
                "weighted_objection_count": weighted,
            },
        )]
        if voting is not None:
            entries.append(self._voting_triggered_audit(proposal, now))
            entries.append(voting_created_audit(voting, now, None))
        await self.audit.record_many(entries)
        return proposal

    async def check_threshold(self, proposal_id: str) -> dict:
        """Re-evaluate the threshold; fires the voting transition only on first crossing."""
        proposal = await self.get_proposal(proposal_id)
        exceeded = check_threshold(
            proposal.objection_count,
            proposal.weighted_objection_count,
            proposal.objection_threshold,
        )
        fired = should_trigger_voting(
            ProposalStatus(proposal.status), proposal.voting_triggered,
            proposal.objection_count, proposal.weighted_objection_count,
            proposal.objection_threshold,
        )
        if fired:
            config = await self.teams.get_config(proposal.team_id)
            voting = await self._trigger(proposal, config)
            await self.db.commit()
            now = self.clock()
            await self.audit.record_many([
                self._voting_triggered_audit(proposal, now),
                voting_created_audit(voting, now, None),
            ])
        return {
            "proposal_id": proposal.id,
            "threshold_exceeded": exceeded,
            "voting_triggered": proposal.voting_triggered,
            "triggered_now": fired,
            "objection_count": proposal.objection_count,
            "weighted_objection_count": proposal.weighted_objection_count,
            "objection_threshold": proposal.objection_threshold,
        }

    async def trigger_voting(
        self, proposal_id: str, actor_id: str | None = None,
    ) -> GovernanceProposal:
        proposal = await self.get_proposal(proposal_id)
        validate_trigger_voting(ProposalStatus(proposal.status), proposal.voting_triggered)
        config = await self.teams.get_config(proposal.team_id)
        voting = await self._trigger(proposal, config)
        await self.db.commit()

        now = self.clock()
        await self.audit.record_many([
            self._voting_triggered_audit(proposal, now, actor_id),
            voting_created_audit(voting, now, actor_id),
        ])
        return proposal

    async def close_objection_window(
        self, proposal_id: str, actor_id: str | None = None,
    ) -> GovernanceProposal:
        """Window ran out without crossing the threshold: the proposal is approved."""
        proposal = await self.get_proposal(proposal_id)
        now = self.clock()
        validate_close_objection_window(
            ProposalStatus(proposal.status),
            proposal.objection_window_closes_at,
            proposal.objection_count,
            proposal.weighted_objection_count,
            proposal.objection_threshold,
            now,
        )
        proposal.status = ProposalStatus.APPROVED.value
        proposal.resolved_at = now
        await self.db.commit()

        logger.info(
            "Objection window closed; proposal approved",
            extra={"team_id": proposal.team_id, "proposal_id": proposal.id},
        )
        await self.audit.record(_proposal_audit(
            proposal, GovernanceActionType.OBJECTION_WINDOW_CLOSED, "approved",
            now, actor_id,
            weights={o.objector_id: o.governance_weight or 0.0 for o in proposal.objections},
            outcome_details={
                "objection_count": proposal.objection_count,
                "weighted_objection_count": proposal.weighted_objection_count,
                "objection_threshold": proposal.objection_threshold,
            },
        ))
        return proposal

    async def withdraw_proposal(self, proposal_id: str, actor_id: str) -> GovernanceProposal:
        proposal = await self.get_proposal(proposal_id)
        validate_withdrawal(ProposalStatus(proposal.status), proposal.proposed_by, actor_id)
        proposal.status = ProposalStatus.WITHDRAWN.value
        proposal.resolved_at = self.clock()
        await self.db.commit()

        await self.audit.record(_proposal_audit(
            proposal, GovernanceActionType.PROPOSAL_WITHDRAWN, "withdrawn",
            self.clock(), actor_id,
        ))
        return proposal

    # ─── Internal ────────────────────────────────────────────────

    async def _trigger(self, proposal: GovernanceProposal, config: TeamConfig):
        """Flip to VOTING_TRIGGERED and stage the voting. Caller commits."""
        proposal.status = ProposalStatus.VOTING_TRIGGERED.value
        proposal.voting_triggered = True
        voting = await self.votings.open_voting(proposal, config)
        logger.info(
            "Voting triggered",
            extra={
                "team_id": proposal.team_id,
                "proposal_id": proposal.id,
                "voting_id": voting.id,
            },
        )
        return voting

    def _voting_triggered_audit(
        self, proposal: GovernanceProposal, now: datetime, actor_id: str | None = None,
    ) -> AuditEntry:
        return _proposal_audit(
            proposal, GovernanceActionType.VOTING_TRIGGERED, "voting_triggered",
            now, actor_id,
            weights={o.objector_id: o.governance_weight or 0.0 for o in proposal.objections},
            outcome_details={
                "objection_count": proposal.objection_count,
                "weighted_objection_count": proposal.weighted_objection_count,
                "objection_threshold": proposal.objection_threshold,
                "voting_id": proposal.voting_id,
            },
        )
