"""Service Term Service — open, end and list committee service terms.

Invariants:
    - At most one active term per (contributor, committee): a second one is a StateConflictError
    - Ending requires an active term; end_date and duration_days are stamped only then
    - add_term() stages without committing so committee selection can commit once
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import AuditEntry, build_audit_entry
from cookgov.core.domain_types import GovernanceActionType, ServiceTermStatus
from cookgov.core.errors import NotFoundError, StateConflictError
from cookgov.core.service_term_rules import compute_term_duration, validate_term_end
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlTeamConfigReader
from cookgov.models.service_term import ServiceTerm
from cookgov.services.audit_recorder import AuditRecorder

logger = logging.getLogger(__name__)


def term_created_audit(term: ServiceTerm, now: datetime, actor_id: str | None) -> AuditEntry:
    return build_audit_entry(
        team_id=term.team_id,
        action_type=GovernanceActionType.SERVICE_TERM_CREATED,
        outcome="active",
        now=now,
        actor_id=actor_id,
        participants=[term.contributor_id],
        outcome_details={
            "committee_id": term.committee_id,
            "committee_name": term.committee_name,
        },
        related_entity_id=term.id,
        related_entity_type="service_term",
    )


class ServiceTermService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.teams = SqlTeamConfigReader(db)
        self.audit = AuditRecorder.for_session(db)

    async def get_term(self, term_id: str) -> ServiceTerm:
        term = await self.db.get(ServiceTerm, term_id)
        if term is None:
            raise NotFoundError("ServiceTerm", term_id)
        return term

    async def add_term(
        self,
        team_id: str,
        committee_id: str,
        committee_name: str,
        contributor_id: str,
        start_date: datetime | None = None,
    ) -> ServiceTerm:
        """Stage a new active term. Caller commits."""
        result = await self.db.execute(
            select(ServiceTerm.id).where(
                ServiceTerm.contributor_id == contributor_id,
                ServiceTerm.committee_id == committee_id,
                ServiceTerm.status == ServiceTermStatus.ACTIVE.value,
            ),
        )
        if result.first() is not None:
            raise StateConflictError(
                f"Contributor '{contributor_id}' already has an active term on "
                f"committee '{committee_name}'",
                current_status=ServiceTermStatus.ACTIVE.value,
            )
        term = ServiceTerm(
            team_id=team_id,
            committee_id=committee_id,
            committee_name=committee_name,
            contributor_id=contributor_id,
            status=ServiceTermStatus.ACTIVE.value,
            start_date=start_date or self.clock(),
        )
        self.db.add(term)
        await self.db.flush()
        return term

    async def create_term(
        self,
        team_id: str,
        committee_id: str,
        committee_name: str,
        contributor_id: str,
        start_date: datetime | None = None,
        actor_id: str | None = None,
    ) -> ServiceTerm:
        await self.teams.get_team(team_id)
        term = await self.add_term(
            team_id, committee_id, committee_name, contributor_id, start_date,
        )
        await self.db.commit()

        logger.info(
            f"Service term opened on {committee_name}",
            extra={
                "team_id": team_id,
                "committee_id": committee_id,
                "contributor_id": contributor_id,
            },
        )
        await self.audit.record(term_created_audit(term, self.clock(), actor_id))
        return term

    async def end_term(
        self,
        term_id: str,
        final_status: ServiceTermStatus = ServiceTermStatus.COMPLETED,
        end_date: datetime | None = None,
        actor_id: str | None = None,
    ) -> ServiceTerm:
        term = await self.get_term(term_id)
        validate_term_end(ServiceTermStatus(term.status), final_status)

        term.end_date = end_date or self.clock()
        term.duration_days = compute_term_duration(term.start_date, term.end_date)
        term.status = final_status.value
        await self.db.commit()

        logger.info(
            f"Service term ended ({final_status.value}) after {term.duration_days} day(s)",
            extra={
                "team_id": term.team_id,
                "committee_id": term.committee_id,
                "contributor_id": term.contributor_id,
            },
        )
        await self.audit.record(build_audit_entry(
            team_id=term.team_id,
            action_type=GovernanceActionType.SERVICE_TERM_ENDED,
            outcome=final_status.value,
            now=self.clock(),
            actor_id=actor_id,
            participants=[term.contributor_id],
            outcome_details={
                "committee_id": term.committee_id,
                "committee_name": term.committee_name,
                "duration_days": term.duration_days,
            },
            related_entity_id=term.id,
            related_entity_type="service_term",
        ))
        return term

    async def list_terms(
        self,
        team_id: str,
        contributor_id: str | None = None,
        committee_id: str | None = None,
        status: ServiceTermStatus | None = None,
    ) -> list[ServiceTerm]:
        await self.teams.get_team(team_id)
        query = select(ServiceTerm).where(ServiceTerm.team_id == team_id)
        if contributor_id:
            query = query.where(ServiceTerm.contributor_id == contributor_id)
        if committee_id:
            query = query.where(ServiceTerm.committee_id == committee_id)
        if status:
            query = query.where(ServiceTerm.status == status.value)
        result = await self.db.execute(query.order_by(ServiceTerm.start_date))
        return list(result.scalars().all())
