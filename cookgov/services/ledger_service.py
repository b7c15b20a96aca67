"""Ledger Service — append contributions, list and aggregate the COOK ledger.

Invariants:
    - Entries are only ever inserted; there is no update or delete path
    - value must be positive; the team must exist
    - A recorded entry cascades into weight and equity recomputation via RecomputePipeline,
      whose failures never fail the recording
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import Attribution, GovernanceActionType
from cookgov.core.errors import ValidationError
from cookgov.core.ledger_aggregation import AggregationPeriod, PeriodTotal, aggregate_ledger
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import (
    SqlLedgerReader, SqlTeamConfigReader,
)
from cookgov.models.contribution_entry import ContributionEntry as ContributionEntryModel
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.recompute_pipeline import RecomputePipeline, StageOutcome

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
        pipeline: RecomputePipeline | None = None,
    ):
        self.db = db
        self.clock = clock
        self.teams = SqlTeamConfigReader(db)
        self.ledger = SqlLedgerReader(db)
        self.audit = AuditRecorder.for_session(db)
        self.pipeline = pipeline or RecomputePipeline.for_session(db, clock=clock)
        self.last_recompute: list[StageOutcome] = []

    async def record_contribution(
        self,
        team_id: str,
        contributor_id: str,
        value: float,
        attribution: Attribution = Attribution.SELF,
        issued_at: datetime | None = None,
        task_id: str | None = None,
        actor_id: str | None = None,
    ) -> ContributionEntryModel:
        if value <= 0:
            raise ValidationError(f"COOK value must be positive, got {value}", field="value")
        await self.teams.get_team(team_id)

        entry = ContributionEntryModel(
            team_id=team_id,
            contributor_id=contributor_id,
            task_id=task_id,
            value=value,
            attribution=attribution.value,
            issued_at=issued_at or self.clock(),
        )
        self.db.add(entry)
        await self.db.commit()

        logger.info(
            f"Contribution recorded: {value} COOK ({attribution.value})",
            extra={"team_id": team_id, "contributor_id": contributor_id},
        )
        await self.audit.record(build_audit_entry(
            team_id=team_id,
            action_type=GovernanceActionType.CONTRIBUTION_RECORDED,
            outcome="recorded",
            now=self.clock(),
            actor_id=actor_id or contributor_id,
            participants=[contributor_id],
            outcome_details={
                "value": value,
                "attribution": attribution.value,
                "task_id": task_id,
            },
            related_entity_id=entry.id,
            related_entity_type="contribution_entry",
        ))

        self.pipeline.enqueue_ledger_change(team_id, contributor_id)
        self.last_recompute = await self.pipeline.drain()
        return entry

    async def list_entries(
        self,
        team_id: str,
        contributor_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ContributionEntryModel]:
        await self.teams.get_team(team_id)
        query = select(ContributionEntryModel).where(
            ContributionEntryModel.team_id == team_id,
        )
        if contributor_id:
            query = query.where(ContributionEntryModel.contributor_id == contributor_id)
        query = query.order_by(
            ContributionEntryModel.issued_at.desc(), ContributionEntryModel.id,
        ).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def aggregate(
        self,
        team_id: str,
        period: AggregationPeriod,
        contributor_id: str | None = None,
    ) -> list[PeriodTotal]:
        await self.teams.get_team(team_id)
        if contributor_id:
            entries = await self.ledger.list_by_contributor(team_id, contributor_id)
        else:
            entries = await self.ledger.list_by_team(team_id)
        return aggregate_ledger(entries, period)
