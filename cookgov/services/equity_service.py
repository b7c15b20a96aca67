"""Equity Service — whole-team equity recomputation and persistence.

Invariants:
    - Recompute is a batch over the team's full ledger; every contributor is rewritten
    - Records of contributors no longer in the distribution are removed, so Σ equity stays ≈ 100
    - The batch commits once; partial distributions are never persisted
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import GovernanceActionType
from cookgov.core.effective_value import group_entries_by_contributor
from cookgov.core.equity import distribute_team_equity
from cookgov.core.repository_protocols import LedgerReader
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlLedgerReader, SqlTeamConfigReader
from cookgov.models.equity_record import EquityRecord
from cookgov.services.audit_recorder import AuditRecorder

logger = logging.getLogger(__name__)


class EquityService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.ledger: LedgerReader = SqlLedgerReader(db)
        self.teams = SqlTeamConfigReader(db)
        self.audit = AuditRecorder.for_session(db)

    async def recompute_team_equity(
        self, team_id: str, actor_id: str | None = None,
    ) -> list[EquityRecord]:
        config = await self.teams.get_config(team_id)
        entries = await self.ledger.list_by_team(team_id)
        now = self.clock()
        shares = distribute_team_equity(
            group_entries_by_contributor(entries), config, now,
        )

        existing = {
            r.contributor_id: r for r in (await self.db.execute(
                select(EquityRecord).where(EquityRecord.team_id == team_id),
            )).scalars().all()
        }
        stale = set(existing) - {s.contributor_id for s in shares}
        if stale:
            await self.db.execute(
                delete(EquityRecord).where(
                    EquityRecord.team_id == team_id,
                    EquityRecord.contributor_id.in_(stale),
                ),
            )

        records = []
        for share in shares:
            record = existing.get(share.contributor_id)
            if record is None:
                record = EquityRecord(team_id=team_id, contributor_id=share.contributor_id)
                self.db.add(record)
            record.equity = share.equity
            record.effective_value = share.effective_value
            record.raw_value = share.raw_value
            record.model = share.model.value
            record.total_team_effective_value = share.total_team_effective_value
            record.cap_applied = share.cap_applied
            record.decay_applied = share.decay_applied
            record.last_updated = now
            records.append(record)
        await self.db.commit()

        total = shares[0].total_team_effective_value
        logger.info(
            f"Team equity recomputed for {len(shares)} contributor(s), total {total:.4f}",
            extra={"team_id": team_id},
        )
        await self.audit.record(build_audit_entry(
            team_id=team_id,
            action_type=GovernanceActionType.EQUITY_CALCULATED,
            outcome="recomputed",
            now=now,
            actor_id=actor_id,
            weights={s.contributor_id: s.effective_value for s in shares},
            outcome_details={
                "model": config.equity_model.value,
                "equity": {s.contributor_id: s.equity for s in shares},
                "total_team_effective_value": total,
            },
            related_entity_id=team_id,
            related_entity_type="team",
        ))
        return records

    async def list_equity(self, team_id: str) -> list[EquityRecord]:
        await self.teams.get_team(team_id)
        result = await self.db.execute(
            select(EquityRecord)
            .where(EquityRecord.team_id == team_id)
            .order_by(EquityRecord.contributor_id),
        )
        return list(result.scalars().all())
