"""Governance Weight Service — on-demand weights and persisted weight records.

Invariants:
    - current_weight() reads the ledger and computes; it never reads a stored record
    - Persisted records are overwritten per (team, contributor), never merged
    - One governance_weight_updated audit entry per recompute
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import GovernanceActionType
from cookgov.core.effective_value import group_entries_by_contributor
from cookgov.core.governance_weight import (
    GovernanceWeight, compute_governance_weight, compute_team_weights,
)
from cookgov.core.ledger_types import TeamConfig
from cookgov.core.repository_protocols import LedgerReader
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import SqlLedgerReader, SqlTeamConfigReader
from cookgov.models.governance_weight_record import GovernanceWeightRecord
from cookgov.services.audit_recorder import AuditRecorder

logger = logging.getLogger(__name__)


class GovernanceWeightService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.ledger: LedgerReader = SqlLedgerReader(db)
        self.teams = SqlTeamConfigReader(db)
        self.audit = AuditRecorder.for_session(db)

    async def compute_weight(
        self, team_id: str, contributor_id: str, config: TeamConfig | None = None,
    ) -> GovernanceWeight:
        config = config or await self.teams.get_config(team_id)
        entries = await self.ledger.list_by_contributor(team_id, contributor_id)
        return compute_governance_weight(contributor_id, entries, config, self.clock())

    async def current_weight(self, team_id: str, contributor_id: str) -> float:
        return (await self.compute_weight(team_id, contributor_id)).weight

    async def team_weights(
        self, team_id: str, config: TeamConfig | None = None,
    ) -> dict[str, GovernanceWeight]:
        config = config or await self.teams.get_config(team_id)
        entries = await self.ledger.list_by_team(team_id)
        return compute_team_weights(
            group_entries_by_contributor(entries), config, self.clock(),
        )

    async def _upsert(self, team_id: str, weight: GovernanceWeight) -> GovernanceWeightRecord:
        result = await self.db.execute(
            select(GovernanceWeightRecord).where(
                GovernanceWeightRecord.team_id == team_id,
                GovernanceWeightRecord.contributor_id == weight.contributor_id,
            ),
        )
        record = result.scalar_one_or_none()
        if record is None:
            record = GovernanceWeightRecord(
                team_id=team_id, contributor_id=weight.contributor_id,
            )
            self.db.add(record)
        record.weight = weight.weight
        record.raw_value = weight.raw_value
        record.effective_value = weight.effective_value
        record.cap_applied = weight.cap_applied
        record.decay_applied = weight.decay_applied
        record.last_updated = self.clock()
        return record

    async def recompute_governance_weight(
        self, team_id: str, contributor_id: str, actor_id: str | None = None,
    ) -> GovernanceWeightRecord:
        weight = await self.compute_weight(team_id, contributor_id)
        record = await self._upsert(team_id, weight)
        await self.db.commit()

        logger.info(
            f"Governance weight recomputed: {weight.weight:.4f}",
            extra={"team_id": team_id, "contributor_id": contributor_id},
        )
        await self.audit.record(build_audit_entry(
            team_id=team_id,
            action_type=GovernanceActionType.GOVERNANCE_WEIGHT_UPDATED,
            outcome="recomputed",
            now=self.clock(),
            actor_id=actor_id,
            weights={contributor_id: weight.weight},
            outcome_details={
                "raw_value": weight.raw_value,
                "effective_value": weight.effective_value,
                "cap_applied": weight.cap_applied,
                "decay_applied": weight.decay_applied,
            },
            related_entity_id=contributor_id,
            related_entity_type="governance_weight",
        ))
        return record

    async def list_weights(self, team_id: str) -> list[GovernanceWeightRecord]:
        await self.teams.get_team(team_id)
        result = await self.db.execute(
            select(GovernanceWeightRecord)
            .where(GovernanceWeightRecord.team_id == team_id)
            .order_by(GovernanceWeightRecord.contributor_id),
        )
        return list(result.scalars().all())
