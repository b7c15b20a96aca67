"""Team Service — create teams and update their governance configuration.

Invariants:
    - The resolved config (row + Settings defaults) is validated before commit; an
      invalid config rolls the session back so nothing staged survives
    - Unset fields in an update leave the stored value untouched
    - Every successful write appends one team_config_updated audit entry
    - Changing cap, decay_rate or equity_model on an existing team recomputes every
      contributor's weight and the team equity through RecomputePipeline
"""

import logging
from datetime import datetime
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import GovernanceActionType
from cookgov.core.errors import ValidationError
from cookgov.core.ledger_types import TeamConfig, validate_team_config
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import (
    SqlLedgerReader, SqlTeamConfigReader, resolve_team_config,
)
from cookgov.models.team import Team
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.recompute_pipeline import RecomputePipeline, StageOutcome

logger = logging.getLogger(__name__)

CONFIG_FIELDS = (
    "cap", "decay_rate", "equity_model",
    "eligibility_window_months", "minimum_active_value", "cooling_off_days",
    "lottery_weight_source",
    "objection_window_days", "objection_threshold",
    "voting_period_days", "approval_threshold",
    "constitutional_voting_period_days", "constitutional_approval_threshold",
)
VALUE_FIELDS = frozenset({"cap", "decay_rate", "equity_model"})


class TeamService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
        pipeline: RecomputePipeline | None = None,
    ):
        self.db = db
        self.clock = clock
        self.audit = AuditRecorder.for_session(db)
        self.pipeline = pipeline or RecomputePipeline.for_session(db, clock=clock)
        self.last_recompute: list[StageOutcome] = []

    async def get_team(self, team_id: str) -> Team:
        return await SqlTeamConfigReader(self.db).get_team(team_id)

    async def get_config(self, team_id: str) -> TeamConfig:
        return resolve_team_config(await self.get_team(team_id))

    async def upsert_team(
        self,
        team_id: str,
        name: str | None = None,
        config: dict[str, Any] | None = None,
        actor_id: str | None = None,
    ) -> Team:
        """Create the team if missing, then apply the given config fields."""
        team = await self.db.get(Team, team_id)
        created = team is None
        if created:
            team = Team(id=team_id, name=name or team_id)
            self.db.add(team)
        elif name:
            team.name = name

        changes = {k: v for k, v in (config or {}).items() if k in CONFIG_FIELDS}
        for key, value in changes.items():
            setattr(team, key, getattr(value, "value", value))

        try:
            validate_team_config(resolve_team_config(team))
        except ValidationError:
            await self.db.rollback()
            raise

        contributor_ids: list[str] = []
        if not created and VALUE_FIELDS & changes.keys():
            entries = await SqlLedgerReader(self.db).list_by_team(team_id)
            contributor_ids = sorted({e.contributor_id for e in entries})
        await self.db.commit()

        logger.info(
            f"Team {'created' if created else 'updated'}: {team_id}",
            extra={"team_id": team_id},
        )
        await self.audit.record(build_audit_entry(
            team_id=team_id,
            action_type=GovernanceActionType.TEAM_CONFIG_UPDATED,
            outcome="created" if created else "updated",
            now=self.clock(),
            actor_id=actor_id,
            outcome_details={
                k: getattr(v, "value", v) for k, v in changes.items()
            },
            related_entity_id=team_id,
            related_entity_type="team",
        ))

        if contributor_ids:
            self.pipeline.enqueue_config_change(team_id, contributor_ids)
            self.last_recompute = await self.pipeline.drain()
        return team
