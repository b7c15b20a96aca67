"""Recompute Pipeline — explicit, ordered cascade of ledger-derived recomputations.

Invariants:
    - Stages run in queue order: governance weight before team equity
    - Each job runs in its own session; a failed attempt rolls back only itself
    - Infrastructure failures (SQLAlchemy or OS-level connection errors) are retried up to
      recompute_max_retries; domain errors and unexpected exceptions are not
    - Failures are logged and reported, never raised to whoever triggered the cascade

Design Decisions:
    - Queue + stage handlers instead of services calling each other: the cascade order
      is visible in one place and each stage retries independently
    - Duplicate jobs collapse on enqueue: a team's equity is recomputed once per drain
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cookgov.config import get_settings
from cookgov.core.errors import CookGovError
from cookgov.db.types import utc_now
from cookgov.services.equity_service import EquityService
from cookgov.services.governance_weight_service import GovernanceWeightService

logger = logging.getLogger(__name__)


class RecomputeStage(str, Enum):
    GOVERNANCE_WEIGHT = "governance_weight"
    TEAM_EQUITY = "team_equity"


@dataclass(frozen=True)
class RecomputeJob:
    stage: RecomputeStage
    team_id: str
    contributor_id: str | None = None


@dataclass(frozen=True)
class StageOutcome:
    job: RecomputeJob
    succeeded: bool
    attempts: int
    error: str | None = None


StageHandler = Callable[[AsyncSession, RecomputeJob, Callable[[], datetime]], Awaitable[None]]


async def _recompute_weight(
    db: AsyncSession, job: RecomputeJob, clock: Callable[[], datetime],
) -> None:
    await GovernanceWeightService(db, clock).recompute_governance_weight(
        job.team_id, job.contributor_id,
    )


async def _recompute_equity(
    db: AsyncSession, job: RecomputeJob, clock: Callable[[], datetime],
) -> None:
    await EquityService(db, clock).recompute_team_equity(job.team_id)


STAGE_HANDLERS: dict[RecomputeStage, StageHandler] = {
    RecomputeStage.GOVERNANCE_WEIGHT: _recompute_weight,
    RecomputeStage.TEAM_EQUITY: _recompute_equity,
}


class RecomputePipeline:
    """Queue of recompute jobs drained sequentially by stage handlers."""

    def __init__(
        self,
        bind: AsyncEngine,
        max_retries: int | None = None,
        clock: Callable[[], datetime] = utc_now,
        handlers: dict[RecomputeStage, StageHandler] | None = None,
    ):
        self.bind = bind
        self.max_retries = max_retries or get_settings().recompute_max_retries
        self.clock = clock
        self.handlers = handlers or STAGE_HANDLERS
        self._queue: deque[RecomputeJob] = deque()

    @classmethod
    def for_session(cls, db: AsyncSession, **kwargs) -> "RecomputePipeline":
        return cls(db.bind, **kwargs)

    @property
    def pending(self) -> list[RecomputeJob]:
        return list(self._queue)

    def enqueue(self, job: RecomputeJob) -> None:
        if job not in self._queue:
            self._queue.append(job)

    def enqueue_ledger_change(self, team_id: str, contributor_id: str) -> None:
        """A ledger change moves the contributor's weight and every team equity share."""
        self.enqueue(RecomputeJob(RecomputeStage.GOVERNANCE_WEIGHT, team_id, contributor_id))
        self.enqueue(RecomputeJob(RecomputeStage.TEAM_EQUITY, team_id))

    def enqueue_config_change(self, team_id: str, contributor_ids: list[str]) -> None:
        for contributor_id in contributor_ids:
            self.enqueue(RecomputeJob(
                RecomputeStage.GOVERNANCE_WEIGHT, team_id, contributor_id,
            ))
        self.enqueue(RecomputeJob(RecomputeStage.TEAM_EQUITY, team_id))

    async def drain(self) -> list[StageOutcome]:
        outcomes = []
        while self._queue:
            outcomes.append(await self._run(self._queue.popleft()))
        return outcomes

    async def _run(self, job: RecomputeJob) -> StageOutcome:
        handler = self.handlers[job.stage]
        log_extra = {
            "team_id": job.team_id,
            "contributor_id": job.contributor_id,
            "stage": job.stage.value,
        }
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                async with AsyncSession(self.bind, expire_on_commit=False) as db:
                    await handler(db, job, self.clock)
                return StageOutcome(job, True, attempt)
            except CookGovError as e:
                last_error = e.message
                if e.http_status < 500:
                    logger.error(
                        f"Recompute stage rejected: {e.message}",
                        extra={**log_extra, "attempt": attempt, "error_code": e.code},
                    )
                    return StageOutcome(job, False, attempt, last_error)
                logger.warning(
                    f"Recompute stage failed, retrying: {e.message}",
                    extra={**log_extra, "attempt": attempt, "error_code": e.code},
                )
            except (SQLAlchemyError, OSError) as e:
                last_error = str(e)
                logger.warning(
                    f"Recompute stage failed, retrying: {e}",
                    extra={**log_extra, "attempt": attempt, "error_code": "DATABASE_ERROR"},
                )
            except Exception as e:
                logger.error(
                    f"Recompute stage crashed: {e}",
                    exc_info=True,
                    extra={**log_extra, "attempt": attempt, "error_code": "RECOMPUTE_FAILED"},
                )
                return StageOutcome(job, False, attempt, str(e))

        logger.error(
            f"Recompute stage gave up after {self.max_retries} attempt(s): {last_error}",
            extra={**log_extra, "attempt": self.max_retries},
        )
        return StageOutcome(job, False, self.max_retries, last_error)
