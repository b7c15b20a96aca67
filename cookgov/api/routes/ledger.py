"""Ledger Routes — append and read COOK contributions.

Invariants:
    - The ledger is append-only over HTTP too: POST and GET, no PUT/PATCH/DELETE
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.ledger_aggregation import AggregationPeriod
from cookgov.infrastructure.database import get_db
from cookgov.schemas.ledger import (
    ContributionCreate, ContributionResponse, PeriodTotalResponse,
)
from cookgov.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/v1/teams/{team_id}/contributions", tags=["ledger"])


@router.post(
    "", response_model=ContributionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_contribution(
    team_id: str, body: ContributionCreate, db: AsyncSession = Depends(get_db),
):
    """Append one entry; weight and equity recompute follows."""
    return await LedgerService(db).record_contribution(
        team_id,
        body.contributor_id,
        body.value,
        attribution=body.attribution,
        issued_at=body.issued_at,
        task_id=body.task_id,
        actor_id=body.actor_id,
    )


@router.get("", response_model=list[ContributionResponse])
async def list_contributions(
    team_id: str,
    contributor_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await LedgerService(db).list_entries(team_id, contributor_id, limit, offset)


@router.get("/aggregate", response_model=list[PeriodTotalResponse])
async def aggregate_contributions(
    team_id: str,
    period: AggregationPeriod = Query(AggregationPeriod.MONTH),
    contributor_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Monthly or yearly totals, split by attribution."""
    return await LedgerService(db).aggregate(team_id, period, contributor_id)
