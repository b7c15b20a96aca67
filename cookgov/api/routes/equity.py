"""Equity & Weight Routes — recompute and read equity shares and governance weights."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.infrastructure.database import get_db
from cookgov.schemas.governance import EquityRecordResponse, GovernanceWeightResponse
from cookgov.services.equity_service import EquityService
from cookgov.services.governance_weight_service import GovernanceWeightService

router = APIRouter(prefix="/api/v1/teams/{team_id}", tags=["equity"])


@router.post("/equity/recompute", response_model=list[EquityRecordResponse])
async def recompute_equity(team_id: str, db: AsyncSession = Depends(get_db)):
    return await EquityService(db).recompute_team_equity(team_id)


@router.get("/equity", response_model=list[EquityRecordResponse])
async def list_equity(team_id: str, db: AsyncSession = Depends(get_db)):
    return await EquityService(db).list_equity(team_id)


@router.get("/governance-weights", response_model=list[GovernanceWeightResponse])
async def list_governance_weights(team_id: str, db: AsyncSession = Depends(get_db)):
    return await GovernanceWeightService(db).list_weights(team_id)


@router.get(
    "/governance-weights/{contributor_id}",
    response_model=GovernanceWeightResponse,
)
async def get_governance_weight(
    team_id: str, contributor_id: str, db: AsyncSession = Depends(get_db),
):
    """Computed on demand from the ledger; nothing is persisted."""
    return await GovernanceWeightService(db).compute_weight(team_id, contributor_id)


@router.post(
    "/governance-weights/{contributor_id}/recompute",
    response_model=GovernanceWeightResponse,
)
async def recompute_governance_weight(
    team_id: str, contributor_id: str, db: AsyncSession = Depends(get_db),
):
    return await GovernanceWeightService(db).recompute_governance_weight(
        team_id, contributor_id,
    )
