"""Rule Change Routes — adopt approved proposals as versioned rules, read history."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.infrastructure.database import get_db
from cookgov.schemas.proposal import (
    AdoptRequest, ConstitutionalChangeResponse, PolicyChangeResponse,
)
from cookgov.services.rule_change_service import RuleChangeService

router = APIRouter(prefix="/api/v1", tags=["rule-changes"])


@router.post(
    "/proposals/{proposal_id}/adopt-constitutional",
    response_model=ConstitutionalChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def adopt_constitutional_change(
    proposal_id: str, body: AdoptRequest, db: AsyncSession = Depends(get_db),
):
    return await RuleChangeService(db).adopt_constitutional_change(
        proposal_id, body.adopted_by,
    )


@router.post(
    "/proposals/{proposal_id}/adopt-policy",
    response_model=PolicyChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def adopt_policy_change(
    proposal_id: str, body: AdoptRequest, db: AsyncSession = Depends(get_db),
):
    return await RuleChangeService(db).adopt_policy_change(proposal_id, body.adopted_by)


@router.get(
    "/teams/{team_id}/constitutional-changes",
    response_model=list[ConstitutionalChangeResponse],
)
async def constitutional_history(
    team_id: str,
    rule_name: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await RuleChangeService(db).constitutional_history(team_id, rule_name)


@router.get("/teams/{team_id}/policy-changes", response_model=list[PolicyChangeResponse])
async def policy_history(
    team_id: str,
    policy_name: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await RuleChangeService(db).policy_history(team_id, policy_name)
