"""Committee Routes — eligibility, lottery selection, verification and service terms."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.domain_types import ServiceTermStatus
from cookgov.infrastructure.database import get_db
from cookgov.schemas.governance import (
    CommitteeSelectRequest, CommitteeSelectionResponse, EligibilityResponse,
    ServiceTermCreate, ServiceTermEnd, ServiceTermResponse,
)
from cookgov.services.committee_service import CommitteeService
from cookgov.services.service_term_service import ServiceTermService

router = APIRouter(prefix="/api/v1", tags=["committees"])


@router.get(
    "/teams/{team_id}/committees/eligibility",
    response_model=list[EligibilityResponse],
)
async def get_eligibility(
    team_id: str,
    eligible_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Every contributor with reasons; eligible_only filters to the candidate pool."""
    results = await CommitteeService(db).get_eligible_members(team_id)
    if eligible_only:
        return [r for r in results if r.is_eligible]
    return results


@router.post(
    "/teams/{team_id}/committees",
    response_model=CommitteeSelectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def select_committee(
    team_id: str, body: CommitteeSelectRequest, db: AsyncSession = Depends(get_db),
):
    return await CommitteeService(db).select_committee(
        team_id, body.committee_name, body.seats, body.created_by, body.seed,
    )


@router.get(
    "/teams/{team_id}/committees",
    response_model=list[CommitteeSelectionResponse],
)
async def list_committees(team_id: str, db: AsyncSession = Depends(get_db)):
    return await CommitteeService(db).list_selections(team_id)


@router.get("/committees/{committee_id}", response_model=CommitteeSelectionResponse)
async def get_committee(committee_id: str, db: AsyncSession = Depends(get_db)):
    return await CommitteeService(db).get_selection(committee_id)


@router.get("/committees/{committee_id}/verification")
async def verify_committee(committee_id: str, db: AsyncSession = Depends(get_db)):
    """Replay the stored lottery from its recorded seed and pool."""
    return await CommitteeService(db).verify_selection(committee_id)


@router.post(
    "/teams/{team_id}/service-terms",
    response_model=ServiceTermResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_service_term(
    team_id: str, body: ServiceTermCreate, db: AsyncSession = Depends(get_db),
):
    return await ServiceTermService(db).create_term(
        team_id,
        body.committee_id,
        body.committee_name,
        body.contributor_id,
        start_date=body.start_date,
        actor_id=body.actor_id,
    )


@router.get(
    "/teams/{team_id}/service-terms",
    response_model=list[ServiceTermResponse],
)
async def list_service_terms(
    team_id: str,
    contributor_id: str | None = Query(None),
    committee_id: str | None = Query(None),
    status_filter: ServiceTermStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    return await ServiceTermService(db).list_terms(
        team_id, contributor_id, committee_id, status_filter,
    )


@router.post("/service-terms/{term_id}/end", response_model=ServiceTermResponse)
async def end_service_term(
    term_id: str, body: ServiceTermEnd, db: AsyncSession = Depends(get_db),
):
    return await ServiceTermService(db).end_term(
        term_id, body.status, body.end_date, body.actor_id,
    )
