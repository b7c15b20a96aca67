"""Proposal Routes — proposal lifecycle and the objection window.

Invariants:
    - Routes are thin: every status check lives in core.workflow via ProposalService
    - Crossing the objection threshold opens the voting inside the same request
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.domain_types import ProposalStatus
from cookgov.infrastructure.database import get_db
from cookgov.schemas.proposal import (
    ActorRequest, ObjectionCreate, ProposalCreate, ProposalResponse,
    ProposalSubmit, ThresholdResponse, WithdrawRequest,
)
from cookgov.services.proposal_service import ProposalService

router = APIRouter(prefix="/api/v1", tags=["proposals"])


@router.post(
    "/teams/{team_id}/proposals", response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_proposal(
    team_id: str, body: ProposalCreate, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).create_proposal(
        team_id,
        body.type,
        body.title,
        body.proposed_by,
        description=body.description,
        rule_name=body.rule_name,
        rule_text=body.rule_text,
        change_type=body.change_type,
    )


@router.get("/teams/{team_id}/proposals", response_model=list[ProposalResponse])
async def list_proposals(
    team_id: str,
    status_filter: ProposalStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).list_proposals(team_id, status_filter)


@router.get("/proposals/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(proposal_id: str, db: AsyncSession = Depends(get_db)):
    return await ProposalService(db).get_proposal(proposal_id)


@router.post("/proposals/{proposal_id}/submit", response_model=ProposalResponse)
async def submit_proposal(
    proposal_id: str, body: ProposalSubmit, db: AsyncSession = Depends(get_db),
):
    """DRAFT → objection window; rule-change proposals go straight to voting."""
    return await ProposalService(db).submit_proposal(
        proposal_id,
        actor_id=body.actor_id,
        objection_window_days=body.objection_window_days,
        objection_threshold=body.objection_threshold,
    )


@router.post(
    "/proposals/{proposal_id}/objection-window", response_model=ProposalResponse,
)
async def open_objection_window(
    proposal_id: str, body: ProposalSubmit, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).open_objection_window(
        proposal_id,
        actor_id=body.actor_id,
        window_days=body.objection_window_days,
        threshold=body.objection_threshold,
    )


@router.post(
    "/proposals/{proposal_id}/objections", response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_objection(
    proposal_id: str, body: ObjectionCreate, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).add_objection(
        proposal_id, body.objector_id, body.reason,
    )


@router.post(
    "/proposals/{proposal_id}/check-threshold", response_model=ThresholdResponse,
)
async def check_threshold(proposal_id: str, db: AsyncSession = Depends(get_db)):
    return await ProposalService(db).check_threshold(proposal_id)


@router.post("/proposals/{proposal_id}/trigger-voting", response_model=ProposalResponse)
async def trigger_voting(
    proposal_id: str, body: ActorRequest, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).trigger_voting(proposal_id, body.actor_id)


@router.post(
    "/proposals/{proposal_id}/close-objection-window",
    response_model=ProposalResponse,
)
async def close_objection_window(
    proposal_id: str, body: ActorRequest, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).close_objection_window(proposal_id, body.actor_id)


@router.post("/proposals/{proposal_id}/withdraw", response_model=ProposalResponse)
async def withdraw_proposal(
    proposal_id: str, body: WithdrawRequest, db: AsyncSession = Depends(get_db),
):
    return await ProposalService(db).withdraw_proposal(proposal_id, body.actor_id)
