"""Voting Routes — open, vote, close and tally."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.infrastructure.database import get_db
from cookgov.schemas.proposal import (
    ActorRequest, VoteCreate, VoteResponse, VotingCreate, VotingResponse,
)
from cookgov.services.voting_service import VotingService

router = APIRouter(prefix="/api/v1", tags=["voting"])


@router.post(
    "/proposals/{proposal_id}/voting", response_model=VotingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_voting(
    proposal_id: str, body: VotingCreate, db: AsyncSession = Depends(get_db),
):
    """Explicitly open a voting for a triggered proposal that has none yet."""
    return await VotingService(db).create_voting(proposal_id, body.options, body.actor_id)


@router.get("/teams/{team_id}/votings", response_model=list[VotingResponse])
async def list_votings(team_id: str, db: AsyncSession = Depends(get_db)):
    return await VotingService(db).list_votings(team_id)


@router.get("/votings/{voting_id}", response_model=VotingResponse)
async def get_voting(voting_id: str, db: AsyncSession = Depends(get_db)):
    return await VotingService(db).get_voting(voting_id)


@router.post(
    "/votings/{voting_id}/votes", response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def cast_vote(
    voting_id: str, body: VoteCreate, db: AsyncSession = Depends(get_db),
):
    return await VotingService(db).cast_vote(voting_id, body.voter_id, body.option)


@router.post("/votings/{voting_id}/close", response_model=VotingResponse)
async def close_voting(
    voting_id: str, body: ActorRequest, db: AsyncSession = Depends(get_db),
):
    return await VotingService(db).close_voting(voting_id, body.actor_id)


@router.post("/votings/{voting_id}/tally", response_model=VotingResponse)
async def tally_voting(
    voting_id: str, body: ActorRequest, db: AsyncSession = Depends(get_db),
):
    """Compute weighted results and resolve the proposal."""
    return await VotingService(db).tally_voting(voting_id, body.actor_id)
