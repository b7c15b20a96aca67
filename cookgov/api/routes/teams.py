"""Team Routes — create teams and read or update their governance configuration.

Invariants:
    - PUT is an upsert: creates the team on first call, patches config afterwards
    - GET returns the resolved configuration (Settings defaults filled in)
"""

import dataclasses

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.infrastructure.database import get_db
from cookgov.infrastructure.sql_repositories import resolve_team_config
from cookgov.models.team import Team
from cookgov.schemas.team import TeamConfigResponse, TeamResponse, TeamUpsert
from cookgov.services.team_service import TeamService

router = APIRouter(prefix="/api/v1/teams", tags=["teams"])


def to_team_response(team: Team) -> TeamResponse:
    config = resolve_team_config(team)
    return TeamResponse(
        id=team.id,
        name=team.name,
        created_at=team.created_at,
        updated_at=team.updated_at,
        config=TeamConfigResponse(**dataclasses.asdict(config)),
    )


@router.put("/{team_id}", response_model=TeamResponse)
async def upsert_team(
    team_id: str, body: TeamUpsert, db: AsyncSession = Depends(get_db),
):
    """Create the team or update the config fields that were sent."""
    team = await TeamService(db).upsert_team(
        team_id,
        name=body.name,
        config=body.config.model_dump(exclude_unset=True),
        actor_id=body.actor_id,
    )
    return to_team_response(team)


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: str, db: AsyncSession = Depends(get_db)):
    return to_team_response(await TeamService(db).get_team(team_id))
