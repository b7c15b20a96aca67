"""Audit Log Routes — read-only access to the governance audit trail.

Invariants:
    - No write endpoints: audit rows are produced only by AuditRecorder
    - No update or delete route exists for an audit entry
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.core.domain_types import GovernanceActionType
from cookgov.infrastructure.database import get_db
from cookgov.infrastructure.sql_repositories import SqlTeamConfigReader
from cookgov.models.audit_log_entry import AuditLogEntry
from cookgov.schemas.audit import AuditLogResponse

router = APIRouter(prefix="/api/v1/teams/{team_id}/audit-logs", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    team_id: str,
    action_type: GovernanceActionType | None = Query(None),
    related_entity_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Newest first, optionally filtered by action or related entity."""
    await SqlTeamConfigReader(db).get_team(team_id)
    query = select(AuditLogEntry).where(AuditLogEntry.team_id == team_id)
    if action_type:
        query = query.where(AuditLogEntry.action_type == action_type.value)
    if related_entity_id:
        query = query.where(AuditLogEntry.related_entity_id == related_entity_id)
    result = await db.execute(
        query.order_by(AuditLogEntry.timestamp.desc()).limit(limit).offset(offset),
    )
    return list(result.scalars().all())
