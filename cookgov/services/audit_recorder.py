"""Audit Recorder — append-only sink for governance actions.

Invariants:
    - Insert-only: the recorder exposes record() and nothing that updates or deletes
    - Called AFTER the primary action committed; never participates in its transaction
    - Any write failure, connection errors included, is logged at ERROR with exc_info
      and swallowed (record() returns False)

Design Decisions:
    - Own AsyncSession on the caller's engine: a failed audit write rolls back only itself,
      leaving the caller's session and loaded objects untouched
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cookgov.core.audit import AuditEntry
from cookgov.models.audit_log_entry import AuditLogEntry

logger = logging.getLogger(__name__)


def to_audit_row(entry: AuditEntry) -> AuditLogEntry:
    return AuditLogEntry(
        team_id=entry.team_id,
        action_type=entry.action_type.value,
        actor_id=entry.actor_id,
        participants=list(entry.participants),
        outcome=entry.outcome,
        outcome_details=dict(entry.outcome_details),
        weights=dict(entry.weights),
        total_weight=entry.total_weight,
        related_entity_id=entry.related_entity_id,
        related_entity_type=entry.related_entity_type,
        extra_metadata=dict(entry.metadata),
        timestamp=entry.timestamp,
    )


class AuditRecorder:
    """Writes AuditLogEntry rows through a dedicated session."""

    def __init__(self, bind: AsyncEngine):
        self.bind = bind

    @classmethod
    def for_session(cls, db: AsyncSession) -> "AuditRecorder":
        return cls(db.bind)

    async def record(self, entry: AuditEntry) -> bool:
        return await self.record_many([entry])

    async def record_many(self, entries: Iterable[AuditEntry]) -> bool:
        entries = list(entries)
        if not entries:
            return True
        try:
            async with AsyncSession(self.bind, expire_on_commit=False) as audit_db:
                audit_db.add_all([to_audit_row(e) for e in entries])
                await audit_db.commit()
            return True
        except Exception as e:
            logger.error(
                f"Audit write failed for {len(entries)} entr(y/ies): {e}",
                exc_info=True,
                extra={
                    "team_id": entries[0].team_id,
                    "action_type": entries[0].action_type.value,
                    "error_code": "AUDIT_WRITE_FAILED",
                },
            )
            return False
