"""Audit Recorder — append-only writes that never fail the primary action.

Tests cover:
    - Actions append entries with participants, weights and related entity
    - A broken audit store returns False and the primary write still commits
    - A refused connection is swallowed the same way as a SQL error
    - The recorder exposes no update or delete operation
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import GovernanceActionType
from cookgov.models.audit_log_entry import AuditLogEntry
from cookgov.models.contribution_entry import ContributionEntry
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.ledger_service import LedgerService


async def test_record_writes_entry(test_db, clock, team):
    recorder = AuditRecorder.for_session(test_db)
    ok = await recorder.record(build_audit_entry(
        team_id="team-1",
        action_type=GovernanceActionType.VOTE_CAST,
        outcome="approve",
        now=clock(),
        actor_id="alice",
        weights={"alice": 12.5},
        related_entity_id="voting-1",
        related_entity_type="voting",
    ))
    assert ok is True

    result = await test_db.execute(
        select(AuditLogEntry).where(AuditLogEntry.action_type == "vote_cast"),
    )
    row = result.scalar_one()
    assert row.participants == ["alice"]
    assert row.weights == {"alice": 12.5}
    assert row.related_entity_id == "voting-1"


async def test_audit_failure_does_not_fail_action(test_db, test_engine, clock, team):
    async with test_engine.begin() as conn:
        await conn.run_sync(AuditLogEntry.__table__.drop)

    recorder = AuditRecorder.for_session(test_db)
    ok = await recorder.record(build_audit_entry(
        team_id="team-1",
        action_type=GovernanceActionType.CONTRIBUTION_RECORDED,
        outcome="recorded",
        now=clock(),
    ))
    assert ok is False

    ledger = LedgerService(test_db, clock)
    entry = await ledger.record_contribution("team-1", "alice", 10)

    stored = await test_db.get(ContributionEntry, entry.id)
    assert stored is not None
    assert stored.value == 10


async def test_refused_connection_does_not_fail_action(test_db, clock, team):
    async def refuse():
        raise ConnectionRefusedError(111, "Connect call failed")

    unreachable = create_async_engine("sqlite+aiosqlite://", async_creator=refuse)
    try:
        recorder = AuditRecorder(unreachable)
        ok = await recorder.record(build_audit_entry(
            team_id="team-1",
            action_type=GovernanceActionType.VOTE_CAST,
            outcome="approve",
            now=clock(),
        ))
        assert ok is False

        ledger = LedgerService(test_db, clock)
        ledger.audit = recorder
        entry = await ledger.record_contribution("team-1", "bob", 7)
        assert (await test_db.get(ContributionEntry, entry.id)).value == 7
    finally:
        await unreachable.dispose()


def test_recorder_is_insert_only():
    public = {name for name in dir(AuditRecorder) if not name.startswith("_")}
    assert public == {"for_session", "record", "record_many"}
