"""Ledger Service — append-only recording and the recompute cascade.

Invariants verified:
    - Non-positive values and unknown teams are rejected before anything is written
    - Recording an entry recomputes the contributor's weight, then team equity
    - Recompute failures are retried, reported and never fail the recording
    - Every recorded entry leaves one contribution_recorded audit row
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from cookgov.core.domain_types import Attribution, GovernanceActionType
from cookgov.core.errors import NotFoundError, ValidationError
from cookgov.core.ledger_aggregation import AggregationPeriod
from cookgov.models.audit_log_entry import AuditLogEntry
from cookgov.models.contribution_entry import ContributionEntry
from cookgov.services.equity_service import EquityService
from cookgov.services.governance_weight_service import GovernanceWeightService
from cookgov.services.ledger_service import LedgerService
from cookgov.services.recompute_pipeline import (
    RecomputePipeline, RecomputeStage, STAGE_HANDLERS,
)


async def test_rejects_non_positive_value(test_db, clock, team):
    with pytest.raises(ValidationError):
        await LedgerService(test_db, clock).record_contribution("team-1", "alice", 0)


async def test_rejects_unknown_team(test_db, clock):
    with pytest.raises(NotFoundError):
        await LedgerService(test_db, clock).record_contribution("nope", "alice", 10)


async def test_recording_cascades_into_weights_and_equity(test_db, clock, seed_ledger):
    assert [o.succeeded for o in seed_ledger.last_recompute] == [True, True]
    assert [o.job.stage for o in seed_ledger.last_recompute] == [
        RecomputeStage.GOVERNANCE_WEIGHT, RecomputeStage.TEAM_EQUITY,
    ]

    weights = await GovernanceWeightService(test_db, clock).list_weights("team-1")
    assert {w.contributor_id: w.weight for w in weights} == {
        "alice": 100, "bob": 50, "carol": 30,
    }

    equity = await EquityService(test_db, clock).list_equity("team-1")
    assert [e.contributor_id for e in equity] == ["alice", "bob", "carol"]
    assert sum(e.equity for e in equity) == pytest.approx(100)
    assert equity[0].equity == pytest.approx(100 / 180 * 100)


async def test_recompute_failure_does_not_fail_recording(test_db, clock, team):
    calls = []

    async def broken(db, job, clock):
        calls.append(job.stage)
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    handlers = {**STAGE_HANDLERS, RecomputeStage.GOVERNANCE_WEIGHT: broken}
    pipeline = RecomputePipeline(test_db.bind, max_retries=2, clock=clock, handlers=handlers)
    ledger = LedgerService(test_db, clock, pipeline=pipeline)

    entry = await ledger.record_contribution("team-1", "alice", 10)

    weight_outcome, equity_outcome = ledger.last_recompute
    assert weight_outcome.succeeded is False
    assert weight_outcome.attempts == 2
    assert "database is locked" in weight_outcome.error
    assert equity_outcome.succeeded is True
    assert calls == [RecomputeStage.GOVERNANCE_WEIGHT] * 2

    stored = await test_db.get(ContributionEntry, entry.id)
    assert stored.value == 10


async def test_connection_reset_in_stage_does_not_fail_recording(test_db, clock, team):
    async def reset(db, job, clock):
        raise ConnectionResetError("connection reset by peer")

    handlers = {**STAGE_HANDLERS, RecomputeStage.GOVERNANCE_WEIGHT: reset}
    pipeline = RecomputePipeline(test_db.bind, max_retries=2, clock=clock, handlers=handlers)
    ledger = LedgerService(test_db, clock, pipeline=pipeline)

    entry = await ledger.record_contribution("team-1", "alice", 10)

    weight_outcome, equity_outcome = ledger.last_recompute
    assert weight_outcome.succeeded is False
    assert weight_outcome.attempts == 2
    assert "connection reset" in weight_outcome.error
    assert equity_outcome.succeeded is True
    assert (await test_db.get(ContributionEntry, entry.id)).value == 10


async def test_unexpected_stage_error_is_contained(test_db, clock, team):
    async def buggy(db, job, clock):
        raise KeyError("alice")

    handlers = {**STAGE_HANDLERS, RecomputeStage.GOVERNANCE_WEIGHT: buggy}
    pipeline = RecomputePipeline(test_db.bind, max_retries=3, clock=clock, handlers=handlers)
    ledger = LedgerService(test_db, clock, pipeline=pipeline)

    await ledger.record_contribution("team-1", "alice", 10)

    weight_outcome, equity_outcome = ledger.last_recompute
    assert weight_outcome.succeeded is False
    assert weight_outcome.attempts == 1
    assert equity_outcome.succeeded is True


async def test_pipeline_collapses_duplicate_jobs(test_db, clock):
    pipeline = RecomputePipeline(test_db.bind, max_retries=1, clock=clock)
    pipeline.enqueue_ledger_change("team-1", "alice")
    pipeline.enqueue_ledger_change("team-1", "alice")
    pipeline.enqueue_ledger_change("team-1", "bob")
    assert [(j.stage, j.contributor_id) for j in pipeline.pending] == [
        (RecomputeStage.GOVERNANCE_WEIGHT, "alice"),
        (RecomputeStage.TEAM_EQUITY, None),
        (RecomputeStage.GOVERNANCE_WEIGHT, "bob"),
    ]


async def test_domain_error_in_stage_is_not_retried(test_db, clock):
    pipeline = RecomputePipeline(test_db.bind, max_retries=3, clock=clock)
    pipeline.enqueue_ledger_change("missing-team", "alice")
    outcomes = await pipeline.drain()
    assert all(not o.succeeded for o in outcomes)
    assert all(o.attempts == 1 for o in outcomes)


async def test_every_entry_is_audited(test_db, seed_ledger):
    count = await test_db.scalar(
        select(func.count()).select_from(AuditLogEntry).where(
            AuditLogEntry.action_type == GovernanceActionType.CONTRIBUTION_RECORDED.value,
        ),
    )
    assert count == 3


async def test_list_and_aggregate(test_db, clock, seed_ledger):
    await seed_ledger.record_contribution(
        "team-1", "alice", 5, attribution=Attribution.SPEND,
    )
    entries = await seed_ledger.list_entries("team-1", contributor_id="alice")
    assert sorted(e.value for e in entries) == [5, 100]

    totals = await seed_ledger.aggregate("team-1", AggregationPeriod.MONTH)
    current = totals[-1]
    assert current.period == "2026-06"
    assert (current.total, current.spend_total, current.entry_count) == (155, 5, 3)
    assert totals[0].total == 30
