"""Audit Entries — immutable records with derived totals."""

import dataclasses

import pytest

from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import SYSTEM_ACTOR, GovernanceActionType
from tests.core.helpers import NOW


def test_total_weight_and_participants_derive_from_weights():
    entry = build_audit_entry(
        "team-1", GovernanceActionType.VOTE_CAST, "approve", NOW,
        actor_id="alice", weights={"alice": 2.5, "bob": 1.5},
    )
    assert entry.total_weight == 4.0
    assert entry.participants == ["alice", "bob"]
    assert entry.actor_id == "alice"


def test_missing_actor_is_system():
    entry = build_audit_entry("team-1", GovernanceActionType.EQUITY_CALCULATED, "ok", NOW)
    assert entry.actor_id == SYSTEM_ACTOR
    assert entry.total_weight == 0.0
    assert entry.participants == []


def test_explicit_participants_kept():
    entry = build_audit_entry(
        "team-1", GovernanceActionType.COMMITTEE_SELECTED, "selected 1 of 3", NOW,
        participants=["a", "b", "c"], weights={"a": 1.0},
    )
    assert entry.participants == ["a", "b", "c"]


def test_entries_are_frozen():
    entry = build_audit_entry("team-1", GovernanceActionType.VOTE_CAST, "approve", NOW)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.outcome = "reject"
