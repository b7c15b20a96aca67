"""Domain Types — enum values, config validation and error payloads.

Tests:
    - Enums serialize to their wire strings
    - validate_team_config rejects malformed fields
    - CookGovError subclasses carry the right HTTP status and code
"""

import pytest

from cookgov.core.domain_types import (
    Attribution, GovernanceActionType, ProposalStatus, TERMINAL_PROPOSAL_STATUSES,
)
from cookgov.core.errors import (
    ErrorContext, InsufficientDataError, LotteryVerificationError, NotFoundError,
    StateConflictError, ValidationError,
)
from cookgov.core.ledger_types import TeamConfig, validate_team_config


def test_enums_are_string_valued():
    assert Attribution.SPEND.value == "spend"
    assert ProposalStatus.VOTING_TRIGGERED == "voting_triggered"
    assert GovernanceActionType("vote_cast") is GovernanceActionType.VOTE_CAST


def test_terminal_statuses():
    assert ProposalStatus.APPROVED in TERMINAL_PROPOSAL_STATUSES
    assert ProposalStatus.DRAFT not in TERMINAL_PROPOSAL_STATUSES


# ─── validate_team_config ────────────────────────────────────────

def test_default_config_is_valid():
    validate_team_config(TeamConfig())


def test_malformed_configs_rejected():
    bad = [
        (TeamConfig(cap=0), "cap"),
        (TeamConfig(decay_rate=1.5), "decay_rate"),
        (TeamConfig(minimum_active_value=-1), "minimum_active_value"),
        (TeamConfig(objection_threshold=-0.5), "objection_threshold"),
        (TeamConfig(voting_period_days=-1), "voting_period_days"),
        (TeamConfig(approval_threshold=120), "approval_threshold"),
    ]
    for config, field in bad:
        with pytest.raises(ValidationError) as exc:
            validate_team_config(config)
        assert exc.value.field == field


# ─── Errors ──────────────────────────────────────────────────────

def test_error_statuses():
    assert ValidationError("x").http_status == 400
    assert InsufficientDataError("x").http_status == 422
    assert StateConflictError("x").http_status == 409
    assert NotFoundError("Team", "t1").http_status == 404
    assert LotteryVerificationError(3).http_status == 500


def test_not_found_response_carries_entity():
    body = NotFoundError("Team", "t1", ErrorContext(team_id="t1")).to_response()
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert body["error"]["message"] == "Team 't1' not found"
    assert body["error"]["context"] == {
        "team_id": "t1", "entity_id": "t1", "entity_type": "Team",
    }
