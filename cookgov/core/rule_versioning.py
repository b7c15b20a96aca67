"""Rule Versioning — version arithmetic for constitutional and policy changes.

Invariants:
    - version = latest + 1 per rule name, starting at 1; never skipped, never reused
    - previous_version is the latest version at adoption time (None for the first)
    - Only a proposal of the matching type, APPROVED through a COMPLETED voting, is adoptable
"""

from dataclasses import dataclass

from cookgov.core.domain_types import (
    REJECT_OPTION, ChangeType, ProposalStatus, ProposalType, VotingStatus,
)
from cookgov.core.errors import StateConflictError, ValidationError
from cookgov.core.workflow import require_status


@dataclass(frozen=True)
class RuleVersion:
    version: int
    change_type: ChangeType


@dataclass(frozen=True)
class VersionPlan:
    rule_name: str
    version: int
    previous_version: int | None
    change_type: ChangeType


def plan_rule_version(
    rule_name: str, latest: RuleVersion | None, change_type: ChangeType,
) -> VersionPlan:
    name = rule_name.strip()
    if not name:
        raise ValidationError("rule name must not be empty", field="rule_name")

    rule_exists = latest is not None and latest.change_type != ChangeType.DELETED
    if change_type == ChangeType.CREATED and rule_exists:
        raise StateConflictError(
            f"Rule '{name}' already exists at version {latest.version}",
            current_status=latest.change_type.value,
        )
    if change_type in (ChangeType.MODIFIED, ChangeType.DELETED) and not rule_exists:
        raise ValidationError(f"Unknown rule name '{name}'", field="rule_name")

    return VersionPlan(
        rule_name=name,
        version=(latest.version + 1) if latest else 1,
        previous_version=latest.version if latest else None,
        change_type=change_type,
    )


def validate_adoption(
    proposal_type: ProposalType,
    proposal_status: ProposalStatus,
    expected_type: ProposalType,
    voting_status: VotingStatus | None,
    winning_option: str | None,
) -> None:
    if proposal_type != expected_type:
        raise ValidationError(
            f"Proposal type '{proposal_type.value}' cannot adopt a "
            f"{expected_type.value.replace('_', ' ')}",
            field="proposal_id",
        )
    require_status(proposal_status, [ProposalStatus.APPROVED], "adopt change")
    if voting_status != VotingStatus.COMPLETED:
        raise StateConflictError(
            "Change can only be adopted after a completed voting",
            current_status=voting_status.value if voting_status else None,
        )
    if winning_option is None or winning_option == REJECT_OPTION:
        raise StateConflictError("Voting did not approve the change")
