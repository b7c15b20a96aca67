"""Domain Types — identity aliases, enums and constants shared across the codebase.

Invariants:
    - All ids are opaque strings wrapped in NewType, never bare str in domain logic
    - All valid states are encoded as str Enums, no raw string matching
    - AVERAGE_DAYS_PER_MONTH is the single source of truth for month arithmetic

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB string columns without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

TeamId = NewType("TeamId", str)
ContributorId = NewType("ContributorId", str)
EntryId = NewType("EntryId", str)
CommitteeId = NewType("CommitteeId", str)
ProposalId = NewType("ProposalId", str)
VotingId = NewType("VotingId", str)


# ─── Constants ───────────────────────────────────────────────────

AVERAGE_DAYS_PER_MONTH: float = 30.44
SECONDS_PER_DAY: int = 86_400
EQUITY_TOTAL: float = 100.0
EQUITY_SUM_TOLERANCE: float = 1e-6
LOTTERY_WEIGHT_TOLERANCE: float = 1e-4
SYSTEM_ACTOR: str = "system"


# ─── Enums ───────────────────────────────────────────────────────

class Attribution(str, Enum):
    """How a contribution was earned."""
    SELF = "self"
    SPEND = "spend"


class EquityModel(str, Enum):
    """Equity model tag. PROPORTIONAL and CUSTOM currently compute as SLICING."""
    SLICING = "slicing"
    PROPORTIONAL = "proportional"
    CUSTOM = "custom"


class LotteryWeightSource(str, Enum):
    """Which quantity weights a candidate in the committee lottery."""
    ACTIVE_VALUE = "active_value"
    GOVERNANCE_WEIGHT = "governance_weight"


class ServiceTermStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    TERMINATED = "terminated"


class ProposalType(str, Enum):
    """Proposal categories. Policy and constitutional proposals skip the objection window."""
    POLICY_CHANGE = "policy_change"
    CONSTITUTIONAL_CHALLENGE = "constitutional_challenge"
    BINDING_DECISION = "binding_decision"
    COMMITTEE_SELECTION = "committee_selection"
    OTHER = "other"


class ProposalStatus(str, Enum):
    """Proposal lifecycle. APPROVED, REJECTED and WITHDRAWN are terminal."""
    DRAFT = "draft"
    OBJECTION_WINDOW_OPEN = "objection_window_open"
    OBJECTION_WINDOW_CLOSED = "objection_window_closed"
    VOTING_TRIGGERED = "voting_triggered"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_PROPOSAL_STATUSES = frozenset({
    ProposalStatus.APPROVED,
    ProposalStatus.REJECTED,
    ProposalStatus.WITHDRAWN,
})


class VotingStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    TALLYING = "tallying"
    COMPLETED = "completed"


class ChangeType(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


class GovernanceActionType(str, Enum):
    """Every audited governance action. One audit entry per persisted state change."""
    CONTRIBUTION_RECORDED = "contribution_recorded"
    TEAM_CONFIG_UPDATED = "team_config_updated"
    GOVERNANCE_WEIGHT_UPDATED = "governance_weight_updated"
    EQUITY_CALCULATED = "equity_calculated"
    COMMITTEE_SELECTED = "committee_selected"
    SERVICE_TERM_CREATED = "service_term_created"
    SERVICE_TERM_ENDED = "service_term_ended"
    GOVERNANCE_PROPOSAL_CREATED = "governance_proposal_created"
    OBJECTION_WINDOW_OPENED = "objection_window_opened"
    OBJECTION_ADDED = "objection_added"
    OBJECTION_WINDOW_CLOSED = "objection_window_closed"
    VOTING_TRIGGERED = "voting_triggered"
    VOTING_CREATED = "voting_created"
    VOTE_CAST = "vote_cast"
    VOTING_CLOSED = "voting_closed"
    VOTING_RESULTS_CALCULATED = "voting_results_calculated"
    PROPOSAL_WITHDRAWN = "proposal_withdrawn"
    POLICY_CHANGE_ADOPTED = "policy_change_adopted"
    CONSTITUTIONAL_CHANGE_ADOPTED = "constitutional_change_adopted"


# Default vote options created when voting is triggered
APPROVE_OPTION: str = "approve"
REJECT_OPTION: str = "reject"
