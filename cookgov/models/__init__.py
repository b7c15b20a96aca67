"""ORM Models — SQLAlchemy declarative models for all governance entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Team is the scope of every entity; all rows carry team_id

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from cookgov.models.team import Team  # noqa: F401
from cookgov.models.contribution_entry import ContributionEntry  # noqa: F401
from cookgov.models.equity_record import EquityRecord  # noqa: F401
from cookgov.models.governance_weight_record import GovernanceWeightRecord  # noqa: F401
from cookgov.models.service_term import ServiceTerm  # noqa: F401
from cookgov.models.committee_selection import CommitteeSelection  # noqa: F401
from cookgov.models.governance_proposal import GovernanceProposal, Objection  # noqa: F401
from cookgov.models.voting import Voting, Vote  # noqa: F401
from cookgov.models.rule_change import ConstitutionalChange, PolicyChange  # noqa: F401
from cookgov.models.audit_log_entry import AuditLogEntry  # noqa: F401
