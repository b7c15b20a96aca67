"""Boundary Protocols — read contracts between the governance core and the shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Readers return core snapshots (dataclasses), never ORM rows
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the pure functions that consume their results are never async themselves
"""

from typing import Protocol

from cookgov.core.ledger_types import ContributionEntry, TeamConfig
from cookgov.core.service_term_rules import ProposalUnderReview, ServiceTermSnapshot


class LedgerReader(Protocol):
    """List contribution entries by team and/or contributor, oldest first."""
    async def list_by_team(self, team_id: str) -> list[ContributionEntry]: ...
    async def list_by_contributor(
        self, team_id: str, contributor_id: str,
    ) -> list[ContributionEntry]: ...


class TeamConfigReader(Protocol):
    """Fetch a team's configuration. Raises NotFoundError for unknown teams."""
    async def get_config(self, team_id: str) -> TeamConfig: ...


class ServiceTermReader(Protocol):
    async def list_by_team(self, team_id: str) -> list[ServiceTermSnapshot]: ...
    async def list_by_contributor(
        self, team_id: str, contributor_id: str,
    ) -> list[ServiceTermSnapshot]: ...
    async def list_by_committee(
        self, team_id: str, committee_id: str,
    ) -> list[ServiceTermSnapshot]: ...


class ProposalReader(Protocol):
    """Proposals whose objection window is currently open."""
    async def list_under_review(self, team_id: str) -> list[ProposalUnderReview]: ...
