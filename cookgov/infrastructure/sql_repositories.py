"""SQL Repositories — SQLAlchemy implementations of the core read protocols.

Invariants:
    - Every reader returns core snapshots (core/ledger_types, core/service_term_rules)
    - Ledger entries are returned oldest first (issued_at, id) so pipelines see ledger order
    - resolve_team_config() is the only place NULL team columns fall back to Settings

Design Decisions:
    - One AsyncSession per reader, owned by the caller (service or route dependency)
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.config import Settings, get_settings
from cookgov.core.domain_types import (
    Attribution, EquityModel, LotteryWeightSource, ProposalStatus, ServiceTermStatus,
)
from cookgov.core.errors import NotFoundError
from cookgov.core.ledger_types import ContributionEntry, TeamConfig
from cookgov.core.service_term_rules import ProposalUnderReview, ServiceTermSnapshot
from cookgov.models.contribution_entry import ContributionEntry as ContributionEntryModel
from cookgov.models.governance_proposal import GovernanceProposal
from cookgov.models.service_term import ServiceTerm
from cookgov.models.team import Team


# ─── Row → snapshot ──────────────────────────────────────────────

def to_contribution_entry(row: ContributionEntryModel) -> ContributionEntry:
    return ContributionEntry(
        id=row.id,
        team_id=row.team_id,
        contributor_id=row.contributor_id,
        value=row.value,
        issued_at=row.issued_at,
        attribution=Attribution(row.attribution),
        task_id=row.task_id,
    )


def to_service_term_snapshot(row: ServiceTerm) -> ServiceTermSnapshot:
    return ServiceTermSnapshot(
        contributor_id=row.contributor_id,
        committee_id=row.committee_id,
        committee_name=row.committee_name,
        status=ServiceTermStatus(row.status),
        start_date=row.start_date,
        end_date=row.end_date,
    )


def _or_default(value, default):
    return default if value is None else value


def resolve_team_config(team: Team, settings: Settings | None = None) -> TeamConfig:
    s = settings or get_settings()
    return TeamConfig(
        cap=team.cap,
        decay_rate=team.decay_rate,
        eligibility_window_months=_or_default(
            team.eligibility_window_months, s.default_eligibility_window_months,
        ),
        minimum_active_value=_or_default(
            team.minimum_active_value, s.default_minimum_active_value,
        ),
        cooling_off_days=_or_default(team.cooling_off_days, s.default_cooling_off_days),
        objection_window_days=_or_default(
            team.objection_window_days, s.default_objection_window_days,
        ),
        objection_threshold=_or_default(
            team.objection_threshold, s.default_objection_threshold,
        ),
        voting_period_days=_or_default(team.voting_period_days, s.default_voting_period_days),
        approval_threshold=_or_default(team.approval_threshold, s.default_approval_threshold),
        constitutional_voting_period_days=_or_default(
            team.constitutional_voting_period_days,
            s.default_constitutional_voting_period_days,
        ),
        constitutional_approval_threshold=_or_default(
            team.constitutional_approval_threshold,
            s.default_constitutional_approval_threshold,
        ),
        equity_model=EquityModel(team.equity_model or EquityModel.SLICING.value),
        lottery_weight_source=LotteryWeightSource(
            team.lottery_weight_source or LotteryWeightSource.ACTIVE_VALUE.value,
        ),
    )


# ─── Readers ─────────────────────────────────────────────────────

class SqlLedgerReader:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_by_team(self, team_id: str) -> list[ContributionEntry]:
        result = await self.db.execute(
            select(ContributionEntryModel)
            .where(ContributionEntryModel.team_id == team_id)
            .order_by(ContributionEntryModel.issued_at, ContributionEntryModel.id),
        )
        return [to_contribution_entry(r) for r in result.scalars().all()]

    async def list_by_contributor(
        self, team_id: str, contributor_id: str,
    ) -> list[ContributionEntry]:
        result = await self.db.execute(
            select(ContributionEntryModel)
            .where(
                ContributionEntryModel.team_id == team_id,
                ContributionEntryModel.contributor_id == contributor_id,
            )
            .order_by(ContributionEntryModel.issued_at, ContributionEntryModel.id),
        )
        return [to_contribution_entry(r) for r in result.scalars().all()]


class SqlTeamConfigReader:
    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings

    async def get_team(self, team_id: str) -> Team:
        team = await self.db.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team", team_id)
        return team

    async def get_config(self, team_id: str) -> TeamConfig:
        return resolve_team_config(await self.get_team(team_id), self.settings)


class SqlServiceTermReader:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _list(self, *criteria) -> list[ServiceTermSnapshot]:
        result = await self.db.execute(
            select(ServiceTerm).where(*criteria).order_by(ServiceTerm.start_date),
        )
        return [to_service_term_snapshot(r) for r in result.scalars().all()]

    async def list_by_team(self, team_id: str) -> list[ServiceTermSnapshot]:
        return await self._list(ServiceTerm.team_id == team_id)

    async def list_by_contributor(
        self, team_id: str, contributor_id: str,
    ) -> list[ServiceTermSnapshot]:
        return await self._list(
            ServiceTerm.team_id == team_id,
            ServiceTerm.contributor_id == contributor_id,
        )

    async def list_by_committee(
        self, team_id: str, committee_id: str,
    ) -> list[ServiceTermSnapshot]:
        return await self._list(
            ServiceTerm.team_id == team_id,
            ServiceTerm.committee_id == committee_id,
        )


class SqlProposalReader:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_under_review(self, team_id: str) -> list[ProposalUnderReview]:
        result = await self.db.execute(
            select(GovernanceProposal).where(
                GovernanceProposal.team_id == team_id,
                GovernanceProposal.status == ProposalStatus.OBJECTION_WINDOW_OPEN.value,
            ),
        )
        return [
            ProposalUnderReview(
                title=p.title,
                proposed_by=p.proposed_by,
                objector_ids=tuple(o.objector_id for o in p.objections),
            )
            for p in result.scalars().all()
        ]
