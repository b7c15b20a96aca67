"""Committee Service — eligibility evaluation and verified lottery selection.

Invariants:
    - Eligibility = raw windowed activity + exclusions derived from service terms
      and proposals under review, evaluated for every contributor with ledger entries
    - A lottery result is persisted only after verify_lottery_result() accepts it;
      rejected results are discarded and redrawn up to lottery_max_attempts
    - Selection, its service terms and nothing else are committed together, once

Design Decisions:
    - Candidate weight comes from TeamConfig.lottery_weight_source:
      raw active value (default) or decayed governance weight
"""

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgov.config import get_settings
from cookgov.core.audit import build_audit_entry
from cookgov.core.domain_types import GovernanceActionType, LotteryWeightSource
from cookgov.core.effective_value import group_entries_by_contributor
from cookgov.core.eligibility import (
    CommitteeEligibilityResult, eligible_subset, evaluate_eligibility,
)
from cookgov.core.errors import (
    ErrorContext, LotteryVerificationError, NotFoundError, ValidationError,
)
from cookgov.core.governance_weight import compute_team_weights
from cookgov.core.ledger_types import TeamConfig
from cookgov.core.lottery import (
    LotteryCandidate, LotteryDraw, SelectionDetail, WeightedLotteryResult,
    lottery_verification_failures, select_committee_members,
)
from cookgov.core.repository_protocols import LedgerReader, ProposalReader, ServiceTermReader
from cookgov.core.service_term_rules import derive_exclusion_reasons
from cookgov.db.base import new_id
from cookgov.db.types import utc_now
from cookgov.infrastructure.sql_repositories import (
    SqlLedgerReader, SqlProposalReader, SqlServiceTermReader, SqlTeamConfigReader,
)
from cookgov.models.committee_selection import CommitteeSelection
from cookgov.services.audit_recorder import AuditRecorder
from cookgov.services.service_term_service import ServiceTermService, term_created_audit

logger = logging.getLogger(__name__)


def lottery_result_to_dict(result: WeightedLotteryResult) -> dict:
    """JSON-safe form of a lottery result, draw records included."""
    data = dataclasses.asdict(result)
    data["selected_at"] = result.selected_at.isoformat()
    return data


def lottery_result_from_dict(data: dict) -> WeightedLotteryResult:
    draws = [
        LotteryDraw(
            seat=d["seat"],
            random_value=d["random_value"],
            pool_weight=d["pool_weight"],
            uniform_fallback=d["uniform_fallback"],
            selected_id=d["selected_id"],
            details=[SelectionDetail(**detail) for detail in d["details"]],
        )
        for d in data["draws"]
    ]
    return WeightedLotteryResult(
        selected_ids=list(data["selected_ids"]),
        seats=data["seats"],
        seed=data["seed"],
        reproducible=data["reproducible"],
        total_weight=data["total_weight"],
        selected_at=datetime.fromisoformat(data["selected_at"]),
        draws=draws,
    )


def recorded_pool(result: WeightedLotteryResult) -> list[LotteryCandidate]:
    """The full candidate pool, in draw order, as seen by the first draw."""
    if not result.draws:
        return []
    return [
        LotteryCandidate(d.contributor_id, d.weight) for d in result.draws[0].details
    ]


def eligibility_to_dict(result: CommitteeEligibilityResult) -> dict:
    return dataclasses.asdict(result)


class CommitteeService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int | None = None,
    ):
        self.db = db
        self.clock = clock
        self.max_attempts = max_attempts or get_settings().lottery_max_attempts
        self.teams = SqlTeamConfigReader(db)
        self.ledger: LedgerReader = SqlLedgerReader(db)
        self.terms: ServiceTermReader = SqlServiceTermReader(db)
        self.proposals: ProposalReader = SqlProposalReader(db)
        self.service_terms = ServiceTermService(db, clock)
        self.audit = AuditRecorder.for_session(db)

    # ─── Eligibility ─────────────────────────────────────────────

    async def build_exclusions(
        self, team_id: str, config: TeamConfig,
    ) -> dict[str, list[str]]:
        return derive_exclusion_reasons(
            await self.terms.list_by_team(team_id),
            config.cooling_off_days,
            self.clock(),
            await self.proposals.list_under_review(team_id),
        )

    async def get_eligible_members(
        self,
        team_id: str,
        config: TeamConfig | None = None,
        exclusions: Mapping[str, Sequence[str]] | None = None,
    ) -> list[CommitteeEligibilityResult]:
        """Every contributor with ledger entries, eligible or not, with reasons."""
        config = config or await self.teams.get_config(team_id)
        if exclusions is None:
            exclusions = await self.build_exclusions(team_id, config)
        entries = await self.ledger.list_by_team(team_id)
        return evaluate_eligibility(
            group_entries_by_contributor(entries),
            config.eligibility_window_months,
            config.minimum_active_value,
            exclusions,
            self.clock(),
        )

    async def _candidates(
        self,
        team_id: str,
        config: TeamConfig,
        eligible: list[CommitteeEligibilityResult],
    ) -> list[LotteryCandidate]:
        if config.lottery_weight_source == LotteryWeightSource.GOVERNANCE_WEIGHT:
            entries = await self.ledger.list_by_team(team_id)
            weights = compute_team_weights(
                group_entries_by_contributor(entries), config, self.clock(),
            )
            return [
                LotteryCandidate(r.contributor_id, weights[r.contributor_id].weight)
                for r in eligible
            ]
        return [LotteryCandidate(r.contributor_id, r.active_value) for r in eligible]

    # ─── Selection ───────────────────────────────────────────────

    def draw_verified(
        self,
        pool: list[LotteryCandidate],
        seats: int,
        seed: str | None,
        team_id: str,
    ) -> WeightedLotteryResult:
        """Draw and verify; discard and redraw failed results up to max_attempts."""
        for attempt in range(1, self.max_attempts + 1):
            result = select_committee_members(pool, seats, seed, now=self.clock())
            failures = lottery_verification_failures(result, pool)
            if not failures:
                return result
            logger.error(
                f"Lottery result discarded: {'; '.join(failures)}",
                extra={
                    "team_id": team_id,
                    "attempt": attempt,
                    "error_code": "LOTTERY_VERIFICATION_FAILED",
                },
            )
        raise LotteryVerificationError(
            self.max_attempts, ErrorContext(team_id=team_id, entity_type="committee"),
        )

    async def select_committee(
        self,
        team_id: str,
        committee_name: str,
        seats: int,
        created_by: str,
        seed: str | None = None,
    ) -> CommitteeSelection:
        if not committee_name.strip():
            raise ValidationError("committee_name must not be empty", field="committee_name")
        config = await self.teams.get_config(team_id)
        results = await self.get_eligible_members(team_id, config)
        eligible = eligible_subset(results)
        pool = await self._candidates(team_id, config, eligible)

        result = self.draw_verified(pool, seats, seed, team_id)

        committee_id = new_id()
        selection = CommitteeSelection(
            team_id=team_id,
            committee_id=committee_id,
            committee_name=committee_name,
            seats=seats,
            seed=result.seed,
            reproducible=result.reproducible,
            total_weight=result.total_weight,
            selected_members=list(result.selected_ids),
            eligible_members=[eligibility_to_dict(r) for r in eligible],
            lottery_result=lottery_result_to_dict(result),
            created_by=created_by,
            created_at=result.selected_at,
        )
        self.db.add(selection)
        terms = [
            await self.service_terms.add_term(
                team_id, committee_id, committee_name, cid, result.selected_at,
            )
            for cid in result.selected_ids
        ]
        await self.db.commit()

        logger.info(
            f"Committee '{committee_name}' selected: {len(terms)} of {len(pool)} eligible",
            extra={"team_id": team_id, "committee_id": committee_id},
        )
        now = self.clock()
        await self.audit.record_many([
            build_audit_entry(
                team_id=team_id,
                action_type=GovernanceActionType.COMMITTEE_SELECTED,
                outcome=f"selected {len(result.selected_ids)} of {len(pool)}",
                now=now,
                actor_id=created_by,
                participants=[c.contributor_id for c in pool],
                weights={c.contributor_id: c.weight for c in pool},
                outcome_details={
                    "committee_name": committee_name,
                    "selected_members": list(result.selected_ids),
                    "seats": seats,
                    "seed": result.seed,
                    "reproducible": result.reproducible,
                    "weight_source": config.lottery_weight_source.value,
                },
                related_entity_id=committee_id,
                related_entity_type="committee",
            ),
            *(term_created_audit(t, now, created_by) for t in terms),
        ])
        return selection

    async def get_selection(self, committee_id: str) -> CommitteeSelection:
        result = await self.db.execute(
            select(CommitteeSelection).where(CommitteeSelection.committee_id == committee_id),
        )
        selection = result.scalar_one_or_none()
        if selection is None:
            raise NotFoundError("Committee", committee_id)
        return selection

    async def verify_selection(self, committee_id: str) -> dict:
        """Re-verify a stored selection against the pool recorded in its own draws."""
        selection = await self.get_selection(committee_id)
        result = lottery_result_from_dict(selection.lottery_result)
        pool = recorded_pool(result)
        failures = lottery_verification_failures(result, pool)
        if selection.selected_members != result.selected_ids:
            failures.append("Stored members differ from the recorded lottery result")
        return {
            "committee_id": committee_id,
            "verified": not failures,
            "failures": failures,
            "seed": result.seed,
            "reproducible": result.reproducible,
        }

    async def list_selections(self, team_id: str) -> list[CommitteeSelection]:
        await self.teams.get_team(team_id)
        result = await self.db.execute(
            select(CommitteeSelection)
            .where(CommitteeSelection.team_id == team_id)
            .order_by(CommitteeSelection.created_at.desc()),
        )
        return list(result.scalars().all())
