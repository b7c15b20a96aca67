"""Shared builders for pure-core tests."""

from datetime import datetime, timedelta, timezone

from cookgov.core.domain_types import AVERAGE_DAYS_PER_MONTH, Attribution
from cookgov.core.ledger_types import ContributionEntry

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


def months_ago(months: float, now: datetime = NOW) -> datetime:
    return now - timedelta(days=months * AVERAGE_DAYS_PER_MONTH)


def entry(
    contributor_id: str,
    value: float,
    issued_at: datetime = NOW,
    attribution: Attribution = Attribution.SELF,
    entry_id: str | None = None,
) -> ContributionEntry:
    return ContributionEntry(
        id=entry_id or f"{contributor_id}-{value}-{issued_at.isoformat()}",
        team_id="team-1",
        contributor_id=contributor_id,
        value=value,
        issued_at=issued_at,
        attribution=attribution,
    )
