"""Ledger Schemas — contribution entries and period aggregations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cookgov.core.domain_types import Attribution


class ContributionCreate(BaseModel):
    contributor_id: str = Field(min_length=1, max_length=64)
    value: float = Field(gt=0)
    attribution: Attribution = Attribution.SELF
    task_id: str | None = Field(None, max_length=64)
    issued_at: datetime | None = None
    actor_id: str | None = Field(None, max_length=64)


class ContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    contributor_id: str
    task_id: str | None
    value: float
    attribution: Attribution
    issued_at: datetime
    created_at: datetime


class PeriodTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: str
    total: float
    self_total: float
    spend_total: float
    entry_count: int
