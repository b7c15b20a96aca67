"""Governance Schemas — equity, governance weight, eligibility, committees, service terms."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cookgov.core.domain_types import ServiceTermStatus


class EquityRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contributor_id: str
    equity: float
    effective_value: float
    raw_value: float
    model: str
    total_team_effective_value: float
    cap_applied: bool
    decay_applied: bool
    last_updated: datetime


class GovernanceWeightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contributor_id: str
    weight: float
    raw_value: float
    effective_value: float
    cap_applied: bool
    decay_applied: bool
    last_updated: datetime | None = None


class EligibilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contributor_id: str
    is_eligible: bool
    active_value: float
    total_value: float
    window_months: int
    exclusion_reasons: list[str]


class CommitteeSelectRequest(BaseModel):
    committee_name: str = Field(min_length=1, max_length=200)
    seats: int = Field(ge=1)
    created_by: str = Field(min_length=1, max_length=64)
    seed: str | None = Field(None, min_length=1, max_length=200)

    @field_validator("committee_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("committee_name cannot be empty or whitespace")
        return v


class CommitteeSelectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    committee_id: str
    committee_name: str
    seats: int
    seed: str
    reproducible: bool
    total_weight: float
    selected_members: list[str]
    eligible_members: list[dict]
    lottery_result: dict
    created_by: str
    created_at: datetime


class ServiceTermCreate(BaseModel):
    committee_id: str = Field(min_length=1, max_length=36)
    committee_name: str = Field(min_length=1, max_length=200)
    contributor_id: str = Field(min_length=1, max_length=64)
    start_date: datetime | None = None
    actor_id: str | None = Field(None, max_length=64)


class ServiceTermEnd(BaseModel):
    status: ServiceTermStatus = ServiceTermStatus.COMPLETED
    end_date: datetime | None = None
    actor_id: str | None = Field(None, max_length=64)


class ServiceTermResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    committee_id: str
    committee_name: str
    contributor_id: str
    status: ServiceTermStatus
    start_date: datetime
    end_date: datetime | None
    duration_days: int | None
