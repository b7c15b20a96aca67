"""Team Schemas — team creation and governance configuration.

Invariants:
    - Every config field is optional; omitted fields keep their stored value
    - Percent thresholds are bounded to [0, 100], decay_rate to [0, 1]
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cookgov.core.domain_types import EquityModel, LotteryWeightSource


class TeamConfigUpdate(BaseModel):
    cap: float | None = Field(None, gt=0)
    decay_rate: float | None = Field(None, ge=0, le=1)
    equity_model: EquityModel | None = None
    eligibility_window_months: int | None = None
    minimum_active_value: float | None = Field(None, ge=0)
    cooling_off_days: int | None = Field(None, ge=0)
    lottery_weight_source: LotteryWeightSource | None = None
    objection_window_days: int | None = Field(None, ge=1)
    objection_threshold: float | None = Field(None, ge=0)
    voting_period_days: int | None = Field(None, ge=0)
    approval_threshold: float | None = Field(None, ge=0, le=100)
    constitutional_voting_period_days: int | None = Field(None, ge=0)
    constitutional_approval_threshold: float | None = Field(None, ge=0, le=100)


class TeamUpsert(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    actor_id: str | None = Field(None, max_length=64)
    config: TeamConfigUpdate = Field(default_factory=TeamConfigUpdate)


class TeamConfigResponse(BaseModel):
    """Resolved configuration: stored values with Settings defaults filled in."""
    cap: float | None
    decay_rate: float | None
    equity_model: EquityModel
    eligibility_window_months: int
    minimum_active_value: float
    cooling_off_days: int
    lottery_weight_source: LotteryWeightSource
    objection_window_days: int
    objection_threshold: float
    voting_period_days: int
    approval_threshold: float
    constitutional_voting_period_days: int
    constitutional_approval_threshold: float


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    config: TeamConfigResponse
