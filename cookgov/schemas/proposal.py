"""Proposal Schemas — proposals, objections, votings and adopted rule changes.

Invariants:
    - Rule-change proposals carry rule_name (checked again in ProposalService)
    - Vote options are validated against the voting in core/workflow, not here
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cookgov.core.domain_types import ChangeType, ProposalStatus, ProposalType, VotingStatus


class ProposalCreate(BaseModel):
    type: ProposalType
    title: str = Field(min_length=1, max_length=300)
    description: str = Field("", max_length=10_000)
    proposed_by: str = Field(min_length=1, max_length=64)
    rule_name: str | None = Field(None, max_length=200)
    rule_text: str | None = Field(None, max_length=20_000)
    change_type: ChangeType | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class ProposalSubmit(BaseModel):
    actor_id: str | None = Field(None, max_length=64)
    objection_window_days: int | None = Field(None, ge=1)
    objection_threshold: float | None = Field(None, ge=0)


class ObjectionCreate(BaseModel):
    objector_id: str = Field(min_length=1, max_length=64)
    reason: str | None = Field(None, max_length=5_000)


class ActorRequest(BaseModel):
    actor_id: str | None = Field(None, max_length=64)


class WithdrawRequest(BaseModel):
    actor_id: str = Field(min_length=1, max_length=64)


class ObjectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    objector_id: str
    reason: str | None
    governance_weight: float | None
    created_at: datetime


class ProposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    type: ProposalType
    title: str
    description: str
    proposed_by: str
    status: ProposalStatus
    rule_name: str | None
    change_type: ChangeType | None
    objection_window_opens_at: datetime | None
    objection_window_closes_at: datetime | None
    objection_threshold: float
    objection_count: int
    weighted_objection_count: float
    voting_triggered: bool
    voting_id: str | None
    created_at: datetime
    resolved_at: datetime | None
    objections: list[ObjectionResponse] = []


class ThresholdResponse(BaseModel):
    proposal_id: str
    threshold_exceeded: bool
    voting_triggered: bool
    triggered_now: bool
    objection_count: int
    weighted_objection_count: float
    objection_threshold: float


class VotingCreate(BaseModel):
    options: list[str] | None = Field(None, min_length=2)
    actor_id: str | None = Field(None, max_length=64)


class VoteCreate(BaseModel):
    voter_id: str = Field(min_length=1, max_length=64)
    option: str = Field(min_length=1, max_length=100)


class VoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    voter_id: str
    option: str
    weight: float
    cast_at: datetime


class OptionResultResponse(BaseModel):
    option: str
    vote_count: int
    weighted_vote_count: float
    percentage: float


class VotingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    proposal_id: str
    options: list[str]
    status: VotingStatus
    is_constitutional: bool
    approval_threshold: float
    opened_at: datetime
    closes_at: datetime
    closed_at: datetime | None
    results: list[OptionResultResponse] | None
    total_weight: float | None
    winning_option: str | None
    completed_at: datetime | None
    votes: list[VoteResponse] = []


class AdoptRequest(BaseModel):
    adopted_by: str = Field("voting", min_length=1, max_length=64)


class ConstitutionalChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    rule_name: str
    version: int
    previous_version: int | None
    change_type: ChangeType
    rule_text: str | None
    approval_percentage: float
    proposal_id: str
    voting_id: str
    adopted_by: str
    adopted_at: datetime


class PolicyChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    policy_name: str
    version: int
    previous_version: int | None
    change_type: ChangeType
    policy_text: str | None
    approval_percentage: float
    proposal_id: str
    voting_id: str
    adopted_by: str
    adopted_at: datetime
