"""Ledger Types — immutable input snapshots consumed by every pure pipeline.

Invariants:
    - ContributionEntry is frozen: the ledger is append-only, entries are never mutated
    - TeamConfig is frozen: pipelines receive a snapshot, never a live record
    - validate_team_config() is the single gate for malformed configuration

Design Decisions:
    - Plain dataclasses, not ORM models: core never imports SQLAlchemy
    - Defaults mirror Settings defaults so pure callers can omit config entirely
"""

from dataclasses import dataclass
from datetime import datetime

from cookgov.core.domain_types import (
    Attribution, EquityModel, LotteryWeightSource,
)
from cookgov.core.errors import ValidationError


@dataclass(frozen=True)
class ContributionEntry:
    """One recognized unit of work, valued in COOK."""
    id: str
    team_id: str
    contributor_id: str
    value: float
    issued_at: datetime
    attribution: Attribution = Attribution.SELF
    task_id: str | None = None


@dataclass(frozen=True)
class TeamConfig:
    """Per-team governance parameters. None cap / decay_rate disables that stage."""
    cap: float | None = None
    decay_rate: float | None = None
    eligibility_window_months: int = 6
    minimum_active_value: float = 0.0
    cooling_off_days: int = 0
    objection_window_days: int = 7
    objection_threshold: float = 0.0
    voting_period_days: int = 7
    approval_threshold: float = 50.0
    constitutional_voting_period_days: int = 14
    constitutional_approval_threshold: float = 66.0
    equity_model: EquityModel = EquityModel.SLICING
    lottery_weight_source: LotteryWeightSource = LotteryWeightSource.ACTIVE_VALUE


def validate_team_config(config: TeamConfig) -> None:
    """Raise ValidationError on the first malformed field."""
    if config.cap is not None and config.cap <= 0:
        raise ValidationError(f"cap must be positive, got {config.cap}", field="cap")
    if config.decay_rate is not None and not 0 <= config.decay_rate <= 1:
        raise ValidationError(
            f"decay_rate must be within [0, 1] per month, got {config.decay_rate}",
            field="decay_rate",
        )
    if config.minimum_active_value < 0:
        raise ValidationError(
            "minimum_active_value must be non-negative", field="minimum_active_value",
        )
    if config.objection_threshold < 0:
        raise ValidationError(
            "objection_threshold must be non-negative", field="objection_threshold",
        )

    for name in (
        "cooling_off_days",
        "objection_window_days",
        "voting_period_days",
        "constitutional_voting_period_days",
    ):
        if getattr(config, name) < 0:
            raise ValidationError(f"{name} must be non-negative", field=name)

    for name in ("approval_threshold", "constitutional_approval_threshold"):
        value = getattr(config, name)
        if not 0 <= value <= 100:
            raise ValidationError(
                f"{name} must be a percentage within [0, 100], got {value}", field=name,
            )
