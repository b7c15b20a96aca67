"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Team governance defaults live here; a team row only overrides what it sets

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://cookgov:cookgov@db:5432/cookgov"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Pipelines
    recompute_max_retries: int = Field(default=3, ge=1)
    lottery_max_attempts: int = Field(default=3, ge=1)

    # Team governance defaults
    default_objection_window_days: int = 7
    default_objection_threshold: float = 0.0
    default_voting_period_days: int = 7
    default_approval_threshold: float = 50.0
    default_constitutional_voting_period_days: int = 14
    default_constitutional_approval_threshold: float = 66.0
    default_eligibility_window_months: int = 6
    default_minimum_active_value: float = 0.0
    default_cooling_off_days: int = 0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
