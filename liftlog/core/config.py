"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from liftlog.core.constants import DEFAULT_REST_SECONDS
from liftlog.core.enums import PreviousLiftSource


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file).

    The training fields double as the read-only flags the analytics and the
    live session engine consult; they are read at query time, never stored
    alongside logged sets.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "LiftLog API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Local relational store
    database_url: str = "sqlite+aiosqlite:///./liftlog.db"

    # Live session defaults
    default_rest_seconds: int = Field(default=DEFAULT_REST_SECONDS, ge=0)
    default_sets_per_exercise: int = Field(default=1, ge=1)
    show_rpe_by_default: bool = False
    previous_lift_source: PreviousLiftSource = PreviousLiftSource.BY_TEMPLATE
    timer_adjust_seconds: int = Field(default=5, ge=1)
    undo_window_seconds: float = Field(default=5.0, gt=0)

    # Effective-set counting and duration estimate
    count_warmup_as_effective: bool = False
    count_drop_set_as_effective: bool = True
    seconds_per_set: int = Field(default=30, ge=0)

    @property
    def sync_database_url(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        return self.database_url.replace("+aiosqlite", "")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
