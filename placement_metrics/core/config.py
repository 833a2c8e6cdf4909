"""Configuration management for the placement metrics engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    PLACEMENT_ENGINE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    LOG_LEVEL: str | None = Field(
        default=None, description="Explicit log level; overrides the environment default"
    )

    # Readiness scoring windows
    CONSISTENCY_WINDOW_DAYS: int = Field(
        default=30, ge=1, description="Days of coding logs counted as recent activity"
    )
    RECENT_REPO_WINDOW_DAYS: int = Field(
        default=90, ge=1, description="Days since last update for a repository to count as active"
    )

    # Streaks
    STREAK_TIMEZONE: str = Field(
        default="UTC", description="IANA timezone used for calendar-day boundaries"
    )

    # Score history and recommendations
    SCORE_HISTORY_LIMIT: int = Field(
        default=30, ge=1, description="Max score history entries retained per student"
    )
    TOP_RECOMMENDATIONS_LIMIT: int = Field(
        default=5, ge=1, description="Max recommendations surfaced as top actions"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If an environment variable has an invalid value
    """
    return Settings()
