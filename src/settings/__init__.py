"""Centralized configuration for the catalog aggregator.

All configuration values have safe defaults and can be overridden from
environment variables or the .env file.

Usage:
    from src.settings import settings

    settings.rating.to_config()
    settings.paths.processed_dir
    settings.log_level
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.settings.base import LoggingSettings, PathsSettings, get_env_file, get_project_root
from src.settings.rating import RatingSettings

__all__ = [
    # Main
    "Settings",
    "settings",
    # Sections
    "PathsSettings",
    "LoggingSettings",
    "RatingSettings",
    # Utilities
    "get_env_file",
    "get_project_root",
]


# =============================================================================
# GLOBAL SETTINGS
# =============================================================================


class Settings(BaseSettings):
    """Global application settings.

    Aggregates all configuration sections into a single object.
    Access via the singleton: `from src.settings import settings`
    """

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    paths: PathsSettings = Field(default_factory=PathsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rating: RatingSettings = Field(default_factory=RatingSettings)

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "production", "test"}
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid ENVIRONMENT. Valid: {valid_envs}")
        return v_lower

    @property
    def log_level(self) -> str:
        """Effective log level, DEBUG whenever the debug flag is set."""
        return "DEBUG" if self.debug else self.logging.level

    def model_post_init(self, _: Any) -> None:
        """Initialize directories after settings are loaded."""
        self.paths.ensure_directories()


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

settings = Settings()
