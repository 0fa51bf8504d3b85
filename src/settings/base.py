"""Base configuration settings.

Contains foundational settings for paths and logging. Every settings
section reads the same .env file at the project root, whatever the
working directory.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# PROJECT ROOT DETECTION
# =============================================================================

_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


def get_project_root() -> Path:
    """Get project root directory."""
    return _PROJECT_ROOT


def get_env_file() -> Path:
    """Get .env file path."""
    return _ENV_FILE


# =============================================================================
# PATH SETTINGS
# =============================================================================


class PathsSettings(BaseSettings):
    """Snapshot and output locations.

    Attributes:
        data_root: Data directory override; relative paths are resolved
            against the project root.
        snapshot_file: File name of the default provider snapshot in raw_dir.
    """

    data_root: Path | None = Field(default=None, alias="DATA_DIR")
    snapshot_file: str = Field(default="provider_catalogs.json", alias="CATALOG_SNAPSHOT_FILE")

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def data_dir(self) -> Path:
        """Root data directory."""
        if self.data_root is None:
            return get_project_root() / "data"
        return get_project_root() / self.data_root

    @property
    def raw_dir(self) -> Path:
        """Provider catalog snapshots."""
        return self.data_dir / "raw"

    @property
    def processed_dir(self) -> Path:
        """Aggregated catalogs."""
        return self.data_dir / "processed"

    @property
    def default_snapshot_path(self) -> Path:
        """Snapshot read by the CLI when no input is given."""
        return self.raw_dir / self.snapshot_file

    def ensure_directories(self) -> None:
        """Create snapshot and output directories if they don't exist."""
        for directory in (self.raw_dir, self.processed_dir):
            directory.mkdir(parents=True, exist_ok=True)


# =============================================================================
# LOGGING SETTINGS
# =============================================================================


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Log files directory, relative to the working directory
            unless absolute.
    """

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Path = Field(default=Path("logs"), alias="LOG_DIR")

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL. Valid: {valid_levels}")
        return v_upper
