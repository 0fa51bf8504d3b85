"""Shared pytest fixtures for catalog aggregator tests."""

import pytest

_ENV_VARS = (
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_DIR",
    "DATA_DIR",
    "CATALOG_SNAPSHOT_FILE",
    "RATING_VIEW_THRESHOLD",
    "RATING_DEFAULT_RATING",
    "RATING_PROVIDER_WEIGHTS",
    "RATING_DEFAULT_WEIGHT",
    "RATING_VIEWS_MULTIPLIER",
    "RATING_VIEWS_MAX",
    "RATING_TRENDING_CAP",
    "RATING_PROVIDER_NAMES",
)


@pytest.fixture(autouse=True, scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from configuration set in the environment."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
