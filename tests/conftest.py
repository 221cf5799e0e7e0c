"""Shared test fixtures and configuration for all tests.

This conftest.py keeps tests independent of the host environment: retry
defaults and deadlines are read from environment variables, so every test
starts with them cleared.
"""

import pytest
import structlog

from fetch_retry.config import Settings

RETRY_ENV_VARS = (
    "FETCH_RETRY_MAX_RETRY",
    "FETCH_RETRY_INITIAL_WAIT",
    "FETCH_RETRY_BACKOFF",
    "FETCH_RETRY_SOCKET_TIMEOUT",
    "FETCH_RETRY_FORCE_TIMEOUT",
    "FETCH_RETRY_ACTION_DEADLINE",
    "__OW_ACTION_DEADLINE",
)


@pytest.fixture(autouse=True)
def clean_retry_env(monkeypatch):
    """Remove retry-related environment variables for the test."""
    for name in RETRY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with library defaults and metrics disabled.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.FETCH_RETRY_INITIAL_WAIT = 10
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        FETCH_RETRY_MAX_RETRY=60000,
        FETCH_RETRY_INITIAL_WAIT=100,
        FETCH_RETRY_BACKOFF=2,
        FETCH_RETRY_SOCKET_TIMEOUT=30000,
        FETCH_RETRY_FORCE_TIMEOUT=False,
        ACTION_DEADLINE=None,
        PROMETHEUS_ENABLED=False,  # Enable explicitly in metrics tests
    )
