"""Pytest configuration and shared fixtures."""

import logfire
import pytest

from src.core.config import Settings


@pytest.fixture(scope="session", autouse=True)
def _local_logfire():
    """Configure logfire once so service spans stay in-process during tests."""
    logfire.configure(send_to_logfire=False, console=False, service_name="flatmate-tests")


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        sqlite_db_path=":memory:",
        waha_base_url="http://waha.test",
        waha_api_key="test-api-key",
        webhook_secret="test-webhook-secret",
        logfire_token=None,
        household_size=3,
        include_non_payers=False,
        rent_day=27,
        default_emoji="🤔",
    )
