"""
Pytest fixtures for CCPI tests. Every provider is a fake; nothing touches
the network or a .env file.
"""

import pytest

from ccpi.core.config import Settings
from ccpi.services.providers.registry import ProviderRegistry


@pytest.fixture
def test_settings():
    """Defaults only, ignoring any .env file and provider credentials."""
    return Settings(
        _env_file=None,
        fred_api_key=None,
        fmp_api_key=None,
        twelve_data_api_key=None,
        openai_api_key=None,
        anthropic_api_key=None,
        gemini_api_key=None,
        groq_api_key=None,
        xai_api_key=None,
        openrouter_api_key=None,
        perplexity_api_key=None,
        rate_limit_cooldown_seconds=0,
    )


@pytest.fixture
def empty_registry():
    return ProviderRegistry()


class FakeClock:
    """Manually advanced clock for TTL and cooldown tests."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
