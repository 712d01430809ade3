"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import RelayConfig  # noqa: E402
from inference import StubCompletionBackend, TokenUsage  # noqa: E402


def make_config(**overrides) -> RelayConfig:
    """RelayConfig built from a fake environment (never the real one)."""
    env = {
        "OPENROUTER_API_KEY": "sk-or-test-key",
        "ENVIRONMENT": "test",
        "PORT": "3000",
    }
    env.update(overrides)
    return RelayConfig.from_env({k: v for k, v in env.items() if v is not None})


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def relay_config() -> RelayConfig:
    return make_config()


@pytest.fixture
def stub_backend() -> StubCompletionBackend:
    return StubCompletionBackend(
        text="Please review and fix the following code, explaining each change: ...",
        usage=TokenUsage(total_tokens=42),
    )
