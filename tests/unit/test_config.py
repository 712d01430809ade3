"""
tests/unit/test_config.py

RelayConfig loading and backend selection.
"""

import dataclasses

import pytest

from config import DEFAULT_CORS_ORIGINS, RelayConfig
from inference import OpenRouterBackend, StubCompletionBackend


class TestFromEnv:
    def test_defaults(self):
        config = RelayConfig.from_env({})

        assert config.upstream_api_key is None
        assert config.upstream_configured is False
        assert config.port == 3000
        assert config.environment == "development"
        assert config.is_development is True
        assert config.upstream_backend == "openrouter"
        assert config.upstream_timeout_s is None
        assert config.cors_origins == DEFAULT_CORS_ORIGINS

    def test_overrides(self, config_factory):
        config = config_factory(
            PORT="8080",
            ENVIRONMENT="production",
            UPSTREAM_TIMEOUT_S="12.5",
            CORS_ORIGINS="https://a.test, https://b.test,",
            LOG_LEVEL="debug",
        )

        assert config.port == 8080
        assert config.is_development is False
        assert config.upstream_timeout_s == 12.5
        assert config.cors_origins == ("https://a.test", "https://b.test")
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("key, configured", [
        ("sk-or-real", True),
        ("", False),
        ("your_openrouter_api_key_here", False),
    ])
    def test_credential_detection(self, key, configured):
        assert RelayConfig.from_env({"OPENROUTER_API_KEY": key}).upstream_configured is configured

    @pytest.mark.parametrize("value", ["STUB", " stub ", "OpenRouter"])
    def test_backend_name_is_normalized(self, value):
        config = RelayConfig.from_env({"UPSTREAM_BACKEND": value})
        assert config.upstream_backend == value.strip().lower()

    @pytest.mark.parametrize("value", ["stubb", "openai", ""])
    def test_unknown_backend_fails_at_startup(self, value):
        with pytest.raises(ValueError, match="UPSTREAM_BACKEND"):
            RelayConfig.from_env({"UPSTREAM_BACKEND": value})

    def test_is_immutable(self, relay_config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            relay_config.port = 1  # type: ignore[misc]

    def test_repr_hides_credential(self, config_factory):
        config = config_factory(OPENROUTER_API_KEY="sk-or-secret")
        assert "sk-or-secret" not in repr(config)
        assert "<set>" in repr(config)


class TestCreateBackend:
    def test_openrouter_by_default(self, config_factory):
        backend = config_factory(UPSTREAM_TIMEOUT_S="3").create_backend()
        assert isinstance(backend, OpenRouterBackend)
        assert backend.is_configured is True
        assert backend.timeout_override == 3.0

    def test_stub(self, config_factory):
        assert isinstance(config_factory(UPSTREAM_BACKEND="stub").create_backend(), StubCompletionBackend)
