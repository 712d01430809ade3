"""
Configuration management for the Prompt Enhancer relay.

Loads environment variables from .env file and builds an immutable
RelayConfig. Request-handling code never reads os.environ: the config is
constructed once at startup and handed to create_app().
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Optional, Tuple, cast, get_args

from dotenv import load_dotenv

from inference import CompletionBackend, OpenRouterBackend, StubCompletionBackend
from inference.openrouter import DEFAULT_BASE_URL, credential_present

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

VERSION = "1.0.0"

UpstreamBackendType = Literal["openrouter", "stub"]
UPSTREAM_BACKENDS: Tuple[str, ...] = get_args(UpstreamBackendType)

DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "https://grok.com",
    "http://localhost:3000",
    "http://localhost:3001",
)
# Any installed build of the browser extension
CHROME_EXTENSION_ORIGIN_REGEX = r"chrome-extension://.*"


@dataclass(frozen=True)
class RelayConfig:
    """Relay configuration from environment."""

    # Upstream
    upstream_api_key: Optional[str]
    upstream_base_url: str
    upstream_backend: UpstreamBackendType
    upstream_timeout_s: Optional[float]  # overrides per-mode timeouts when set

    # Attribution headers
    app_referer: str
    app_title: str

    # Server
    port: int
    environment: str
    cors_origins: Tuple[str, ...]
    log_level: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Load configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (tests)
        """
        env = os.environ if environ is None else environ

        timeout_raw = env.get("UPSTREAM_TIMEOUT_S", "").strip()
        origins_raw = env.get("CORS_ORIGINS", "").strip()
        backend = env.get("UPSTREAM_BACKEND", "openrouter").strip().lower()
        if backend not in UPSTREAM_BACKENDS:
            raise ValueError(
                f"UPSTREAM_BACKEND must be one of {', '.join(UPSTREAM_BACKENDS)}; got {backend!r}"
            )

        return cls(
            # Upstream
            upstream_api_key=env.get("OPENROUTER_API_KEY") or None,
            upstream_base_url=env.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
            upstream_backend=cast(UpstreamBackendType, backend),
            upstream_timeout_s=float(timeout_raw) if timeout_raw else None,

            # Attribution
            app_referer=env.get("APP_REFERER", "https://grok-prompt-enhancer.vercel.app"),
            app_title=env.get("APP_TITLE", "Grok Prompt Enhancer"),

            # Server
            port=int(env.get("PORT", "3000")),
            environment=env.get("ENVIRONMENT", "development"),
            cors_origins=(
                tuple(o.strip() for o in origins_raw.split(",") if o.strip())
                if origins_raw else DEFAULT_CORS_ORIGINS
            ),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def upstream_configured(self) -> bool:
        """Credential present; decided without any network I/O."""
        return credential_present(self.upstream_api_key)

    def create_backend(self) -> CompletionBackend:
        """Create upstream backend instance based on configuration."""
        if self.upstream_backend == "stub":
            return StubCompletionBackend()
        return OpenRouterBackend(
            api_key=self.upstream_api_key,
            base_url=self.upstream_base_url,
            referer=self.app_referer,
            title=self.app_title,
            timeout_s=self.upstream_timeout_s,
        )

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        key_state = "set" if self.upstream_configured else "missing"
        return (
            f"RelayConfig(environment={self.environment!r}, port={self.port}, "
            f"upstream_backend={self.upstream_backend!r}, upstream_api_key=<{key_state}>)"
        )


def get_config() -> RelayConfig:
    """Build configuration from the process environment."""
    return RelayConfig.from_env()


if __name__ == "__main__":
    # Test configuration loading
    config = get_config()
    print("Configuration loaded:")
    print(f"  Upstream API key: {'✓ Set' if config.upstream_configured else '✗ Missing'}")
    print(f"  Upstream backend: {config.upstream_backend}")
    print(f"  Port: {config.port}")
    print(f"  Environment: {config.environment}")
    print(f"  CORS origins: {', '.join(config.cors_origins)}")
