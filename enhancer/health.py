"""
Health snapshot for GET /health.

Reflects relay state WITHOUT calling the upstream API: whether a
credential is configured is decided from configuration alone.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .relay import utc_timestamp


@dataclass(frozen=True)
class HealthStatus:
    """Health status response."""

    status: str  # "OK"
    timestamp: str
    environment: str
    version: str
    uptime_seconds: float
    upstream_configured: bool
    backend: str


class HealthChecker:
    """
    Health checker for relay readiness.

    Invariant: never performs network I/O.
    """

    def __init__(
        self,
        environment: str,
        version: str,
        upstream_configured: bool,
        backend: str,
        start_time: Optional[float] = None,
    ):
        self.environment = environment
        self.version = version
        self.upstream_configured = upstream_configured
        self.backend = backend
        self.start_time = time.time() if start_time is None else start_time

    def check(self) -> HealthStatus:
        """Liveness snapshot. Always OK if this code runs."""
        return HealthStatus(
            status="OK",
            timestamp=utc_timestamp(),
            environment=self.environment,
            version=self.version,
            uptime_seconds=round(time.time() - self.start_time, 3),
            upstream_configured=self.upstream_configured,
            backend=self.backend,
        )

    @staticmethod
    def to_dict(status: HealthStatus) -> Dict[str, Any]:
        """Convert HealthStatus to dict for JSON serialization."""
        return {
            "status": status.status,
            "timestamp": status.timestamp,
            "environment": status.environment,
            "version": status.version,
            "uptimeSeconds": status.uptime_seconds,
            "upstreamConfigured": status.upstream_configured,
            "backend": status.backend,
        }
