"""
tests/unit/test_health.py

HealthChecker snapshot.
"""

from enhancer.health import HealthChecker


def test_snapshot_fields():
    checker = HealthChecker(
        environment="test",
        version="1.0.0",
        upstream_configured=False,
        backend="openrouter",
        start_time=0.0,
    )
    body = checker.to_dict(checker.check())

    assert body["status"] == "OK"
    assert body["environment"] == "test"
    assert body["version"] == "1.0.0"
    assert body["upstreamConfigured"] is False
    assert body["backend"] == "openrouter"
    assert body["uptimeSeconds"] > 0
    assert body["timestamp"].endswith("Z")


def test_uptime_starts_near_zero():
    checker = HealthChecker("test", "1.0.0", True, "stub")
    assert 0 <= checker.check().uptime_seconds < 5
