"""
Tests for health check and metrics endpoints.
"""
import pytest

from hookvault.adapters.memory import InMemoryStore
from hookvault.health import HealthChecker


class UnreachableStore(InMemoryStore):
    async def health_check(self):
        return False


@pytest.mark.asyncio
async def test_health_liveness(client):
    """Test liveness health check."""
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["service"] == "hookvault"
    assert data["version"] == "0.1.0"
    assert data["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_health_readiness(client):
    """Test readiness health check."""
    r = await client.get("/health/ready")
    # Should be 200 (ready) or 503 (not ready, e.g. low memory on the runner)
    assert r.status_code in [200, 503]
    data = r.json()
    assert data["checks"]["store"]["status"] == "ok"
    assert data["checks"]["store"]["backend"] == "InMemoryStore"
    assert "memory" in data["checks"]


@pytest.mark.asyncio
async def test_readiness_not_ready_when_store_unreachable():
    checker = HealthChecker(UnreachableStore())
    result = await checker.readiness()
    assert result["status"] == "not_ready"
    assert result["checks"]["store"]["status"] == "error"


@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    """Test Prometheus metrics endpoint."""
    await client.post("/webhook", json={"a": 1}, headers={"key": "demo"})
    await client.post("/webhook", json={"a": {"b": 1}}, headers={"key": "demo"})

    r = await client.get("/metrics")
    assert r.status_code == 200
    content = r.text
    assert "http_requests_total" in content
    assert "http_request_duration_seconds" in content
    assert "app_up" in content
    assert "hookvault_events_ingested_total 1.0" in content
    assert 'hookvault_events_rejected_total{reason="NestedValue"} 1.0' in content


@pytest.mark.asyncio
async def test_correlation_id_generated(client):
    """Test that correlation ID is added to response headers."""
    r = await client.get("/health")
    assert "x-correlation-id" in r.headers


@pytest.mark.asyncio
async def test_correlation_id_propagation(client):
    """Test that provided correlation ID is propagated."""
    correlation_id = "test-correlation-id-123"
    r = await client.get("/health", headers={"x-correlation-id": correlation_id})
    assert r.headers["x-correlation-id"] == correlation_id


@pytest.mark.asyncio
async def test_metrics_label_routes_by_template(client):
    await client.get("/api/events/first-id", params={"key": "demo"})
    await client.get("/api/events/second-id", params={"key": "demo"})

    content = (await client.get("/metrics")).text
    assert 'http_requests_total{service="hookvault",method="GET",path="/api/events/{event_id}",status="404"} 2.0' in content
    assert "first-id" not in content
