"""Tests for health endpoints and request tracing."""


def test_basic_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "splitlab-backend"}


def test_detailed_health_reports_store_and_experiments(client):
    response = client.get("/health/detailed")
    body = response.json()

    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["checks"]["database"] == "healthy"
    assert "redis" not in body["checks"]
    assert body["log_store"] == "memory"
    assert body["experiments_configured"] == 2


def test_every_response_carries_trace_id(client):
    first = client.get("/health")
    second = client.get("/health")

    assert first.headers["X-Trace-ID"]
    assert first.headers["X-Trace-ID"] != second.headers["X-Trace-ID"]
