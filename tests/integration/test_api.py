"""Integration tests for the FastAPI server."""

import pytest
from fastapi.testclient import TestClient

from routerpro.api.server import app


@pytest.fixture
def client():
    """Create test client; the lifespan builds a fresh engine each time."""
    with TestClient(app) as client:
        yield client


class TestInfoEndpoints:
    """Tests for info and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Router Pro API"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["backends"]["gpt4"] == "available"


class TestBackendsEndpoint:
    """Tests for backend listing and health overrides."""

    def test_list_backends(self, client):
        response = client.get("/backends")
        assert response.status_code == 200
        ids = [b["id"] for b in response.json()]
        assert ids == ["gpt35", "gpt4", "claude", "gemini"]

    def test_set_health(self, client):
        response = client.put("/backends/gpt4/health", json={"health": "unavailable"})
        assert response.status_code == 200
        assert response.json()["health"] == "unavailable"

        health = client.get("/health").json()
        assert health["status"] == "degraded"
        assert health["backends"]["gpt4"] == "unavailable"

    def test_set_health_unknown_backend(self, client):
        response = client.put("/backends/llama/health", json={"health": "unavailable"})
        assert response.status_code == 404

    @pytest.mark.parametrize("value,expected", [
        ("offline", "unavailable"),
        ("DOWN", "unavailable"),
        (False, "unavailable"),
        ("online", "available"),
        (True, "available"),
    ])
    def test_set_health_accepts_aliases(self, client, value, expected):
        client.put("/backends/claude/health", json={"health": "unavailable"})
        response = client.put("/backends/claude/health", json={"health": value})
        assert response.status_code == 200
        assert response.json()["health"] == expected

    def test_set_health_invalid_value(self, client):
        response = client.put("/backends/gpt4/health", json={"health": "sleepy"})
        assert response.status_code == 422


class TestRouteEndpoint:
    """Tests for the routing endpoint."""

    def test_route(self, client):
        response = client.post("/route", json={"text": "What is React?", "mode": "cost_first"})
        assert response.status_code == 200
        data = response.json()
        assert data["backend_id"] == "gemini"
        assert data["task_category"] == "simple"
        assert data["reason"] == "Simple query → cheapest model"
        assert data["failed_over"] is False
        assert data["estimated_cost"] == 0.001

    def test_route_failover(self, client):
        client.put("/backends/gpt4/health", json={"health": "unavailable"})
        response = client.post(
            "/route",
            json={"text": "Write a creative story", "mode": "performance_first"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["failed_over"] is True
        assert data["backend_id"] == "claude"
        assert "GPT-4" in data["reason"]

    def test_route_invalid_mode(self, client):
        response = client.post("/route", json={"text": "hello", "mode": "fastest"})
        assert response.status_code == 422
        assert "fastest" in response.json()["detail"]

    def test_route_no_backend_available(self, client):
        for backend_id in ("gpt35", "gpt4", "claude", "gemini"):
            client.put(f"/backends/{backend_id}/health", json={"health": "unavailable"})

        response = client.post(
            "/route",
            json={"text": "Write a creative story", "mode": "performance_first"},
        )
        assert response.status_code == 503
        data = response.json()
        assert data["category"] == "creative"
        assert data["mode"] == "performance_first"
        assert data["tried"] == ["gpt4", "claude", "gpt35", "gemini"]

    def test_classify(self, client):
        response = client.post("/classify", json={"text": "Debug my Python function"})
        assert response.status_code == 200
        assert response.json() == {"category": "code"}


class TestStatsEndpoint:
    """Tests for running totals."""

    def test_stats(self, client):
        client.post("/route", json={"text": "What is React?", "mode": "cost_first"})
        client.post("/route", json={"text": "Analyze churn", "mode": "smart_balance"})

        response = client.get("/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["total_requests"] == 2
        assert data["backends"]["gemini"]["requests"] == 1
        assert data["backends"]["claude"]["requests"] == 1
        assert data["total_cost"] == pytest.approx(0.016)
