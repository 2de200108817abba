"""
Integration tests for health and readiness endpoints.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from hotel_inventory.main import app


@pytest.fixture
def client():
    # Entering the client runs the lifespan (PMS adapter, notifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.integration
def test_health_endpoint_returns_ok(client: TestClient) -> None:
    """Test that /health endpoint returns 200 with status ok."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_readiness_endpoint_returns_ready_when_db_accessible(client: TestClient) -> None:
    """Test that /ready endpoint returns 200 when database is accessible."""
    response = client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["pms"] in ("ok", "unreachable")


@pytest.mark.integration
def test_readiness_endpoint_returns_503_when_db_not_accessible(client: TestClient) -> None:
    """Test that /ready endpoint returns 503 when database is not accessible."""
    with patch("hotel_inventory.routes.health.check_engine_health", return_value=False):
        response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "failed"
