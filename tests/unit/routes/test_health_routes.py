"""
Unit tests for liveness and readiness probes.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.unit
@patch("hotel_inventory.routes.health.check_engine_health", return_value=True)
def test_ready(_mock_health: MagicMock, client: TestClient) -> None:
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"database": "ok", "pms": "ok"}}


@pytest.mark.unit
@patch("hotel_inventory.routes.health.check_engine_health", return_value=True)
def test_ready_with_unreachable_pms(
    _mock_health: MagicMock, client: TestClient, pms_adapter: MagicMock
) -> None:
    """Test that an unreachable PMS is reported without failing readiness."""
    pms_adapter.is_connected.return_value = False

    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["checks"]["pms"] == "unreachable"


@pytest.mark.unit
@patch("hotel_inventory.routes.health.check_engine_health", return_value=False)
def test_not_ready_without_database(_mock_health: MagicMock, client: TestClient) -> None:
    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "failed"
