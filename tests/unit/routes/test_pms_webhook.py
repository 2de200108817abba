"""Unit tests for the PMS webhook endpoint."""

import json
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from hotel_inventory.errors import RoomNotFound, UnknownEventType, ValidationError
from hotel_inventory.main import app
from hotel_inventory.services.inbound_events import compute_signature

SECRET = "test-webhook-secret"


def signed(payload: Any, secret: str = SECRET) -> tuple[bytes, dict[str, str]]:
    body = json.dumps(payload).encode("utf-8")
    return body, {
        "Content-Type": "application/json",
        "X-PMS-Signature": compute_signature(body, secret),
    }


@pytest.mark.asyncio
async def test_webhook_missing_signature(client: TestClient, event_handler: MagicMock) -> None:
    """Test that webhook returns 401 when the signature header is missing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", json={"event": "inventory.updated", "data": {}})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Invalid signature"}
    event_handler.handle.assert_not_called()


@pytest.mark.asyncio
async def test_webhook_wrong_signature(client: TestClient, event_handler: MagicMock) -> None:
    """Test that a body signed with another secret is rejected before dispatch."""
    body, headers = signed({"event": "booking.cancelled", "data": {"pmsBookingId": "PMS-1"}}, "other")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 401
    event_handler.handle.assert_not_called()


@pytest.mark.asyncio
async def test_webhook_signature_covers_raw_body(client: TestClient, event_handler: MagicMock) -> None:
    """Test that re-serialized JSON with the original signature is rejected."""
    payload = {"event": "inventory.updated", "data": {}}
    _, headers = signed(payload)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post(
            "/pms/webhooks", content=json.dumps(payload, indent=2).encode(), headers=headers
        )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_webhook_accepted(client: TestClient, event_handler: MagicMock) -> None:
    """Test that a correctly signed event is dispatched and acknowledged."""
    data = {"pmsBookingId": "PMS-1", "reason": "No show"}
    body, headers = signed({"event": "booking.cancelled", "data": data})
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"status": "accepted", "event": "booking.cancelled"}
    event_handler.handle.assert_called_once_with("booking.cancelled", data)


@pytest.mark.asyncio
async def test_webhook_unknown_event(client: TestClient, event_handler: MagicMock) -> None:
    event_handler.handle.side_effect = UnknownEventType("booking.exploded")
    body, headers = signed({"event": "booking.exploded", "data": {}})
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Unknown event type"}


@pytest.mark.asyncio
async def test_webhook_invalid_json(client: TestClient, event_handler: MagicMock) -> None:
    body = b"{not json"
    headers = {"X-PMS-Signature": compute_signature(body, SECRET)}
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON"}
    event_handler.handle.assert_not_called()


@pytest.mark.asyncio
async def test_webhook_invalid_data(client: TestClient, event_handler: MagicMock) -> None:
    event_handler.handle.side_effect = ValidationError("booking.cancelled requires pmsBookingId")
    body, headers = signed({"event": "booking.cancelled", "data": {}})
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "booking.cancelled requires pmsBookingId"}


@pytest.mark.asyncio
async def test_webhook_processing_failure(client: TestClient, event_handler: MagicMock) -> None:
    event_handler.handle.side_effect = RoomNotFound("101")
    body, headers = signed({"event": "room.status_changed", "data": {"roomNumber": "101"}})
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", content=body, headers=headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Webhook processing failed"}


@pytest.mark.asyncio
@patch("hotel_inventory.config.PMS_WEBHOOK_ALLOW_UNSIGNED", True)
@patch("hotel_inventory.config.ENVIRONMENT", "development")
async def test_webhook_unsigned_allowed_in_development(
    client: TestClient, event_handler: MagicMock
) -> None:
    """Test the local development escape hatch for unsigned webhooks."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", json={"event": "inventory.updated", "data": {}})

    assert response.status_code == 200
    event_handler.handle.assert_called_once_with("inventory.updated", {})


@pytest.mark.asyncio
@patch("hotel_inventory.config.PMS_WEBHOOK_ALLOW_UNSIGNED", True)
@patch("hotel_inventory.config.ENVIRONMENT", "production")
async def test_webhook_unsigned_never_allowed_in_production(
    client: TestClient, event_handler: MagicMock
) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/pms/webhooks", json={"event": "inventory.updated", "data": {}})

    assert response.status_code == 401
