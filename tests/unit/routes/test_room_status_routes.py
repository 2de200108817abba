"""
Unit tests for the room status endpoint.
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from hotel_inventory.errors import BookingLockTimeout, RoomNotFound
from hotel_inventory.models.rooms import RoomStatus

ROOM_ID = uuid.uuid4()


def room_row(status: str) -> SimpleNamespace:
    fields = {"id": ROOM_ID, "room_number": "101", "type": "deluxe", "capacity": 2, "status": status}
    return SimpleNamespace(_mapping=fields, **fields)


@pytest.mark.unit
@patch("hotel_inventory.routes.rooms.set_room_status")
def test_update_room_status(
    mock_set: MagicMock, client: TestClient, db_engine: MagicMock, notifier: MagicMock
) -> None:
    mock_set.return_value = room_row("maintenance")

    response = client.patch(
        f"/rooms/{ROOM_ID}/status", json={"status": "maintenance", "reason": "Broken heater"}
    )

    assert response.status_code == 200
    assert response.json()["room"]["status"] == "maintenance"
    mock_set.assert_called_once_with(
        db_engine, ROOM_ID, RoomStatus.MAINTENANCE, reason="Broken heater", notifier=notifier
    )


@pytest.mark.unit
@patch("hotel_inventory.routes.rooms.set_room_status")
def test_update_room_status_rejects_unknown_status(mock_set: MagicMock, client: TestClient) -> None:
    response = client.patch(f"/rooms/{ROOM_ID}/status", json={"status": "dirty"})

    assert response.status_code == 422
    mock_set.assert_not_called()


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, status_code",
    [(RoomNotFound(ROOM_ID), 404), (BookingLockTimeout(ROOM_ID), 503), (RuntimeError("boom"), 500)],
)
@patch("hotel_inventory.routes.rooms.set_room_status")
def test_update_room_status_error_mapping(
    mock_set: MagicMock, client: TestClient, error: Exception, status_code: int
) -> None:
    mock_set.side_effect = error

    response = client.patch(f"/rooms/{ROOM_ID}/status", json={"status": "cleaning"})

    assert response.status_code == status_code
