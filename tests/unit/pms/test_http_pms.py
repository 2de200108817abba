"""
Unit tests for the JSON/HTTP PMS adapter with a mocked requests session.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional
from unittest.mock import MagicMock, patch

import pytest
import requests

from hotel_inventory.errors import PMSBookingNotFound, PMSError, PMSTransportError
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.pms.http import HttpPMSAdapter, should_retry
from hotel_inventory.pms.types import PMSBookingData


def response(status_code: int, body: Optional[Any] = None) -> MagicMock:
    res = MagicMock(spec=requests.Response)
    res.status_code = status_code
    res.ok = status_code < 400
    if body is None:
        res.json.side_effect = ValueError("no json")
    else:
        res.json.return_value = body
    return res


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def adapter(session: MagicMock) -> HttpPMSAdapter:
    return HttpPMSAdapter("https://pms.example.com/api", api_key="k-123", session=session)


def booking_data() -> PMSBookingData:
    return PMSBookingData(
        booking_reference="HTL-20250110-ABC123",
        guest_name="Ada Lovelace",
        email="ada@example.com",
        phone="+1-555-0100",
        check_in=date(2025, 1, 10),
        check_out=date(2025, 1, 12),
        room_type="deluxe",
        room_number="101",
        number_of_guests=2,
        total_amount=Decimal("200.00"),
    )


@pytest.mark.unit
def test_requires_base_url() -> None:
    with pytest.raises(ValueError):
        HttpPMSAdapter("")


@pytest.mark.unit
def test_sets_bearer_header(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    assert session.headers["Authorization"] == "Bearer k-123"
    assert adapter.base_url == "https://pms.example.com/api/"


@pytest.mark.unit
@pytest.mark.parametrize(
    "status_code, err, expected",
    [
        (429, None, True),
        (503, None, True),
        (404, None, False),
        (None, requests.Timeout(), True),
        (None, requests.ConnectionError(), False),
    ],
)
def test_should_retry(status_code, err, expected) -> None:
    res = response(status_code) if status_code is not None else None
    assert should_retry(res, err) is expected


@pytest.mark.unit
def test_sync_inventory_parses_items(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(
        200,
        {
            "result": [
                {
                    "roomNumber": "101",
                    "roomType": "deluxe",
                    "status": "occupied",
                    "isAvailable": False,
                    "blockedDates": [{"start": "2025-01-10", "end": "2025-01-12"}],
                }
            ]
        },
    )

    items = adapter.sync_inventory()

    assert items[0].room_number == "101"
    assert items[0].status is RoomStatus.OCCUPIED
    assert items[0].blocked_dates[0].end == date(2025, 1, 12)
    session.request.assert_called_once_with(
        "GET", "https://pms.example.com/api/inventory", json=None, timeout=10.0
    )


@pytest.mark.unit
@patch("hotel_inventory.pms.http.time.sleep")
def test_sync_inventory_retries_server_errors(
    mock_sleep: MagicMock, adapter: HttpPMSAdapter, session: MagicMock
) -> None:
    session.request.side_effect = [response(502), response(200, {"result": []})]

    assert adapter.sync_inventory() == []
    assert session.request.call_count == 2
    mock_sleep.assert_called_once()


@pytest.mark.unit
@patch("hotel_inventory.pms.http.time.sleep")
def test_sync_inventory_gives_up_after_max_retries(
    _mock_sleep: MagicMock, adapter: HttpPMSAdapter, session: MagicMock
) -> None:
    session.request.return_value = response(503)

    with pytest.raises(PMSTransportError):
        adapter.sync_inventory()

    assert session.request.call_count == 3


@pytest.mark.unit
@pytest.mark.parametrize(
    "res",
    [
        response(200),
        response(200, ["not", "an", "object"]),
        response(200, {"result": {"roomNumber": "101"}}),
        response(
            200,
            {
                "result": [
                    {"roomNumber": "101", "roomType": "deluxe", "status": "dirty", "isAvailable": True}
                ]
            },
        ),
    ],
    ids=["not-json", "not-an-object", "result-not-a-list", "unknown-status"],
)
def test_sync_inventory_malformed_body_raises_pms_error(
    res: MagicMock, adapter: HttpPMSAdapter, session: MagicMock
) -> None:
    session.request.return_value = res

    with pytest.raises(PMSError):
        adapter.sync_inventory()


@pytest.mark.unit
def test_push_booking_success(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(201, {"id": "PMS-77", "confirmationNumber": "CONF-77"})

    result = adapter.push_booking(booking_data())

    assert result.success is True
    assert result.pms_booking_id == "PMS-77"
    assert result.confirmation_number == "CONF-77"
    sent = session.request.call_args.kwargs["json"]
    assert sent["bookingReference"] == "HTL-20250110-ABC123"
    assert sent["checkIn"] == "2025-01-10"


@pytest.mark.unit
def test_push_booking_business_rejection(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(409, {"errors": ["Room no longer available in PMS"]})

    result = adapter.push_booking(booking_data())

    assert result.success is False
    assert result.errors == ["Room no longer available in PMS"]


@pytest.mark.unit
def test_push_booking_is_not_retried_by_adapter(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(500)

    with pytest.raises(PMSTransportError):
        adapter.push_booking(booking_data())

    assert session.request.call_count == 1


@pytest.mark.unit
def test_push_booking_connection_error(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(PMSTransportError):
        adapter.push_booking(booking_data())


@pytest.mark.unit
def test_push_booking_missing_id(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(200, {"confirmationNumber": "CONF-77"})

    with pytest.raises(PMSError):
        adapter.push_booking(booking_data())


@pytest.mark.unit
def test_cancel_booking_not_found(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(404)

    with pytest.raises(PMSBookingNotFound):
        adapter.cancel_booking("PMS-77")

    assert session.request.call_args.args == ("DELETE", "https://pms.example.com/api/bookings/PMS-77")


@pytest.mark.unit
def test_get_room_status(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.request.return_value = response(200, {"status": "cleaning"})

    assert adapter.get_room_status("101") is RoomStatus.CLEANING


@pytest.mark.unit
@pytest.mark.parametrize(
    "body", [None, {}, {"status": "dirty"}], ids=["not-json", "missing-status", "unknown-status"]
)
def test_get_room_status_malformed_body_raises_pms_error(
    body: Optional[Any], adapter: HttpPMSAdapter, session: MagicMock
) -> None:
    session.request.return_value = response(200, body)

    with pytest.raises(PMSError):
        adapter.get_room_status("101")


@pytest.mark.unit
def test_is_connected(adapter: HttpPMSAdapter, session: MagicMock) -> None:
    session.get.return_value = response(200)
    assert adapter.is_connected() is True

    session.get.side_effect = requests.ConnectionError("refused")
    assert adapter.is_connected() is False
