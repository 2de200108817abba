"""
Integration tests for outbound PMS pushes against PostgreSQL and the mock PMS.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

import pytest
from sqlalchemy.engine import Row

from hotel_inventory.db.engine import engine
from hotel_inventory.db.readers.bookings import get_booking
from hotel_inventory.db.readers.sync_logs import list_sync_logs
from hotel_inventory.errors import PMSPushFailed
from hotel_inventory.models.bookings import BookingStatus
from hotel_inventory.models.sync_logs import SyncAction, SyncOutcome
from hotel_inventory.pms.mock import MockPMSAdapter
from hotel_inventory.services.bookings import NewBooking, create_booking
from hotel_inventory.services.reconciliation import ReconciliationEngine


def confirmed_booking(room_id: UUID, guest_id: UUID) -> Row[Any]:
    return create_booking(
        engine,
        NewBooking(
            room_id=room_id,
            guest_id=guest_id,
            check_in=date(2030, 6, 1),
            check_out=date(2030, 6, 4),
            total_amount=Decimal("300.00"),
            paid_amount=Decimal("300.00"),
        ),
    )


def reconciliation_with(error_rate: float) -> tuple[ReconciliationEngine, MockPMSAdapter, list[float]]:
    adapter = MockPMSAdapter(error_rate=error_rate, drift_rate=0, latency_scale=0)
    sleeps: list[float] = []
    return ReconciliationEngine(engine, adapter, sleep=sleeps.append), adapter, sleeps


@pytest.mark.integration
def test_push_stores_pms_id_once(test_room: Row[Any], test_guest: UUID) -> None:
    booking = confirmed_booking(test_room.id, test_guest)
    reconciliation, adapter, _ = reconciliation_with(error_rate=0)

    first = reconciliation.push_booking_to_pms(booking.id)
    second = reconciliation.push_booking_to_pms(booking.id)

    assert first.pms_booking_id == second.pms_booking_id
    assert len(adapter.bookings) == 1

    with engine.connect() as conn:
        assert get_booking(conn, booking.id).pms_booking_id == first.pms_booking_id
        logs = list_sync_logs(conn, booking_id=booking.id, action=SyncAction.PUSH_BOOKING)
    assert [log.outcome for log in logs] == [SyncOutcome.SUCCESS]


@pytest.mark.integration
def test_terminal_push_failure_keeps_local_booking(test_room: Row[Any], test_guest: UUID) -> None:
    """Test that a PMS that always fails leaves the booking confirmed and unpushed."""
    booking = confirmed_booking(test_room.id, test_guest)
    reconciliation, adapter, sleeps = reconciliation_with(error_rate=100)

    with pytest.raises(PMSPushFailed):
        reconciliation.push_booking_to_pms(booking.id)

    assert sleeps == [1.0, 2.0, 4.0]
    assert adapter.bookings == {}

    with engine.connect() as conn:
        stored = get_booking(conn, booking.id)
        logs = list_sync_logs(conn, booking_id=booking.id)

    assert stored.status == BookingStatus.CONFIRMED
    assert stored.pms_booking_id is None
    assert len(logs) == 1
    assert logs[0].outcome == SyncOutcome.FAILED
    assert "Room no longer available in PMS" in logs[0].error_message


@pytest.mark.integration
def test_cancel_propagates_to_pms(test_room: Row[Any], test_guest: UUID) -> None:
    booking = confirmed_booking(test_room.id, test_guest)
    reconciliation, adapter, _ = reconciliation_with(error_rate=0)
    pms_booking_id = reconciliation.push_booking_to_pms(booking.id).pms_booking_id

    assert reconciliation.cancel_booking_in_pms(booking.id) is True
    assert pms_booking_id not in adapter.bookings
