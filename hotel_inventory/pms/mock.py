"""
In-memory PMS used for development and tests.

Simulates realistic API latency, a configurable random failure rate and
occasional out-of-band room status changes (walk-ins, housekeeping), so the
retry and reconciliation paths are exercised without a live vendor.
"""

from __future__ import annotations

import random
import string
import threading
import time
from typing import Callable, Optional

import structlog

from hotel_inventory.errors import PMSBookingNotFound, PMSError, PMSTransportError
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.pms.types import (
    BlockedRange,
    InventoryItem,
    PMSBookingData,
    PMSBookingResponse,
)

logger = structlog.get_logger(__name__)

SEED_ROOMS = [
    ("101", "deluxe"),
    ("102", "deluxe"),
    ("201", "suite"),
    ("202", "suite"),
    ("301", "family"),
    ("302", "standard"),
]

DRIFT_STATUSES = [
    RoomStatus.AVAILABLE,
    RoomStatus.OCCUPIED,
    RoomStatus.CLEANING,
    RoomStatus.MAINTENANCE,
]


class MockPMSAdapter(PMSAdapter):
    """
    Mock PMS adapter.

    Attributes:
        error_rate: Percentage (0-100) of operations that fail
        drift_rate: Probability (0-1) that a sync changes one random room's status
        latency_scale: Multiplier for simulated latencies (0 disables sleeping)

    Example:
        >>> adapter = MockPMSAdapter(error_rate=0, latency_scale=0)
        >>> [item.room_number for item in adapter.sync_inventory()][:2]
        ['101', '102']
    """

    name = "mock"

    def __init__(
        self,
        error_rate: float = 10.0,
        drift_rate: float = 0.2,
        latency_scale: float = 1.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.error_rate = max(0.0, min(100.0, error_rate))
        self.drift_rate = drift_rate
        self.latency_scale = latency_scale
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._lock = threading.Lock()
        self._inventory: dict[str, InventoryItem] = {}
        self._bookings: dict[str, PMSBookingData] = {}
        self._seed_inventory()

    def _seed_inventory(self) -> None:
        self._inventory = {
            number: InventoryItem(
                room_number=number,
                room_type=room_type,
                status=RoomStatus.AVAILABLE,
                is_available=True,
            )
            for number, room_type in SEED_ROOMS
        }

    def _delay(self, low: float, high: float) -> None:
        if self.latency_scale > 0:
            self._sleep(self._rng.uniform(low, high) * self.latency_scale)

    def _should_fail(self) -> bool:
        return self._rng.random() * 100 < self.error_rate

    def _drift(self) -> None:
        if not self._inventory or self._rng.random() >= self.drift_rate:
            return
        room = self._rng.choice(list(self._inventory.values()))
        room.status = self._rng.choice(DRIFT_STATUSES)
        room.is_available = room.status == RoomStatus.AVAILABLE
        logger.info("mock_pms_room_drift", room_number=room.room_number, status=room.status.value)

    def sync_inventory(self) -> list[InventoryItem]:
        self._delay(0.5, 1.0)
        if self._should_fail():
            raise PMSTransportError("Mock PMS: failed to connect to inventory service")

        with self._lock:
            self._drift()
            return [item.model_copy(deep=True) for item in self._inventory.values()]

    def push_booking(self, booking: PMSBookingData) -> PMSBookingResponse:
        self._delay(0.8, 1.2)
        if self._should_fail():
            logger.warning("mock_pms_push_rejected", booking_reference=booking.booking_reference)
            return PMSBookingResponse(
                success=False,
                errors=["Room no longer available in PMS", "Inventory mismatch detected"],
            )

        suffix = "".join(self._rng.choices(string.ascii_uppercase + string.digits, k=6))
        pms_booking_id = f"PMS-{int(time.time() * 1000)}-{suffix}"

        with self._lock:
            self._bookings[pms_booking_id] = booking
            room = self._inventory.get(booking.room_number or "")
            if room is not None:
                room.blocked_dates.append(
                    BlockedRange(start=booking.check_in, end=booking.check_out)
                )

        logger.info("mock_pms_booking_created", pms_booking_id=pms_booking_id)
        return PMSBookingResponse(
            success=True,
            pms_booking_id=pms_booking_id,
            confirmation_number=f"CONF-{suffix}",
        )

    def cancel_booking(self, pms_booking_id: str) -> None:
        self._delay(0.4, 0.6)
        if self._should_fail():
            raise PMSTransportError("Mock PMS: failed to cancel booking")

        with self._lock:
            booking = self._bookings.pop(pms_booking_id, None)
            if booking is None:
                raise PMSBookingNotFound(pms_booking_id)

            room = self._inventory.get(booking.room_number or "")
            if room is not None:
                room.blocked_dates = [
                    blocked
                    for blocked in room.blocked_dates
                    if (blocked.start, blocked.end) != (booking.check_in, booking.check_out)
                ]

        logger.info("mock_pms_booking_cancelled", pms_booking_id=pms_booking_id)

    def get_room_status(self, room_number: str) -> RoomStatus:
        self._delay(0.2, 0.3)
        with self._lock:
            room = self._inventory.get(room_number)
            if room is None:
                raise PMSError(f"Mock PMS: room {room_number} not found")
            return room.status

    def is_connected(self) -> bool:
        self._delay(0.1, 0.1)
        # 1% chance of reporting disconnected
        return self._rng.random() > 0.01

    # Test helpers

    @property
    def bookings(self) -> dict[str, PMSBookingData]:
        with self._lock:
            return dict(self._bookings)

    def set_room_status(self, room_number: str, status: RoomStatus) -> None:
        with self._lock:
            room = self._inventory[room_number]
            room.status = status
            room.is_available = status == RoomStatus.AVAILABLE

    def add_room(self, room_number: str, room_type: str) -> None:
        with self._lock:
            self._inventory[room_number] = InventoryItem(
                room_number=room_number,
                room_type=room_type,
                status=RoomStatus.AVAILABLE,
                is_available=True,
            )

    def set_error_rate(self, rate: float) -> None:
        self.error_rate = max(0.0, min(100.0, rate))

    def reset(self) -> None:
        with self._lock:
            self._bookings.clear()
            self._seed_inventory()
