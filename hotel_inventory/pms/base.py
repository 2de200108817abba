"""
PMS adapter capability interface.

Each hotel chain's PMS vendor gets one concrete subclass; the reconciliation
engine and webhook handler only ever see this interface. All calls block the
calling unit of work and are bounded by the implementation's timeout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.pms.types import InventoryItem, PMSBookingData, PMSBookingResponse


class PMSAdapter(ABC):
    """
    Base adapter interface that all PMS implementations must follow.

    Error contract:
        - Transport failures (unreachable, timeout, 5xx) raise PMSTransportError.
        - Business rejection of a pushed booking is a normal return value
          (PMSBookingResponse.success is False).
        - Cancelling an unknown or already-cancelled booking raises
          PMSBookingNotFound, which callers treat as already done.
        - is_connected never raises.
    """

    name: str = "base"

    @abstractmethod
    def sync_inventory(self) -> list[InventoryItem]:
        """Return a full snapshot of PMS-side room status and blocked dates."""

    @abstractmethod
    def push_booking(self, booking: PMSBookingData) -> PMSBookingResponse:
        """Create a booking in the PMS."""

    @abstractmethod
    def cancel_booking(self, pms_booking_id: str) -> None:
        """Cancel a booking in the PMS by its external id."""

    @abstractmethod
    def get_room_status(self, room_number: str) -> RoomStatus:
        """Point lookup of one room's status."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Liveness probe for health reporting."""
