"""
Vendor-neutral data shapes exchanged with a PMS.

Field aliases are camelCase so the same models parse webhook and HTTP payloads
(``roomNumber``, ``pmsBookingId``) and serialize outbound requests.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hotel_inventory.models.rooms import RoomStatus


class PMSModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlockedRange(PMSModel):
    """A date range the PMS reports as unsellable for a room, [start, end)."""

    start: date
    end: date


class InventoryItem(PMSModel):
    """One room as reported by a PMS inventory snapshot."""

    room_number: str
    room_type: str
    status: RoomStatus
    is_available: bool
    blocked_dates: list[BlockedRange] = Field(default_factory=list)


class PMSBookingData(PMSModel):
    """Outbound booking payload built from a local Booking + Guest + Room."""

    booking_reference: str
    guest_name: str
    email: str
    phone: str
    check_in: date
    check_out: date
    room_type: str
    room_number: Optional[str] = None
    number_of_guests: int
    total_amount: Decimal
    special_requests: Optional[str] = None


class PMSBookingResponse(PMSModel):
    """
    Result of push_booking.

    ``success=False`` with ``errors`` is a business rejection (e.g. the room is
    sold out on the PMS side); transport failures raise instead.
    """

    success: bool
    pms_booking_id: Optional[str] = None
    confirmation_number: Optional[str] = None
    errors: list[str] = Field(default_factory=list)


class SyncInventoryResult(PMSModel):
    """Summary of one inbound inventory reconciliation run."""

    success: bool
    inventory_count: int = 0
    updated_rooms: int = 0
    unknown_rooms: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    cancelled: bool = False
    timestamp: datetime
