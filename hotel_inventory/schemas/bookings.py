from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from hotel_inventory.models.bookings import BookingStatus, PaymentMethod


class GuestInfo(BaseModel):
    """
    Schema for a guest created inline with a booking.
    """

    full_name: str = Field(..., min_length=1, description="Guest full name")
    email: str = Field(..., min_length=3, description="Contact email")
    phone: str = Field(..., min_length=3, description="Contact phone")
    id_proof_type: Optional[str] = Field(None, description="e.g. passport, national_id")
    id_proof_number: Optional[str] = Field(None, description="ID document number")
    address: Optional[str] = Field(None, description="Postal address")


class BookingAddonItem(BaseModel):
    addon_type: str = Field(..., description="Add-on category, e.g. breakfast")
    name: str = Field(..., description="Display name")
    quantity: int = Field(1, ge=1)
    price: Decimal = Field(..., ge=0, description="Caller-computed line price")


class BookingCreatePayload(BaseModel):
    """
    Schema for creating a booking. Supply either guest_id or guest_info.

    Pricing is computed by the caller; total_amount and paid_amount are stored
    as given.
    """

    room_id: UUID = Field(..., description="Room to book")
    guest_id: Optional[UUID] = Field(None, description="Existing guest")
    guest_info: Optional[GuestInfo] = Field(None, description="New guest details")
    check_in: date = Field(..., description="Arrival date (inclusive)")
    check_out: date = Field(..., description="Departure date (exclusive)")
    number_of_guests: int = Field(1, ge=1)
    special_requests: Optional[str] = None
    addons: list[BookingAddonItem] = Field(default_factory=list)
    payment_method: Optional[PaymentMethod] = None
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    total_amount: Decimal = Field(Decimal("0"), ge=0)
    push_to_pms: bool = Field(False, description="Push to the PMS even if not yet confirmed")


class BookingStatusPayload(BaseModel):
    status: BookingStatus = Field(..., description="Target lifecycle status")
    cancellation_reason: Optional[str] = Field(None, description="Stored when cancelling")


class BookingReschedulePayload(BaseModel):
    """
    Schema for moving a booking. Omitted fields keep their current value.
    """

    room_id: Optional[UUID] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
