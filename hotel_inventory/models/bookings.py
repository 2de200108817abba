"""SQLAlchemy models for bookings and their add-on line items."""

import enum
import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from hotel_inventory.config import SCHEMA
from hotel_inventory.models.base import Base
from hotel_inventory.models.rooms import _enum_values


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    ONLINE = "online"


# Bookings in these statuses hold the room; the serializer rejects overlaps with them.
HOLDING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)

# Read-path availability only counts committed stays.
COMMITTED_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)

TERMINAL_STATUSES = (BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED)


class Booking(Base):
    """
    ORM model for a guest stay in one room over [check_in, check_out).

    ``pms_booking_id`` stays NULL until the booking is pushed to the PMS and is
    written exactly once; its presence is the idempotency marker for outbound
    pushes.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_in < check_out", name="ck_bookings_date_order"),
        Index("ix_bookings_room_dates", "room_id", "check_in", "check_out"),
        {"schema": SCHEMA},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_reference = Column(String(32), nullable=False, unique=True)
    room_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.rooms.id", ondelete="RESTRICT"),
        nullable=False,
    )
    guest_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.guests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    number_of_guests = Column(Integer, nullable=False, server_default="1")
    special_requests = Column(String, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    paid_amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    payment_method = Column(
        Enum(PaymentMethod, name="payment_method", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    status = Column(
        Enum(BookingStatus, name="booking_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    pms_booking_id = Column(String(100), nullable=True, unique=True)
    cancellation_reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class BookingAddon(Base):
    """Add-on line item (breakfast, airport pickup, ...) inserted with its booking."""

    __tablename__ = "booking_addons"
    __table_args__ = {"schema": SCHEMA}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    addon_type = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, server_default="1")
    price = Column(Numeric(12, 2), nullable=False)
