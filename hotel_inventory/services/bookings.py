"""
Booking serializer: every write that can create or move a claim on a room.

All of these run inside one transaction that first takes the room's advisory
lock (hotel_inventory.db.locks.lock_room), then re-checks overlaps against the
committed state, then writes. Two requests for the same room therefore run
one after the other, while requests for different rooms never wait on each
other. Change notifications are published only after commit.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from sqlalchemy.engine import Connection, Engine, Row

from hotel_inventory.config import BOOKING_LOCK_TIMEOUT_MS, BOOKING_REFERENCE_PREFIX
from hotel_inventory.db.engine import transaction
from hotel_inventory.db.locks import lock_room
from hotel_inventory.db.readers.bookings import get_booking, list_room_bookings
from hotel_inventory.db.readers.guests import guest_exists
from hotel_inventory.db.readers.room_blocks import get_room_block, list_room_blocks
from hotel_inventory.db.readers.rooms import get_room
from hotel_inventory.db.writers import bookings as booking_writer
from hotel_inventory.db.writers import room_blocks as block_writer
from hotel_inventory.db.writers.guests import insert_guest
from hotel_inventory.db.writers.rooms import update_room_status
from hotel_inventory.errors import (
    BlockOverlap,
    BookingLockTimeout,
    BookingNotFound,
    ConflictError,
    GuestNotFound,
    InvalidStatusTransition,
    RoomBlocked,
    RoomBlockNotFound,
    RoomNotFound,
    RoomUnavailable,
    ValidationError,
)
from hotel_inventory.metrics import booking_attempts
from hotel_inventory.models.bookings import (
    HOLDING_STATUSES,
    TERMINAL_STATUSES,
    BookingStatus,
    PaymentMethod,
)
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.services import notifier as events
from hotel_inventory.services.availability import validate_range
from hotel_inventory.services.notifier import ChangeNotifier
from hotel_inventory.services.overlap import find_overlapping
from hotel_inventory.utils.datetime import nights_between, utc_today

logger = structlog.get_logger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_SUFFIX_LENGTH = 6

# Lifecycle graph; terminal states have no outgoing edges.
ALLOWED_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_OUT: set(),
    BookingStatus.CANCELLED: set(),
}


@dataclass
class NewBooking:
    """A booking request; exactly one of guest_id / guest_info is expected."""

    room_id: UUID
    check_in: date
    check_out: date
    guest_id: Optional[UUID] = None
    guest_info: Optional[dict[str, Any]] = None
    number_of_guests: int = 1
    special_requests: Optional[str] = None
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    payment_method: Optional[PaymentMethod] = None
    addons: list[dict[str, Any]] = field(default_factory=list)


def generate_booking_reference(today: Optional[date] = None) -> str:
    """
    Build a human-facing booking reference, e.g. ``HTL-20250110-7QX2KD``.

    The suffix comes from ``secrets`` so references cannot be guessed from
    each other.
    """
    stamp = (today or utc_today()).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f"{BOOKING_REFERENCE_PREFIX}-{stamp}-{suffix}"


def initial_status(total_amount: Decimal, paid_amount: Decimal) -> BookingStatus:
    """Fully paid bookings start confirmed; anything else starts pending."""
    if total_amount > 0 and paid_amount >= total_amount:
        return BookingStatus.CONFIRMED
    return BookingStatus.PENDING


def _ensure_room_free(
    conn: Connection,
    room_id: UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[UUID] = None,
) -> None:
    """Re-check bookings and blocks for the room; must run under the room lock."""
    bookings = list_room_bookings(
        conn, room_id, HOLDING_STATUSES, exclude_booking_id, ending_after=check_in
    )
    if find_overlapping(check_in, check_out, bookings):
        raise RoomUnavailable(room_id, check_in, check_out)

    if find_overlapping(check_in, check_out, list_room_blocks(conn, room_id, ending_after=check_in)):
        raise RoomBlocked(room_id, check_in, check_out)


def _require_booking(conn: Connection, booking_id: UUID, for_update: bool = False) -> Row[Any]:
    booking = get_booking(conn, booking_id, for_update=for_update)
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


def _resolve_guest(conn: Connection, request: NewBooking) -> UUID:
    if request.guest_id is not None:
        if not guest_exists(conn, request.guest_id):
            raise GuestNotFound(request.guest_id)
        return request.guest_id

    if request.guest_info:
        return insert_guest(conn, request.guest_info)

    raise ValidationError("Guest information is required")


def _attempt_outcome(error: Exception) -> str:
    if isinstance(error, RoomUnavailable):
        return "unavailable"
    if isinstance(error, RoomBlocked):
        return "blocked"
    if isinstance(error, BookingLockTimeout):
        return "lock_timeout"
    return "error"


def create_booking(
    db_engine: Engine,
    request: NewBooking,
    notifier: Optional[ChangeNotifier] = None,
) -> Row[Any]:
    """
    Create a booking if and only if the room is free for the whole range.

    Args:
        db_engine: SQLAlchemy engine
        request: Booking request
        notifier: Optional change notifier, published to after commit

    Returns:
        The committed booking row

    Raises:
        InvalidDateRange: check_in is not before check_out
        ValidationError: Neither guest_id nor guest_info supplied
        RoomNotFound / GuestNotFound: Referenced entity missing
        RoomUnavailable / RoomBlocked: The range collides with a commitment
        BookingLockTimeout / TransientStorageError: Retryable infrastructure failure
    """
    validate_range(request.check_in, request.check_out)

    try:
        with transaction(db_engine) as conn:
            if get_room(conn, request.room_id) is None:
                raise RoomNotFound(request.room_id)

            lock_room(conn, request.room_id, BOOKING_LOCK_TIMEOUT_MS)
            _ensure_room_free(conn, request.room_id, request.check_in, request.check_out)

            guest_id = _resolve_guest(conn, request)
            status = initial_status(request.total_amount, request.paid_amount)

            booking_id = booking_writer.insert_booking(
                conn,
                {
                    "booking_reference": generate_booking_reference(),
                    "room_id": request.room_id,
                    "guest_id": guest_id,
                    "check_in": request.check_in,
                    "check_out": request.check_out,
                    "number_of_guests": request.number_of_guests,
                    "special_requests": request.special_requests,
                    "total_amount": request.total_amount,
                    "paid_amount": request.paid_amount,
                    "payment_method": request.payment_method,
                    "status": status,
                },
            )
            booking_writer.insert_booking_addons(conn, booking_id, request.addons)
            booking = _require_booking(conn, booking_id)
    except (ConflictError, BookingLockTimeout) as e:
        booking_attempts.labels(outcome=_attempt_outcome(e)).inc()
        logger.info(
            "booking_rejected",
            room_id=str(request.room_id),
            check_in=str(request.check_in),
            check_out=str(request.check_out),
            reason=type(e).__name__,
        )
        raise

    booking_attempts.labels(outcome="created").inc()
    logger.info(
        "booking_created",
        booking_id=str(booking.id),
        booking_reference=booking.booking_reference,
        room_id=str(booking.room_id),
        nights=nights_between(booking.check_in, booking.check_out),
        status=booking.status.value,
    )

    if notifier is not None:
        notifier.publish(
            events.BOOKING_CREATED,
            booking_id=booking.id,
            room_id=booking.room_id,
            check_in=booking.check_in,
            check_out=booking.check_out,
            status=booking.status.value,
        )
    return booking


def reschedule_booking(
    db_engine: Engine,
    booking_id: UUID,
    room_id: Optional[UUID] = None,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> Row[Any]:
    """
    Move a booking to another room and/or date range.

    Runs the same locked check as create_booking against the target room,
    leaving the booking itself out of the conflict set.

    Raises:
        BookingNotFound, RoomNotFound, InvalidDateRange, ValidationError,
        RoomUnavailable, RoomBlocked, BookingLockTimeout
    """
    with transaction(db_engine) as conn:
        current = get_booking(conn, booking_id)
        if current is None:
            raise BookingNotFound(booking_id)

        target_room = room_id or current.room_id
        new_check_in = check_in or current.check_in
        new_check_out = check_out or current.check_out
        validate_range(new_check_in, new_check_out)

        if get_room(conn, target_room) is None:
            raise RoomNotFound(target_room)

        lock_room(conn, target_room, BOOKING_LOCK_TIMEOUT_MS)
        current = _require_booking(conn, booking_id, for_update=True)
        if current.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot reschedule a {current.status.value} booking")

        _ensure_room_free(conn, target_room, new_check_in, new_check_out, booking_id)
        booking_writer.update_booking_stay(conn, booking_id, target_room, new_check_in, new_check_out)
        booking = _require_booking(conn, booking_id)

    logger.info(
        "booking_rescheduled",
        booking_id=str(booking_id),
        room_id=str(target_room),
        check_in=str(new_check_in),
        check_out=str(new_check_out),
    )
    if notifier is not None:
        notifier.publish(
            events.BOOKING_UPDATED,
            booking_id=booking_id,
            room_id=target_room,
            check_in=new_check_in,
            check_out=new_check_out,
        )
    return booking


def update_booking_status(
    db_engine: Engine,
    booking_id: UUID,
    new_status: BookingStatus,
    reason: Optional[str] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> Row[Any]:
    """
    Move a booking along its lifecycle and apply the room side effects.

    checked_in marks the room occupied, checked_out marks it for cleaning, and
    cancelling a booking whose room is occupied releases the room. Setting the
    status a booking already has is a no-op.

    Raises:
        BookingNotFound: Unknown booking
        InvalidStatusTransition: The lifecycle graph has no such edge
        BookingLockTimeout: The room lock could not be acquired in time
    """
    with transaction(db_engine) as conn:
        current = get_booking(conn, booking_id)
        if current is None:
            raise BookingNotFound(booking_id)

        lock_room(conn, current.room_id, BOOKING_LOCK_TIMEOUT_MS)
        current = _require_booking(conn, booking_id, for_update=True)

        if current.status == new_status:
            return current

        if new_status not in ALLOWED_TRANSITIONS[current.status]:
            raise InvalidStatusTransition(current.status.value, new_status.value)

        booking_writer.update_booking_status(
            conn,
            booking_id,
            new_status,
            cancellation_reason=reason if new_status == BookingStatus.CANCELLED else None,
        )

        room = get_room(conn, current.room_id)
        if new_status == BookingStatus.CHECKED_IN:
            update_room_status(conn, current.room_id, RoomStatus.OCCUPIED)
        elif new_status == BookingStatus.CHECKED_OUT:
            update_room_status(conn, current.room_id, RoomStatus.CLEANING)
        elif new_status == BookingStatus.CANCELLED and room is not None:
            if room.status == RoomStatus.OCCUPIED:
                update_room_status(conn, current.room_id, RoomStatus.AVAILABLE)

        booking = _require_booking(conn, booking_id)

    logger.info(
        "booking_status_changed",
        booking_id=str(booking_id),
        previous_status=current.status.value,
        status=new_status.value,
    )
    if notifier is not None:
        event_type = (
            events.BOOKING_CANCELLED
            if new_status == BookingStatus.CANCELLED
            else events.BOOKING_UPDATED
        )
        notifier.publish(
            event_type, booking_id=booking_id, room_id=booking.room_id, status=new_status.value
        )
    return booking


def create_room_block(
    db_engine: Engine,
    room_id: UUID,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> Row[Any]:
    """
    Take a room out of sale for [start_date, end_date).

    Raises:
        InvalidDateRange, RoomNotFound, BlockOverlap, BookingLockTimeout
    """
    validate_range(start_date, end_date)

    with transaction(db_engine) as conn:
        if get_room(conn, room_id) is None:
            raise RoomNotFound(room_id)

        lock_room(conn, room_id, BOOKING_LOCK_TIMEOUT_MS)
        blocks = list_room_blocks(conn, room_id, ending_after=start_date)
        if find_overlapping(start_date, end_date, blocks):
            raise BlockOverlap(room_id)

        block_id = block_writer.insert_room_block(conn, room_id, start_date, end_date, reason)
        block = get_room_block(conn, block_id)
        if block is None:
            raise RoomBlockNotFound(block_id)

    logger.info(
        "room_block_created",
        block_id=str(block_id),
        room_id=str(room_id),
        start_date=str(start_date),
        end_date=str(end_date),
    )
    if notifier is not None:
        notifier.publish(
            events.BLOCK_CREATED,
            block_id=block_id,
            room_id=room_id,
            start_date=start_date,
            end_date=end_date,
        )
    return block


def delete_room_block(
    db_engine: Engine, block_id: UUID, notifier: Optional[ChangeNotifier] = None
) -> None:
    """
    Remove a room block.

    Raises:
        RoomBlockNotFound: Unknown block
        BookingLockTimeout: The room lock could not be acquired in time
    """
    with transaction(db_engine) as conn:
        block = get_room_block(conn, block_id)
        if block is None:
            raise RoomBlockNotFound(block_id)

        lock_room(conn, block.room_id, BOOKING_LOCK_TIMEOUT_MS)
        if not block_writer.delete_room_block(conn, block_id):
            raise RoomBlockNotFound(block_id)

    logger.info("room_block_deleted", block_id=str(block_id), room_id=str(block.room_id))
    if notifier is not None:
        notifier.publish(
            events.BLOCK_DELETED,
            block_id=block_id,
            room_id=block.room_id,
            start_date=block.start_date,
            end_date=block.end_date,
        )
