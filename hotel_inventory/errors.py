"""
Error taxonomy for the inventory core.

Routes map these onto HTTP responses; services raise them and never retry
validation, not-found, conflict or authentication errors. Only
``TransientError`` subclasses are safe for a caller to retry as a whole.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID


class InventoryError(Exception):
    """Base class for all errors raised by the inventory core."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(InventoryError):
    """Caller supplied bad input."""


class InvalidDateRange(ValidationError):
    def __init__(self, start: date, end: date) -> None:
        super().__init__(f"End date {end} must be after start date {start}")
        self.start = start
        self.end = end


class InvalidStatusTransition(ValidationError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot transition booking from {current} to {requested}")
        self.current = current
        self.requested = requested


class UnknownEventType(ValidationError):
    def __init__(self, event: Any) -> None:
        super().__init__(f"Unknown event type: {event}")
        self.event = event


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class NotFoundError(InventoryError):
    """Referenced entity does not exist."""


class RoomNotFound(NotFoundError):
    def __init__(self, room: UUID | str) -> None:
        super().__init__(f"Room {room} not found")
        self.room = room


class GuestNotFound(NotFoundError):
    def __init__(self, guest_id: UUID | str) -> None:
        super().__init__(f"Guest {guest_id} not found")
        self.guest_id = guest_id


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: UUID | str) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class RoomBlockNotFound(NotFoundError):
    def __init__(self, block_id: UUID | str) -> None:
        super().__init__(f"Room block {block_id} not found")
        self.block_id = block_id


# ---------------------------------------------------------------------------
# Conflicts (normal business outcomes, never retried automatically)
# ---------------------------------------------------------------------------


class ConflictError(InventoryError):
    """Requested range collides with an existing commitment."""


class RoomUnavailable(ConflictError):
    def __init__(self, room_id: UUID | str, check_in: date, check_out: date) -> None:
        super().__init__(
            f"Room {room_id} is not available from {check_in} to {check_out}"
        )
        self.room_id = room_id
        self.check_in = check_in
        self.check_out = check_out


class RoomBlocked(ConflictError):
    def __init__(self, room_id: UUID | str, check_in: date, check_out: date) -> None:
        super().__init__(
            f"Room {room_id} is blocked between {check_in} and {check_out}"
        )
        self.room_id = room_id
        self.check_in = check_in
        self.check_out = check_out


class BlockOverlap(ConflictError):
    def __init__(self, room_id: UUID | str) -> None:
        super().__init__(f"Overlapping block exists for room {room_id}")
        self.room_id = room_id


class BookingNotPushable(ConflictError):
    def __init__(self, booking_id: UUID | str, status: str) -> None:
        super().__init__(f"Booking {booking_id} is {status} and cannot be sent to the PMS")
        self.booking_id = booking_id
        self.status = status


# ---------------------------------------------------------------------------
# Transient infrastructure failures
# ---------------------------------------------------------------------------


class TransientError(InventoryError):
    """Infrastructure failure; the whole operation may be retried."""


class BookingLockTimeout(TransientError):
    def __init__(self, room_id: UUID | str) -> None:
        super().__init__(f"Timed out waiting for the booking lock on room {room_id}")
        self.room_id = room_id


class TransientStorageError(TransientError):
    """Database connection or transaction failure."""


class PMSTransportError(TransientError):
    """PMS unreachable, timed out, or answered with a server error."""


# ---------------------------------------------------------------------------
# PMS outcomes
# ---------------------------------------------------------------------------


class PMSError(InventoryError):
    """Non-transport PMS failure."""


class PMSPushFailed(PMSError):
    def __init__(self, booking_id: UUID | str, attempts: int, errors: list[str]) -> None:
        super().__init__(
            f"PMS push for booking {booking_id} failed after {attempts} attempts: "
            + "; ".join(errors)
        )
        self.booking_id = booking_id
        self.attempts = attempts
        self.errors = errors


class PMSBookingNotFound(PMSError):
    def __init__(self, pms_booking_id: str) -> None:
        super().__init__(f"PMS booking {pms_booking_id} not found")
        self.pms_booking_id = pms_booking_id


# ---------------------------------------------------------------------------
# Authenticity
# ---------------------------------------------------------------------------


class AuthenticationError(InventoryError):
    """Bad webhook signature or cron token."""
