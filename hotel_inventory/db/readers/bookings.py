from datetime import date
from typing import Any, Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from hotel_inventory.models.bookings import Booking, BookingStatus
from hotel_inventory.models.guests import Guest
from hotel_inventory.models.rooms import Room

_BOOKING_COLUMNS = (
    Booking.id,
    Booking.booking_reference,
    Booking.room_id,
    Booking.guest_id,
    Booking.check_in,
    Booking.check_out,
    Booking.number_of_guests,
    Booking.special_requests,
    Booking.total_amount,
    Booking.paid_amount,
    Booking.payment_method,
    Booking.status,
    Booking.pms_booking_id,
    Booking.cancellation_reason,
    Booking.created_at,
)


def get_booking(conn: Connection, booking_id: UUID, for_update: bool = False) -> Optional[Row[Any]]:
    """
    Fetch a booking by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (UUID): Booking identifier.
        for_update (bool): Take a row lock (SELECT ... FOR UPDATE) for the
            rest of the transaction.

    Returns:
        Optional[Row]: Booking row or None.
    """
    stmt = select(*_BOOKING_COLUMNS).where(Booking.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    return conn.execute(stmt).fetchone()


def get_booking_by_pms_id(conn: Connection, pms_booking_id: str) -> Optional[Row[Any]]:
    """
    Fetch a booking by the external id the PMS assigned to it.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        pms_booking_id (str): External PMS booking id.

    Returns:
        Optional[Row]: Booking row or None.
    """
    result = conn.execute(select(*_BOOKING_COLUMNS).where(Booking.pms_booking_id == pms_booking_id))
    return result.fetchone()


def get_booking_for_push(conn: Connection, booking_id: UUID) -> Optional[Row[Any]]:
    """
    Fetch a booking joined with its guest and room, in the shape needed to
    build an outbound PMS payload.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (UUID): Booking identifier.

    Returns:
        Optional[Row]: Row with booking, guest contact and room columns, or None.
    """
    result = conn.execute(
        select(
            Booking.id,
            Booking.booking_reference,
            Booking.check_in,
            Booking.check_out,
            Booking.number_of_guests,
            Booking.special_requests,
            Booking.total_amount,
            Booking.status,
            Booking.pms_booking_id,
            Guest.full_name.label("guest_name"),
            Guest.email.label("guest_email"),
            Guest.phone.label("guest_phone"),
            Room.room_number,
            Room.type.label("room_type"),
        )
        .join(Guest, Guest.id == Booking.guest_id)
        .join(Room, Room.id == Booking.room_id)
        .where(Booking.id == booking_id)
    )
    return result.fetchone()


def list_room_bookings(
    conn: Connection,
    room_id: UUID,
    statuses: Iterable[BookingStatus],
    exclude_booking_id: Optional[UUID] = None,
    ending_after: Optional[date] = None,
) -> Sequence[Row[Any]]:
    """
    List a room's bookings in the given statuses.

    Bookings that end on or before ``ending_after`` are skipped in SQL; the
    caller still decides overlap with hotel_inventory.services.overlap so every
    path shares one predicate.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (UUID): Room identifier.
        statuses (Iterable[BookingStatus]): Statuses that hold the room.
        exclude_booking_id (Optional[UUID]): Booking to leave out (used when
            rescheduling a booking against its own room).
        ending_after (Optional[date]): Drop bookings with check_out <= this date.

    Returns:
        Sequence[Row]: Matching bookings ordered by check-in.
    """
    stmt = (
        select(*_BOOKING_COLUMNS)
        .where(Booking.room_id == room_id, Booking.status.in_(list(statuses)))
        .order_by(Booking.check_in)
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    if ending_after is not None:
        stmt = stmt.where(Booking.check_out > ending_after)
    return conn.execute(stmt).fetchall()


def list_bookings_for_rooms(
    conn: Connection,
    room_ids: Iterable[UUID],
    statuses: Iterable[BookingStatus],
    ending_after: Optional[date] = None,
) -> dict[UUID, list[Row[Any]]]:
    """
    Batch variant of list_room_bookings, grouped by room id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_ids (Iterable[UUID]): Rooms to fetch bookings for.
        statuses (Iterable[BookingStatus]): Statuses that hold the room.
        ending_after (Optional[date]): Drop bookings with check_out <= this date.

    Returns:
        dict[UUID, list[Row]]: Bookings per room id (rooms without bookings are absent).
    """
    ids = list(room_ids)
    if not ids:
        return {}

    stmt = (
        select(Booking.id, Booking.room_id, Booking.check_in, Booking.check_out, Booking.status)
        .where(Booking.room_id.in_(ids), Booking.status.in_(list(statuses)))
        .order_by(Booking.check_in)
    )
    if ending_after is not None:
        stmt = stmt.where(Booking.check_out > ending_after)

    result = conn.execute(stmt)
    grouped: dict[UUID, list[Row[Any]]] = {}
    for row in result:
        grouped.setdefault(row.room_id, []).append(row)
    return grouped
