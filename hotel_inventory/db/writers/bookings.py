from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from hotel_inventory.models.bookings import Booking, BookingAddon, BookingStatus
from hotel_inventory.utils.datetime import utc_now


def insert_booking(conn: Connection, data: dict[str, Any]) -> UUID:
    """
    Insert a booking row.

    Must only be called by the booking serializer while it holds the room lock.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside the locked transaction).
        data (dict): Column values for the new booking.

    Returns:
        UUID: New booking id.
    """
    stmt = insert(Booking).values(**data).returning(Booking.id)
    return conn.execute(stmt).scalar_one()


def insert_booking_addons(conn: Connection, booking_id: UUID, addons: list[dict[str, Any]]) -> None:
    """
    Insert add-on line items for a booking in the caller's transaction.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (UUID): Owning booking.
        addons (list[dict]): Items with addon_type, name, quantity, price.
    """
    if not addons:
        return

    rows = [
        {
            "booking_id": booking_id,
            "addon_type": addon["addon_type"],
            "name": addon["name"],
            "quantity": addon.get("quantity", 1),
            "price": addon["price"],
        }
        for addon in addons
    ]
    conn.execute(insert(BookingAddon), rows)


def update_booking_status(
    conn: Connection,
    booking_id: UUID,
    status: BookingStatus,
    cancellation_reason: Optional[str] = None,
) -> None:
    """
    Set a booking's lifecycle status.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (UUID): Booking identifier.
        status (BookingStatus): New status.
        cancellation_reason (Optional[str]): Stored when cancelling.
    """
    values: dict[str, Any] = {"status": status, "updated_at": utc_now()}
    if cancellation_reason is not None:
        values["cancellation_reason"] = cancellation_reason

    conn.execute(update(Booking).where(Booking.id == booking_id).values(**values))


def update_booking_stay(
    conn: Connection, booking_id: UUID, room_id: UUID, check_in: date, check_out: date
) -> None:
    """
    Move a booking to another room and/or date range.

    Must only be called by the booking serializer while it holds the target
    room's lock.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (UUID): Booking identifier.
        room_id (UUID): Target room.
        check_in (date): New check-in (inclusive).
        check_out (date): New check-out (exclusive).
    """
    conn.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .values(room_id=room_id, check_in=check_in, check_out=check_out, updated_at=utc_now())
    )


def set_pms_booking_id(conn: Connection, booking_id: UUID, pms_booking_id: str) -> bool:
    """
    Record the PMS-assigned external id, only if none is stored yet.

    The WHERE pms_booking_id IS NULL guard makes this a write-once marker, so
    two racing pushes cannot overwrite each other's id.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (UUID): Booking identifier.
        pms_booking_id (str): External id from the PMS.

    Returns:
        bool: True if the id was stored, False if one was already present.
    """
    result = conn.execute(
        update(Booking)
        .where(Booking.id == booking_id, Booking.pms_booking_id.is_(None))
        .values(pms_booking_id=pms_booking_id, updated_at=utc_now())
    )
    return result.rowcount > 0
