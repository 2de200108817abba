from typing import Any, Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from hotel_inventory.models.rooms import Room, RoomStatus, RoomType


def get_room(conn: Connection, room_id: UUID) -> Optional[Row[Any]]:
    """
    Fetch a room by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (UUID): Room identifier.

    Returns:
        Optional[Row]: Room row (id, room_number, type, capacity, status) or None.
    """
    result = conn.execute(
        select(Room.id, Room.room_number, Room.type, Room.capacity, Room.status).where(
            Room.id == room_id
        )
    )
    return result.fetchone()


def get_room_by_number(conn: Connection, room_number: str) -> Optional[Row[Any]]:
    """
    Fetch a room by its unique room number (the key the PMS uses).

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_number (str): Room number, e.g. "101".

    Returns:
        Optional[Row]: Room row or None if unknown locally.
    """
    result = conn.execute(
        select(Room.id, Room.room_number, Room.type, Room.capacity, Room.status).where(
            Room.room_number == room_number
        )
    )
    return result.fetchone()


def list_rooms_by_status(
    conn: Connection,
    statuses: Iterable[RoomStatus],
    room_type: Optional[RoomType] = None,
    min_capacity: Optional[int] = None,
) -> Sequence[Row[Any]]:
    """
    List rooms whose operational status is one of ``statuses``.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        statuses (Iterable[RoomStatus]): Allowed statuses.
        room_type (Optional[RoomType]): Only rooms of this type.
        min_capacity (Optional[int]): Only rooms sleeping at least this many guests.

    Returns:
        Sequence[Row]: Matching rooms ordered by room number.
    """
    stmt = (
        select(Room.id, Room.room_number, Room.type, Room.capacity, Room.status)
        .where(Room.status.in_(list(statuses)))
        .order_by(Room.room_number)
    )
    if room_type is not None:
        stmt = stmt.where(Room.type == room_type)
    if min_capacity is not None:
        stmt = stmt.where(Room.capacity >= min_capacity)
    return conn.execute(stmt).fetchall()


def get_room_numbers(conn: Connection) -> dict[str, Row[Any]]:
    """Map every local room number to its (id, room_number, status) row."""
    result = conn.execute(select(Room.id, Room.room_number, Room.status))
    return {row.room_number: row for row in result}
