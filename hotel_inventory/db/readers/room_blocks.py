from datetime import date
from typing import Any, Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from hotel_inventory.models.room_blocks import RoomBlock


def get_room_block(conn: Connection, block_id: UUID) -> Optional[Row[Any]]:
    """
    Fetch a room block by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        block_id (UUID): Block identifier.

    Returns:
        Optional[Row]: Block row or None.
    """
    result = conn.execute(
        select(
            RoomBlock.id, RoomBlock.room_id, RoomBlock.start_date, RoomBlock.end_date, RoomBlock.reason
        ).where(RoomBlock.id == block_id)
    )
    return result.fetchone()


def list_room_blocks(
    conn: Connection, room_id: UUID, ending_after: Optional[date] = None
) -> Sequence[Row[Any]]:
    """
    List blocks on a room. Overlap filtering is left to the caller.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (UUID): Room identifier.
        ending_after (Optional[date]): Drop blocks with end_date <= this date.

    Returns:
        Sequence[Row]: Blocks ordered by start date.
    """
    stmt = (
        select(
            RoomBlock.id, RoomBlock.room_id, RoomBlock.start_date, RoomBlock.end_date, RoomBlock.reason
        )
        .where(RoomBlock.room_id == room_id)
        .order_by(RoomBlock.start_date)
    )
    if ending_after is not None:
        stmt = stmt.where(RoomBlock.end_date > ending_after)
    return conn.execute(stmt).fetchall()


def list_blocks_for_rooms(
    conn: Connection, room_ids: Iterable[UUID], ending_after: Optional[date] = None
) -> dict[UUID, list[Row[Any]]]:
    """
    Batch variant of list_room_blocks, grouped by room id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_ids (Iterable[UUID]): Rooms to fetch blocks for.
        ending_after (Optional[date]): Drop blocks with end_date <= this date.

    Returns:
        dict[UUID, list[Row]]: Blocks per room id.
    """
    ids = list(room_ids)
    if not ids:
        return {}

    stmt = (
        select(RoomBlock.id, RoomBlock.room_id, RoomBlock.start_date, RoomBlock.end_date)
        .where(RoomBlock.room_id.in_(ids))
        .order_by(RoomBlock.start_date)
    )
    if ending_after is not None:
        stmt = stmt.where(RoomBlock.end_date > ending_after)

    grouped: dict[UUID, list[Row[Any]]] = {}
    for row in conn.execute(stmt):
        grouped.setdefault(row.room_id, []).append(row)
    return grouped
