from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from hotel_inventory.models.room_blocks import RoomBlock


def insert_room_block(
    conn: Connection, room_id: UUID, start_date: date, end_date: date, reason: Optional[str]
) -> UUID:
    """
    Insert an inventory block. Call only while holding the room lock.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        room_id (UUID): Blocked room.
        start_date (date): First blocked night.
        end_date (date): Exclusive end.
        reason (Optional[str]): Free-text reason.

    Returns:
        UUID: New block id.
    """
    stmt = (
        insert(RoomBlock)
        .values(room_id=room_id, start_date=start_date, end_date=end_date, reason=reason)
        .returning(RoomBlock.id)
    )
    return conn.execute(stmt).scalar_one()


def delete_room_block(conn: Connection, block_id: UUID) -> bool:
    """
    Delete an inventory block.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        block_id (UUID): Block identifier.

    Returns:
        bool: True if a block was deleted.
    """
    result = conn.execute(delete(RoomBlock).where(RoomBlock.id == block_id))
    return result.rowcount > 0
