from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from hotel_inventory.models.rooms import Room, RoomStatus
from hotel_inventory.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def update_room_status(conn: Connection, room_id: UUID, status: RoomStatus) -> bool:
    """
    Set a room's operational status; only writes if the value changed.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        room_id (UUID): Room identifier.
        status (RoomStatus): New status.

    Returns:
        bool: True if a row was updated, False if the status was already set.
    """
    stmt = (
        update(Room)
        .where(Room.id == room_id, Room.status.is_distinct_from(status))
        .values(status=status, updated_at=utc_now())
    )
    result = conn.execute(stmt)
    return result.rowcount > 0


def insert_rooms(conn: Connection, data: list[dict[str, Any]]) -> None:
    """
    Upsert rooms by room number; only update if type/capacity changed.

    Status is left alone on conflict; it belongs to reconciliation and
    check-in/check-out transitions.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        data (list[dict]): Rows with room_number, type, capacity and optional status.
    """
    if not data:
        logger.info("No rooms to upsert")
        return

    rows = [
        {
            "room_number": room["room_number"],
            "type": room["type"],
            "capacity": room.get("capacity", 2),
            "status": room.get("status", RoomStatus.AVAILABLE),
        }
        for room in data
    ]

    stmt = insert(Room).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["room_number"],
        set_={
            "type": stmt.excluded.type,
            "capacity": stmt.excluded.capacity,
            "updated_at": utc_now(),
        },
        where=(
            Room.type.is_distinct_from(stmt.excluded.type)
            | Room.capacity.is_distinct_from(stmt.excluded.capacity)
        ),
    )
    conn.execute(stmt)

    logger.info("rooms_upserted", count=len(rows))
