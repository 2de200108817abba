"""
Read-path availability queries.

These run without locks and return a best-effort snapshot; the booking
serializer re-checks under the room lock before committing anything.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence
from uuid import UUID

import structlog
from sqlalchemy.engine import Connection, Row

from hotel_inventory.db.readers.bookings import list_bookings_for_rooms, list_room_bookings
from hotel_inventory.db.readers.room_blocks import list_blocks_for_rooms, list_room_blocks
from hotel_inventory.db.readers.rooms import get_room, list_rooms_by_status
from hotel_inventory.errors import InvalidDateRange
from hotel_inventory.models.bookings import COMMITTED_STATUSES
from hotel_inventory.models.rooms import BOOKABLE_ROOM_STATUSES, RoomType
from hotel_inventory.services.overlap import find_overlapping

logger = structlog.get_logger(__name__)


def validate_range(start: date, end: date) -> None:
    """Raise InvalidDateRange unless start < end."""
    if start >= end:
        raise InvalidDateRange(start, end)


def find_available_rooms(
    conn: Connection,
    check_in: date,
    check_out: date,
    room_type: Optional[RoomType] = None,
    min_capacity: Optional[int] = None,
) -> list[Row[Any]]:
    """
    List rooms that can be sold for [check_in, check_out).

    A room qualifies when its status is bookable (available or cleaning) and
    neither a committed booking (confirmed, checked_in) nor a block overlaps
    the range.

    Args:
        conn: Database connection
        check_in: Arrival date (inclusive)
        check_out: Departure date (exclusive)
        room_type: Only rooms of this type
        min_capacity: Only rooms that sleep at least this many guests

    Returns:
        Room rows ordered by room number; empty when nothing qualifies

    Raises:
        InvalidDateRange: If check_in is not before check_out
    """
    validate_range(check_in, check_out)

    candidates: Sequence[Row[Any]] = list_rooms_by_status(
        conn, BOOKABLE_ROOM_STATUSES, room_type=room_type, min_capacity=min_capacity
    )
    if not candidates:
        return []

    room_ids = [room.id for room in candidates]
    bookings = list_bookings_for_rooms(conn, room_ids, COMMITTED_STATUSES, ending_after=check_in)
    blocks = list_blocks_for_rooms(conn, room_ids, ending_after=check_in)

    available = [
        room
        for room in candidates
        if not find_overlapping(check_in, check_out, bookings.get(room.id, []))
        and not find_overlapping(check_in, check_out, blocks.get(room.id, []))
    ]

    logger.debug(
        "availability_computed",
        check_in=str(check_in),
        check_out=str(check_out),
        room_type=room_type.value if room_type else None,
        min_capacity=min_capacity,
        candidates=len(candidates),
        available=len(available),
    )
    return available


def is_room_available(conn: Connection, room_id: UUID, check_in: date, check_out: date) -> bool:
    """
    Single-room variant of find_available_rooms.

    Returns False for an unknown room or one whose status is not bookable.
    """
    validate_range(check_in, check_out)

    room = get_room(conn, room_id)
    if room is None or room.status not in BOOKABLE_ROOM_STATUSES:
        return False

    bookings = list_room_bookings(conn, room_id, COMMITTED_STATUSES, ending_after=check_in)
    if find_overlapping(check_in, check_out, bookings):
        return False
    blocks = list_room_blocks(conn, room_id, ending_after=check_in)
    return not find_overlapping(check_in, check_out, blocks)


def summarize_by_type(rooms: Sequence[Row[Any]]) -> list[dict[str, Any]]:
    """
    Group available rooms by room type.

    Example:
        >>> summarize_by_type(find_available_rooms(conn, d1, d2))
        [{"type": "deluxe", "available_count": 2, "max_capacity": 3, "room_ids": [...]}]

    Returns:
        One entry per type that has at least one room, ordered by type name
    """
    groups: dict[str, dict[str, Any]] = {}
    for room in rooms:
        room_type = getattr(room.type, "value", room.type)
        group = groups.setdefault(
            room_type,
            {"type": room_type, "available_count": 0, "max_capacity": 0, "room_ids": []},
        )
        group["available_count"] += 1
        group["max_capacity"] = max(group["max_capacity"], room.capacity)
        group["room_ids"].append(room.id)
    return [groups[key] for key in sorted(groups)]
