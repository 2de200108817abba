"""Operator changes to a room's operational status (housekeeping, maintenance)."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

import structlog
from sqlalchemy.engine import Engine, Row

from hotel_inventory.config import BOOKING_LOCK_TIMEOUT_MS
from hotel_inventory.db.engine import transaction
from hotel_inventory.db.locks import lock_room
from hotel_inventory.db.readers.rooms import get_room
from hotel_inventory.db.writers.rooms import update_room_status
from hotel_inventory.errors import RoomNotFound
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.services import notifier as events
from hotel_inventory.services.notifier import ChangeNotifier

logger = structlog.get_logger(__name__)


def set_room_status(
    db_engine: Engine,
    room_id: UUID,
    status: RoomStatus,
    reason: Optional[str] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> Row[Any]:
    """
    Set a room's status under the room lock, so it cannot interleave with a
    check-in or check-out of the same room.

    Setting the status the room already has is a no-op and publishes nothing.

    Raises:
        RoomNotFound: Unknown room
        BookingLockTimeout: The room lock could not be acquired in time
    """
    with transaction(db_engine) as conn:
        before = get_room(conn, room_id)
        if before is None:
            raise RoomNotFound(room_id)

        lock_room(conn, room_id, BOOKING_LOCK_TIMEOUT_MS)
        changed = update_room_status(conn, room_id, status)
        room = get_room(conn, room_id)
        if room is None:
            raise RoomNotFound(room_id)

    if not changed:
        logger.info("room_status_unchanged", room_id=str(room_id), status=status.value)
        return room

    logger.info(
        "room_status_changed",
        room_id=str(room_id),
        room_number=room.room_number,
        previous_status=before.status.value,
        status=status.value,
        reason=reason,
    )
    if notifier is not None:
        notifier.publish(
            events.ROOM_STATUS_CHANGED,
            room_id=room_id,
            room_number=room.room_number,
            previous_status=before.status.value,
            status=status.value,
            reason=reason,
        )
    return room
