import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import structlog

from hotel_inventory.db.engine import engine
from hotel_inventory.db.readers.rooms import get_room_numbers
from hotel_inventory.db.writers.rooms import insert_rooms
from hotel_inventory.logging_config import setup_logging
from hotel_inventory.models.rooms import RoomType
from hotel_inventory.pms.mock import SEED_ROOMS

setup_logging()
logger = structlog.get_logger(__name__)

CAPACITY_BY_TYPE = {
    RoomType.STANDARD: 2,
    RoomType.DELUXE: 2,
    RoomType.SUITE: 3,
    RoomType.FAMILY: 4,
}


def main() -> None:
    """
    Seed the local rooms table with the room numbers the mock PMS reports,
    so development syncs reconcile instead of flagging unknown rooms.
    """
    rooms = []
    for room_number, room_type in SEED_ROOMS:
        kind = RoomType(room_type)
        rooms.append(
            {"room_number": room_number, "type": kind, "capacity": CAPACITY_BY_TYPE[kind]}
        )

    with engine.begin() as conn:
        existing = get_room_numbers(conn)
        insert_rooms(conn, rooms)

    created = [room["room_number"] for room in rooms if room["room_number"] not in existing]
    logger.info("rooms_seeded", count=len(rooms), created=created)


if __name__ == "__main__":
    main()
