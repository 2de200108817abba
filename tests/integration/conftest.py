"""
Shared fixtures for integration tests against a real PostgreSQL database.

The schema must already be migrated (``alembic upgrade head``). Every test
module in this tree is skipped when DATABASE_URL is unreachable.
"""

from __future__ import annotations

import random
from typing import Any, Generator
from uuid import UUID

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Row

from hotel_inventory.db.engine import check_engine_health, engine
from hotel_inventory.db.readers.rooms import get_room_by_number
from hotel_inventory.db.writers.guests import insert_guest
from hotel_inventory.db.writers.rooms import insert_rooms


def pytest_collection_modifyitems(config: Any, items: list[pytest.Item]) -> None:
    if check_engine_health():
        return
    skip = pytest.mark.skip(reason="PostgreSQL at DATABASE_URL is not reachable")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


def _delete_room_data(room_id: UUID) -> None:
    with engine.begin() as conn:
        # Delete in correct order to respect foreign keys
        conn.execute(
            text(
                """
                DELETE FROM hotel.sync_logs
                WHERE booking_id IN (SELECT id FROM hotel.bookings WHERE room_id = :room_id)
                """
            ),
            {"room_id": room_id},
        )
        conn.execute(
            text(
                """
                DELETE FROM hotel.booking_addons
                WHERE booking_id IN (SELECT id FROM hotel.bookings WHERE room_id = :room_id)
                """
            ),
            {"room_id": room_id},
        )
        conn.execute(text("DELETE FROM hotel.bookings WHERE room_id = :room_id"), {"room_id": room_id})
        conn.execute(
            text("DELETE FROM hotel.room_blocks WHERE room_id = :room_id"), {"room_id": room_id}
        )
        conn.execute(text("DELETE FROM hotel.rooms WHERE id = :room_id"), {"room_id": room_id})


@pytest.fixture
def test_room(request: Any) -> Generator[Row[Any], None, None]:
    """
    Create a room with a unique number for one test.

    Room type defaults to deluxe; pass ``indirect=True`` params to override.
    Cleans up bookings, blocks and sync logs referencing it afterwards.
    """
    room_type = getattr(request, "param", "deluxe")
    room_number = f"T{random.randint(10000, 99999)}"

    with engine.begin() as conn:
        insert_rooms(conn, [{"room_number": room_number, "type": room_type, "capacity": 2}])
        room = get_room_by_number(conn, room_number)
    assert room is not None

    yield room

    _delete_room_data(room.id)


@pytest.fixture
def second_room() -> Generator[Row[Any], None, None]:
    room_number = f"T{random.randint(10000, 99999)}"
    with engine.begin() as conn:
        insert_rooms(conn, [{"room_number": room_number, "type": "suite", "capacity": 3}])
        room = get_room_by_number(conn, room_number)
    assert room is not None

    yield room

    _delete_room_data(room.id)


@pytest.fixture
def test_guest() -> Generator[UUID, None, None]:
    """Create a guest; its bookings and their sync logs are removed with it."""
    with engine.begin() as conn:
        guest_id = insert_guest(
            conn,
            {"full_name": "Integration Guest", "email": "guest@example.com", "phone": "+15550100"},
        )

    yield guest_id

    with engine.begin() as conn:
        conn.execute(
            text(
                """
                DELETE FROM hotel.sync_logs
                WHERE booking_id IN (SELECT id FROM hotel.bookings WHERE guest_id = :guest_id)
                """
            ),
            {"guest_id": guest_id},
        )
        conn.execute(text("DELETE FROM hotel.bookings WHERE guest_id = :guest_id"), {"guest_id": guest_id})
        conn.execute(text("DELETE FROM hotel.guests WHERE id = :guest_id"), {"guest_id": guest_id})
