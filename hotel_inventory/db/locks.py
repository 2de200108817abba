"""
Transaction-scoped, per-room advisory locks.

``lock_room`` serializes every write that participates in the no-overlap
invariant for one room. The lock is keyed by a stable hash of the room id
and is released by PostgreSQL on commit or rollback.
"""

from __future__ import annotations

import hashlib
import time
from uuid import UUID

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError

from hotel_inventory.errors import BookingLockTimeout
from hotel_inventory.metrics import lock_timeouts, lock_wait_duration

logger = structlog.get_logger(__name__)

# SQLSTATE lock_not_available, raised when lock_timeout expires
LOCK_NOT_AVAILABLE = "55P03"


def room_lock_key(room_id: UUID | str) -> int:
    """
    Deterministic signed bigint for pg_advisory_xact_lock.

    Must agree across processes, so the built-in salted hash() is not used.

    Args:
        room_id: Room identifier

    Returns:
        int: Signed 64-bit lock key
    """
    digest = hashlib.sha256(str(room_id).encode("utf-8")).digest()[:8]
    return int.from_bytes(digest, "big", signed=True)


def _is_lock_timeout(error: OperationalError) -> bool:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == LOCK_NOT_AVAILABLE


def lock_room(conn: Connection, room_id: UUID | str, timeout_ms: int) -> None:
    """
    Acquire the exclusive booking lock for a room inside the current transaction.

    Blocks until the lock is free or ``timeout_ms`` elapses. The lock_timeout
    setting is transaction-local, so it does not leak into pooled connections.

    Args:
        conn: Connection with an open transaction
        room_id: Room to lock
        timeout_ms: Maximum wait in milliseconds

    Raises:
        BookingLockTimeout: If the lock could not be acquired in time
    """
    conn.execute(
        text("SELECT set_config('lock_timeout', :timeout, true)"),
        {"timeout": f"{int(timeout_ms)}ms"},
    )

    started = time.monotonic()
    try:
        conn.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": room_lock_key(room_id)})
    except OperationalError as e:
        if _is_lock_timeout(e):
            lock_timeouts.inc()
            logger.warning("room_lock_timeout", room_id=str(room_id), timeout_ms=timeout_ms)
            raise BookingLockTimeout(room_id) from e
        raise
    finally:
        lock_wait_duration.observe(time.monotonic() - started)

    logger.debug("room_lock_acquired", room_id=str(room_id))
