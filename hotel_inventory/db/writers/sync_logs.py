"""
Append-only writer for the PMS audit trail.

There is intentionally no update or delete function for sync_logs.
"""

import json
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from hotel_inventory.models.sync_logs import SyncAction, SyncDirection, SyncLogEntry, SyncOutcome


def _jsonable(payload: dict[str, Any]) -> dict[str, Any]:
    # dates, UUIDs and Decimals become strings
    return json.loads(json.dumps(payload, default=str))


def insert_sync_log(
    conn: Connection,
    action: SyncAction,
    direction: SyncDirection,
    outcome: SyncOutcome,
    payload: Optional[dict[str, Any]] = None,
    booking_id: Optional[UUID] = None,
    error_message: Optional[str] = None,
) -> UUID:
    """
    Append one entry to the sync log.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        action (SyncAction): What was attempted.
        direction (SyncDirection): Inbound (PMS -> us) or outbound (us -> PMS).
        outcome (SyncOutcome): success or failed.
        payload (Optional[dict]): Snapshot of the data exchanged.
        booking_id (Optional[UUID]): Related booking, if any.
        error_message (Optional[str]): Failure description.

    Returns:
        UUID: New log entry id.
    """
    stmt = (
        insert(SyncLogEntry)
        .values(
            action=action,
            direction=direction,
            outcome=outcome,
            booking_id=booking_id,
            payload=_jsonable(payload or {}),
            error_message=error_message,
        )
        .returning(SyncLogEntry.id)
    )
    return conn.execute(stmt).scalar_one()
