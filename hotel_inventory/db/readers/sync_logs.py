from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from hotel_inventory.models.sync_logs import SyncAction, SyncLogEntry


def list_sync_logs(
    conn: Connection,
    booking_id: Optional[UUID] = None,
    action: Optional[SyncAction] = None,
    limit: int = 100,
) -> Sequence[Row[Any]]:
    """
    Read the PMS audit trail, newest first.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (Optional[UUID]): Only entries for this booking.
        action (Optional[SyncAction]): Only entries of this action kind.
        limit (int): Maximum number of entries.

    Returns:
        Sequence[Row]: Log entries.
    """
    stmt = select(
        SyncLogEntry.id,
        SyncLogEntry.action,
        SyncLogEntry.direction,
        SyncLogEntry.outcome,
        SyncLogEntry.booking_id,
        SyncLogEntry.payload,
        SyncLogEntry.error_message,
        SyncLogEntry.created_at,
    )
    if booking_id is not None:
        stmt = stmt.where(SyncLogEntry.booking_id == booking_id)
    if action is not None:
        stmt = stmt.where(SyncLogEntry.action == action)

    stmt = stmt.order_by(SyncLogEntry.created_at.desc()).limit(limit)
    return conn.execute(stmt).fetchall()
