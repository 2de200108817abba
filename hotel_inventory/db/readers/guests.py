from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_inventory.models.guests import Guest


def guest_exists(conn: Connection, guest_id: UUID) -> bool:
    """
    Check if a guest exists.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        guest_id (UUID): Guest identifier.

    Returns:
        bool: True if the guest exists, False otherwise.
    """
    result = conn.execute(select(Guest.id).where(Guest.id == guest_id))
    return result.fetchone() is not None
