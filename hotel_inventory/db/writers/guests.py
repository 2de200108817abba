from typing import Any
from uuid import UUID

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from hotel_inventory.models.guests import Guest


def insert_guest(conn: Connection, data: dict[str, Any]) -> UUID:
    """
    Insert a guest and return its id.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        data (dict): full_name, email, phone and optional ID proof/address fields.

    Returns:
        UUID: New guest id.
    """
    stmt = (
        insert(Guest)
        .values(
            full_name=data["full_name"],
            email=data["email"],
            phone=data["phone"],
            id_proof_type=data.get("id_proof_type"),
            id_proof_number=data.get("id_proof_number"),
            address=data.get("address"),
        )
        .returning(Guest.id)
    )
    return conn.execute(stmt).scalar_one()
