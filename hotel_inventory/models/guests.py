"""SQLAlchemy model for hotel guests."""

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from hotel_inventory.config import SCHEMA
from hotel_inventory.models.base import Base


class Guest(Base):
    """
    ORM model for a guest referenced by bookings.

    Contact fields are forwarded to the PMS when a booking is pushed outbound.
    """

    __tablename__ = "guests"
    __table_args__ = {"schema": SCHEMA}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    id_proof_type = Column(String(50), nullable=True)
    id_proof_number = Column(String(100), nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
