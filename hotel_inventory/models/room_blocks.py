"""SQLAlchemy model for administrative room closures."""

import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from hotel_inventory.config import SCHEMA
from hotel_inventory.models.base import Base


class RoomBlock(Base):
    """
    ORM model for an inventory block (renovation, owner use, ...).

    Blocks occupy [start_date, end_date) exactly like a booking for overlap
    purposes, but carry no guest and are never pushed to the PMS.
    """

    __tablename__ = "room_blocks"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_room_blocks_date_order"),
        Index("ix_room_blocks_room_dates", "room_id", "start_date", "end_date"),
        {"schema": SCHEMA},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.rooms.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
