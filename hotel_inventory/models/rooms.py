"""SQLAlchemy model for physical hotel rooms."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from hotel_inventory.config import SCHEMA
from hotel_inventory.models.base import Base


class RoomType(str, enum.Enum):
    STANDARD = "standard"
    DELUXE = "deluxe"
    SUITE = "suite"
    FAMILY = "family"


class RoomStatus(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


# Statuses that let a room appear in availability results at all.
BOOKABLE_ROOM_STATUSES = (RoomStatus.AVAILABLE, RoomStatus.CLEANING)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Room(Base):
    """
    ORM model for a bookable room.

    ``status`` is the operational gate consulted by every availability query in
    addition to the date-range overlap check. It is mutated by status-change
    operations, check-in/check-out transitions and PMS reconciliation.
    """

    __tablename__ = "rooms"
    __table_args__ = {"schema": SCHEMA}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_number = Column(String(16), nullable=False, unique=True, index=True)
    type = Column(
        Enum(RoomType, name="room_type", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    capacity = Column(Integer, nullable=False, server_default="2")
    status = Column(
        Enum(RoomStatus, name="room_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=RoomStatus.AVAILABLE,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
