"""SQLAlchemy model for the append-only PMS synchronization audit trail."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from hotel_inventory.config import SCHEMA
from hotel_inventory.models.base import Base
from hotel_inventory.models.rooms import _enum_values


class SyncAction(str, enum.Enum):
    SYNC_INVENTORY = "sync_inventory"
    PUSH_BOOKING = "push_booking"
    CANCEL_BOOKING = "cancel_booking"
    INBOUND_EVENT = "inbound_event"
    ROOM_STATUS = "room_status"


class SyncDirection(str, enum.Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class SyncOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"


class SyncLogEntry(Base):
    """
    ORM model for one PMS synchronization decision.

    Rows are only ever inserted. The payload column keeps a snapshot of the
    data exchanged so any reconciliation step can be replayed by hand.
    """

    __tablename__ = "sync_logs"
    __table_args__ = {"schema": SCHEMA}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(
        Enum(SyncAction, name="sync_action", native_enum=False, values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    direction = Column(
        Enum(SyncDirection, name="sync_direction", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    outcome = Column(
        Enum(SyncOutcome, name="sync_outcome", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    booking_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.bookings.id"),
        nullable=True,
        index=True,
    )
    payload = Column(JSONB, nullable=False, server_default="{}")
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
