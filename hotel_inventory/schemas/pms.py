from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ManualSyncPayload(BaseModel):
    action: Literal["sync_inventory", "push_booking", "room_status", "health_check"] = Field(
        ..., description="Operation to run against the PMS"
    )
    booking_id: Optional[UUID] = Field(None, description="Required for push_booking")
    room_number: Optional[str] = Field(None, description="Required for room_status")
