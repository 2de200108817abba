from typing import Optional

from pydantic import BaseModel, Field

from hotel_inventory.models.rooms import RoomStatus


class RoomStatusPayload(BaseModel):
    """
    Schema for an operator status change on one room.
    """

    status: RoomStatus = Field(..., description="New operational status")
    reason: Optional[str] = Field(None, description="e.g. broken heater, deep clean")
