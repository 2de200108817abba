from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RoomBlockCreatePayload(BaseModel):
    """
    Schema for taking a room out of sale over [start_date, end_date).
    """

    room_id: UUID = Field(..., description="Room to block")
    start_date: date = Field(..., description="First blocked night")
    end_date: date = Field(..., description="Day the block ends (exclusive)")
    reason: Optional[str] = Field(None, description="e.g. maintenance, owner stay")
