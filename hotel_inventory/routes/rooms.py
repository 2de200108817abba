"""Room status endpoint for housekeeping and maintenance."""

from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from hotel_inventory.dependencies import get_db_engine, get_notifier
from hotel_inventory.errors import InventoryError
from hotel_inventory.routes._helpers import raise_http_error, row_to_dict
from hotel_inventory.schemas.rooms import RoomStatusPayload
from hotel_inventory.services.notifier import ChangeNotifier
from hotel_inventory.services.rooms import set_room_status

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.patch("/rooms/{room_id}/status")
def update_room_status_endpoint(
    room_id: UUID,
    payload: RoomStatusPayload,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> dict[str, Any]:
    """
    Returns:
        dict: {"room": {...}} with the stored status; 404 for an unknown room
    """
    try:
        room = set_room_status(
            db_engine, room_id, payload.status, reason=payload.reason, notifier=notifier
        )
        return {"room": row_to_dict(room)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("room_status_update_failed", room_id=str(room_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
