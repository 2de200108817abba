"""Room block endpoints (maintenance, owner stays, ...)."""

from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from hotel_inventory.dependencies import get_db_engine, get_notifier
from hotel_inventory.errors import InventoryError
from hotel_inventory.routes._helpers import raise_http_error, row_to_dict
from hotel_inventory.schemas.room_blocks import RoomBlockCreatePayload
from hotel_inventory.services.bookings import create_room_block, delete_room_block
from hotel_inventory.services.notifier import ChangeNotifier

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/room-blocks", status_code=status.HTTP_201_CREATED)
def create_room_block_endpoint(
    payload: RoomBlockCreatePayload,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> dict[str, Any]:
    """
    Block a room over [start_date, end_date).

    Returns:
        dict: {"block": {...}}; 409 if another block overlaps
    """
    try:
        block = create_room_block(
            db_engine,
            payload.room_id,
            payload.start_date,
            payload.end_date,
            reason=payload.reason,
            notifier=notifier,
        )
        return {"block": row_to_dict(block)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("room_block_creation_failed", room_id=str(payload.room_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/room-blocks/{block_id}", status_code=status.HTTP_200_OK)
def delete_room_block_endpoint(
    block_id: UUID,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> dict[str, bool]:
    try:
        delete_room_block(db_engine, block_id, notifier=notifier)
        return {"success": True}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("room_block_deletion_failed", block_id=str(block_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
