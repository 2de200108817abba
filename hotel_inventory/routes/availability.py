"""Read-path availability endpoints."""

from datetime import date
from typing import Any, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from hotel_inventory.db.readers.rooms import get_room
from hotel_inventory.dependencies import get_db_engine
from hotel_inventory.errors import InventoryError, RoomNotFound
from hotel_inventory.models.rooms import RoomType
from hotel_inventory.routes._helpers import raise_http_error, row_to_dict, validate_not_in_past_or_400
from hotel_inventory.services.availability import (
    find_available_rooms,
    is_room_available,
    summarize_by_type,
    validate_range,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/rooms/available")
def list_available_rooms(
    check_in: date = Query(..., description="Arrival date (inclusive)"),
    check_out: date = Query(..., description="Departure date (exclusive)"),
    room_type: Optional[RoomType] = Query(None, description="Only rooms of this type"),
    min_capacity: Optional[int] = Query(None, ge=1, description="Minimum guests the room sleeps"),
    db_engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    List rooms that can be sold for the whole stay.

    The result is a snapshot; a booking attempt re-checks under the room lock.

    Returns:
        dict: {"data": [room, ...], "count": n}
    """
    try:
        validate_range(check_in, check_out)
        validate_not_in_past_or_400(check_in)

        with db_engine.connect() as conn:
            rooms = find_available_rooms(
                conn, check_in, check_out, room_type=room_type, min_capacity=min_capacity
            )

        data = [row_to_dict(room) for room in rooms]
        return {"data": data, "count": len(data)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("availability_query_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/rooms/available-by-type")
def list_available_room_types(
    check_in: date = Query(..., description="Arrival date (inclusive)"),
    check_out: date = Query(..., description="Departure date (exclusive)"),
    min_capacity: Optional[int] = Query(None, ge=1, description="Minimum guests the room sleeps"),
    db_engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Available rooms grouped by type, for a booking widget that sells types
    rather than individual rooms.

    Returns:
        dict: {"data": [{"type", "available_count", "max_capacity", "room_ids"}, ...],
        "total_available": n}
    """
    try:
        validate_range(check_in, check_out)
        validate_not_in_past_or_400(check_in)

        with db_engine.connect() as conn:
            rooms = find_available_rooms(conn, check_in, check_out, min_capacity=min_capacity)

        return {"data": summarize_by_type(rooms), "total_available": len(rooms)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("availability_by_type_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/rooms/{room_id}/availability")
def get_room_availability(
    room_id: UUID,
    check_in: date = Query(..., description="Arrival date (inclusive)"),
    check_out: date = Query(..., description="Departure date (exclusive)"),
    db_engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Check whether one room is free for the whole stay.

    Returns:
        dict: {"room_id": ..., "available": bool}
    """
    try:
        validate_range(check_in, check_out)
        validate_not_in_past_or_400(check_in)

        with db_engine.connect() as conn:
            if get_room(conn, room_id) is None:
                raise RoomNotFound(room_id)
            available = is_room_available(conn, room_id, check_in, check_out)

        return {"room_id": room_id, "available": available}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("room_availability_failed", room_id=str(room_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
