"""Booking write endpoints; every handler goes through the booking serializer."""

from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from hotel_inventory.dependencies import get_db_engine, get_notifier, get_reconciliation_engine
from hotel_inventory.errors import InventoryError
from hotel_inventory.models.bookings import BookingStatus
from hotel_inventory.routes._helpers import (
    cancel_booking_task,
    push_booking_task,
    raise_http_error,
    row_to_dict,
)
from hotel_inventory.schemas.bookings import (
    BookingCreatePayload,
    BookingReschedulePayload,
    BookingStatusPayload,
)
from hotel_inventory.services.bookings import (
    NewBooking,
    create_booking,
    reschedule_booking,
    update_booking_status,
)
from hotel_inventory.services.notifier import ChangeNotifier
from hotel_inventory.services.reconciliation import ReconciliationEngine

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking_endpoint(
    payload: BookingCreatePayload,
    background_tasks: BackgroundTasks,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
    reconciliation: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> dict[str, Any]:
    """
    Create a booking if the room is free for the whole stay.

    Confirmed bookings (or any booking with push_to_pms set) are pushed to the
    PMS in the background after the response is sent.

    Returns:
        dict: {"booking": {...}}
    """
    try:
        request = NewBooking(
            room_id=payload.room_id,
            check_in=payload.check_in,
            check_out=payload.check_out,
            guest_id=payload.guest_id,
            guest_info=payload.guest_info.model_dump() if payload.guest_info else None,
            number_of_guests=payload.number_of_guests,
            special_requests=payload.special_requests,
            total_amount=payload.total_amount,
            paid_amount=payload.paid_amount,
            payment_method=payload.payment_method,
            addons=[addon.model_dump() for addon in payload.addons],
        )
        booking = create_booking(db_engine, request, notifier=notifier)

        if booking.status == BookingStatus.CONFIRMED or payload.push_to_pms:
            background_tasks.add_task(push_booking_task, reconciliation, booking.id)
            logger.info("pms_push_scheduled", booking_id=str(booking.id))

        return {"booking": row_to_dict(booking)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("booking_creation_failed", room_id=str(payload.room_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/bookings/{booking_id}/status", status_code=status.HTTP_200_OK)
def update_booking_status_endpoint(
    booking_id: UUID,
    payload: BookingStatusPayload,
    background_tasks: BackgroundTasks,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
    reconciliation: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> dict[str, Any]:
    """
    Move a booking along its lifecycle.

    Confirming schedules a PMS push; cancelling a booking that was pushed
    schedules a PMS cancellation.
    """
    try:
        booking = update_booking_status(
            db_engine,
            booking_id,
            payload.status,
            reason=payload.cancellation_reason,
            notifier=notifier,
        )

        if payload.status == BookingStatus.CONFIRMED and not booking.pms_booking_id:
            background_tasks.add_task(push_booking_task, reconciliation, booking_id)
        elif payload.status == BookingStatus.CANCELLED and booking.pms_booking_id:
            background_tasks.add_task(cancel_booking_task, reconciliation, booking_id)

        return {"booking": row_to_dict(booking)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("booking_status_update_failed", booking_id=str(booking_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/bookings/{booking_id}", status_code=status.HTTP_200_OK)
def reschedule_booking_endpoint(
    booking_id: UUID,
    payload: BookingReschedulePayload,
    db_engine: Engine = Depends(get_db_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> dict[str, Any]:
    """Move a booking to another room and/or date range."""
    try:
        if payload.room_id is None and payload.check_in is None and payload.check_out is None:
            raise HTTPException(status_code=400, detail="Nothing to update")

        booking = reschedule_booking(
            db_engine,
            booking_id,
            room_id=payload.room_id,
            check_in=payload.check_in,
            check_out=payload.check_out,
            notifier=notifier,
        )
        return {"booking": row_to_dict(booking)}

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("booking_reschedule_failed", booking_id=str(booking_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
