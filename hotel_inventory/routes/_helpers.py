"""
Internal helper functions shared by route handlers.

Maps the inventory error taxonomy onto HTTP responses, checks shared-secret
bearer tokens, and wraps the outbound PMS calls that run as background tasks.
"""

from __future__ import annotations

import hmac
from datetime import date
from typing import Any, NoReturn, Optional
from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.engine import Row

from hotel_inventory.errors import (
    AuthenticationError,
    ConflictError,
    InventoryError,
    NotFoundError,
    PMSError,
    TransientError,
    ValidationError,
)
from hotel_inventory.services.reconciliation import ReconciliationEngine
from hotel_inventory.utils.datetime import utc_today

logger = structlog.get_logger(__name__)

RETRY_AFTER_SECONDS = "1"


def raise_http_error(error: InventoryError) -> NoReturn:
    """
    Translate a domain error into an HTTPException.

    Raises:
        HTTPException: 400 validation, 401 authentication, 404 not found,
            409 conflict, 503 transient (with Retry-After), 502 PMS failure
    """
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, AuthenticationError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(error))
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, TransientError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(error),
            headers={"Retry-After": RETRY_AFTER_SECONDS},
        )
    if isinstance(error, PMSError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def validate_not_in_past_or_400(check_in: date) -> None:
    """
    Reject stays that start before today (UTC).

    Raises:
        HTTPException: 400 if check_in is in the past
    """
    if check_in < utc_today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Check-in date cannot be in the past",
        )


def validate_bearer_or_401(auth_header: Optional[str], secret: str) -> None:
    """
    Validate an ``Authorization: Bearer <secret>`` header in constant time.

    An empty configured secret rejects every request.

    Raises:
        HTTPException: 401 on a missing or wrong token
    """
    token = ""
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer ") :]

    if not secret or not hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
        logger.warning("bearer_auth_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def row_to_dict(row: Row[Any]) -> dict[str, Any]:
    return dict(row._mapping)


def push_booking_task(reconciliation: ReconciliationEngine, booking_id: UUID) -> None:
    """
    Background task: push a booking to the PMS after the response was sent.

    A terminal failure is already recorded in sync_logs by the engine; it is
    logged here and the local booking stays as it is.
    """
    structlog.contextvars.bind_contextvars(booking_id=str(booking_id))
    try:
        reconciliation.push_booking_to_pms(booking_id)
    except InventoryError as e:
        logger.error("background_pms_push_failed", error=str(e))
    finally:
        structlog.contextvars.unbind_contextvars("booking_id")


def cancel_booking_task(reconciliation: ReconciliationEngine, booking_id: UUID) -> None:
    """Background task: propagate a local cancellation to the PMS."""
    structlog.contextvars.bind_contextvars(booking_id=str(booking_id))
    try:
        reconciliation.cancel_booking_in_pms(booking_id)
    except InventoryError as e:
        logger.error("background_pms_cancel_failed", error=str(e))
    finally:
        structlog.contextvars.unbind_contextvars("booking_id")
