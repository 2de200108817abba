"""PMS webhook receiver route."""

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from hotel_inventory import config
from hotel_inventory.dependencies import get_inbound_event_handler
from hotel_inventory.errors import UnknownEventType, ValidationError
from hotel_inventory.metrics import webhook_events
from hotel_inventory.services.inbound_events import (
    SIGNATURE_HEADER,
    InboundEventHandler,
    is_unsigned_request_allowed,
    verify_signature,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/pms/webhooks")
async def receive_pms_webhook(
    request: Request,
    handler: InboundEventHandler = Depends(get_inbound_event_handler),
) -> JSONResponse:
    """
    Handle incoming PMS webhook events.

    The signature is checked against the raw body before anything is parsed
    or written.

    Expected payload structure:
        {
            "event": "booking.cancelled",
            "data": {"pmsBookingId": "PMS-...", "reason": "..."}
        }

    Returns:
        JSONResponse: 200 {"status": "accepted", "event": ...}; 401 bad
        signature; 400 invalid JSON, malformed data or unknown event; 500 on
        processing failure
    """
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not verify_signature(raw_body, signature, config.PMS_WEBHOOK_SECRET):
        if signature is None and is_unsigned_request_allowed():
            logger.warning("webhook_unsigned_request_allowed", environment=config.ENVIRONMENT)
        else:
            logger.warning("webhook_signature_invalid", signature_present=signature is not None)
            webhook_events.labels(event_type="unknown", outcome="unauthorized").inc()
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Unauthorized - Invalid signature"},
            )

    try:
        payload: Any = json.loads(raw_body)
    except ValueError:
        logger.warning("webhook_invalid_json")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON"},
        )

    if not isinstance(payload, dict):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Payload must be a JSON object"},
        )

    event_type = payload.get("event")
    logger.info("webhook_received", event_type=event_type)

    try:
        await run_in_threadpool(handler.handle, event_type, payload.get("data"))
    except UnknownEventType:
        logger.warning("webhook_unknown_event_type", event_type=event_type)
        webhook_events.labels(event_type="unknown", outcome="rejected").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Unknown event type"},
        )
    except ValidationError as e:
        logger.warning("webhook_invalid_data", event_type=event_type, error=str(e))
        webhook_events.labels(event_type=event_type, outcome="rejected").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(e)},
        )
    except Exception as e:
        logger.exception("webhook_processing_failed", event_type=event_type, error=str(e))
        webhook_events.labels(event_type=event_type, outcome="error").inc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )

    webhook_events.labels(event_type=event_type, outcome="accepted").inc()
    return JSONResponse(content={"status": "accepted", "event": event_type})
