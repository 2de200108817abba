"""
Inbound PMS webhook events: authenticity check and dispatch.

Signatures are the lowercase hex HMAC-SHA256 of the raw request body, keyed
with PMS_WEBHOOK_SECRET and sent in the X-PMS-Signature header.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.engine import Engine

from hotel_inventory import config
from hotel_inventory.db.engine import transaction
from hotel_inventory.db.readers.bookings import get_booking_by_pms_id
from hotel_inventory.db.readers.rooms import get_room_by_number
from hotel_inventory.db.writers.rooms import update_room_status
from hotel_inventory.db.writers.sync_logs import insert_sync_log
from hotel_inventory.errors import InventoryError, UnknownEventType, ValidationError
from hotel_inventory.models.bookings import BookingStatus
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.models.sync_logs import SyncAction, SyncDirection, SyncOutcome
from hotel_inventory.services.bookings import update_booking_status
from hotel_inventory.services.notifier import ChangeNotifier
from hotel_inventory.services.reconciliation import ReconciliationEngine

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-PMS-Signature"
UNSIGNED_ALLOWED_ENVIRONMENTS = ("development", "test")


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature_header: Optional[str], secret: str) -> bool:
    """
    Check a webhook signature in constant time.

    Args:
        raw_body: Exact request body bytes, before any JSON parsing
        signature_header: Value of the X-PMS-Signature header
        secret: Shared secret

    Returns:
        bool: True only for a non-empty secret and a matching signature
    """
    if not secret or not signature_header:
        return False
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected, signature_header.strip().lower())


def is_unsigned_request_allowed() -> bool:
    """
    Local development escape hatch for unsigned webhooks.

    Requires both a non-production ENVIRONMENT (development/test) and an
    explicit PMS_WEBHOOK_ALLOW_UNSIGNED=true.
    """
    return (
        config.ENVIRONMENT in UNSIGNED_ALLOWED_ENVIRONMENTS and config.PMS_WEBHOOK_ALLOW_UNSIGNED
    )


class InboundEventHandler:
    """
    Apply one authenticated PMS event to local state.

    Supported events:
        booking.created      -> logged with full payload for replay
        booking.cancelled    -> local booking cancelled by pms_booking_id
        room.status_changed  -> local room status set
        inventory.updated    -> full inventory reconciliation
    """

    def __init__(
        self,
        engine: Engine,
        reconciliation: ReconciliationEngine,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.engine = engine
        self.reconciliation = reconciliation
        self.notifier = notifier
        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "booking.created": self.handle_booking_created,
            "booking.cancelled": self.handle_booking_cancelled,
            "room.status_changed": self.handle_room_status_changed,
            "inventory.updated": self.handle_inventory_updated,
        }

    @property
    def supported_events(self) -> list[str]:
        return list(self._handlers)

    def handle(self, event: Any, data: Optional[dict[str, Any]]) -> None:
        """
        Dispatch an event to its handler.

        Raises:
            UnknownEventType: The event name is not supported
            ValidationError: The event data is malformed
        """
        handler = self._handlers.get(event) if isinstance(event, str) else None
        if handler is None:
            raise UnknownEventType(event)
        if data is not None and not isinstance(data, dict):
            raise ValidationError("Event data must be an object")
        handler(data or {})

    def _log_event(
        self,
        outcome: SyncOutcome,
        payload: dict[str, Any],
        action: SyncAction = SyncAction.INBOUND_EVENT,
        booking_id: Any = None,
        error_message: Optional[str] = None,
    ) -> None:
        with transaction(self.engine) as conn:
            insert_sync_log(
                conn,
                action=action,
                direction=SyncDirection.INBOUND,
                outcome=outcome,
                payload=payload,
                booking_id=booking_id,
                error_message=error_message,
            )

    def handle_booking_created(self, data: dict[str, Any]) -> None:
        # Not materialized locally; the log entry keeps the full payload for replay
        self._log_event(SyncOutcome.SUCCESS, {"event": "booking.created", "data": data})
        logger.info(
            "pms_inbound_booking_logged",
            pms_booking_id=data.get("pmsBookingId") or data.get("id"),
            room_number=data.get("roomNumber"),
        )

    def handle_booking_cancelled(self, data: dict[str, Any]) -> None:
        pms_booking_id = data.get("pmsBookingId")
        if not pms_booking_id:
            raise ValidationError("booking.cancelled requires pmsBookingId")

        with self.engine.connect() as conn:
            booking = get_booking_by_pms_id(conn, str(pms_booking_id))

        payload = {"event": "booking.cancelled", "data": data}
        if booking is None:
            logger.warning("pms_cancel_unknown_booking", pms_booking_id=pms_booking_id)
            self._log_event(
                SyncOutcome.FAILED,
                payload,
                action=SyncAction.CANCEL_BOOKING,
                error_message=f"Booking with PMS id {pms_booking_id} not found",
            )
            return

        try:
            update_booking_status(
                self.engine,
                booking.id,
                BookingStatus.CANCELLED,
                reason=data.get("reason") or "Cancelled in PMS",
                notifier=self.notifier,
            )
        except InventoryError as e:
            self._log_event(
                SyncOutcome.FAILED,
                payload,
                action=SyncAction.CANCEL_BOOKING,
                booking_id=booking.id,
                error_message=str(e),
            )
            raise

        self._log_event(
            SyncOutcome.SUCCESS, payload, action=SyncAction.CANCEL_BOOKING, booking_id=booking.id
        )
        logger.info(
            "pms_booking_cancelled",
            booking_id=str(booking.id),
            booking_reference=booking.booking_reference,
            pms_booking_id=pms_booking_id,
        )

    def handle_room_status_changed(self, data: dict[str, Any]) -> None:
        room_number = data.get("roomNumber")
        raw_status = data.get("status")
        if not room_number or not raw_status:
            raise ValidationError("room.status_changed requires roomNumber and status")

        try:
            status = RoomStatus(str(raw_status).lower())
        except ValueError:
            raise ValidationError(f"Unknown room status: {raw_status}") from None

        payload = {"event": "room.status_changed", "data": data}
        with transaction(self.engine) as conn:
            room = get_room_by_number(conn, str(room_number))
            if room is not None:
                changed = update_room_status(conn, room.id, status)
                insert_sync_log(
                    conn,
                    action=SyncAction.INBOUND_EVENT,
                    direction=SyncDirection.INBOUND,
                    outcome=SyncOutcome.SUCCESS,
                    payload=payload,
                )

        if room is None:
            logger.warning("pms_status_change_unknown_room", room_number=room_number)
            self._log_event(
                SyncOutcome.FAILED, payload, error_message=f"Room {room_number} not found"
            )
            return

        logger.info(
            "pms_room_status_changed",
            room_number=room_number,
            status=status.value,
            changed=changed,
        )

    def handle_inventory_updated(self, data: dict[str, Any]) -> None:
        result = self.reconciliation.sync_inventory_from_pms()
        logger.info(
            "pms_inventory_update_applied",
            success=result.success,
            updated_rooms=result.updated_rooms,
        )
