"""
Reconciliation between local inventory and the PMS.

Inbound: pull the PMS inventory snapshot and correct local room status.
Outbound: push confirmed bookings (bounded retry, idempotent on
pms_booking_id) and propagate cancellations.

Every PMS interaction leaves exactly one SyncLogEntry describing its outcome.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

import structlog
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from hotel_inventory.config import PMS_PUSH_BACKOFF_SECONDS, PMS_PUSH_MAX_RETRIES
from hotel_inventory.db.engine import transaction
from hotel_inventory.db.readers.bookings import get_booking, get_booking_for_push
from hotel_inventory.db.readers.rooms import get_room_by_number
from hotel_inventory.db.writers.bookings import set_pms_booking_id
from hotel_inventory.db.writers.rooms import update_room_status
from hotel_inventory.db.writers.sync_logs import insert_sync_log
from hotel_inventory.errors import (
    BookingNotFound,
    BookingNotPushable,
    InventoryError,
    PMSBookingNotFound,
    PMSPushFailed,
    RoomNotFound,
)
from hotel_inventory.metrics import pms_calls, pms_latency, pms_push_retries, rooms_reconciled
from hotel_inventory.models.bookings import BookingStatus
from hotel_inventory.models.sync_logs import SyncAction, SyncDirection, SyncOutcome
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.pms.types import (
    InventoryItem,
    PMSBookingData,
    PMSBookingResponse,
    SyncInventoryResult,
)
from hotel_inventory.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

# A booking in one of these states must not exist in the PMS
UNPUSHABLE_STATUSES = (BookingStatus.CANCELLED, BookingStatus.CHECKED_OUT)


def booking_to_pms_data(row: Row[Any]) -> PMSBookingData:
    """Transform a joined booking/guest/room row into the outbound payload."""
    return PMSBookingData(
        booking_reference=row.booking_reference,
        guest_name=row.guest_name,
        email=row.guest_email,
        phone=row.guest_phone,
        check_in=row.check_in,
        check_out=row.check_out,
        room_type=getattr(row.room_type, "value", row.room_type),
        room_number=row.room_number,
        number_of_guests=row.number_of_guests,
        total_amount=row.total_amount,
        special_requests=row.special_requests,
    )


def _status_value(status: Any) -> str:
    return str(getattr(status, "value", status))


class ReconciliationEngine:
    """
    Drives PMS synchronization for one adapter.

    Args:
        engine: SQLAlchemy engine
        adapter: PMS adapter selected at startup
        sleep: Backoff sleep function (tests inject a recorder)
        max_retries: Retries after the first failed push attempt
        backoff_base_seconds: First retry delay; doubles on each retry
    """

    def __init__(
        self,
        engine: Engine,
        adapter: PMSAdapter,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int = PMS_PUSH_MAX_RETRIES,
        backoff_base_seconds: float = PMS_PUSH_BACKOFF_SECONDS,
    ):
        self.engine = engine
        self.adapter = adapter
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (1s, 2s, 4s with defaults)."""
        return float(self.backoff_base_seconds * (2**attempt))

    def _record(
        self,
        action: SyncAction,
        direction: SyncDirection,
        outcome: SyncOutcome,
        payload: Optional[dict[str, Any]] = None,
        booking_id: Optional[UUID] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Append a sync log entry in its own transaction; a failed write is logged, not raised."""
        try:
            with transaction(self.engine) as conn:
                insert_sync_log(
                    conn,
                    action=action,
                    direction=direction,
                    outcome=outcome,
                    payload=payload,
                    booking_id=booking_id,
                    error_message=error_message,
                )
        except (InventoryError, SQLAlchemyError):
            logger.exception(
                "sync_log_write_failed",
                action=action.value,
                outcome=outcome.value,
                booking_id=str(booking_id) if booking_id else None,
            )

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def sync_inventory_from_pms(
        self, cancel_event: Optional[threading.Event] = None
    ) -> SyncInventoryResult:
        """
        Pull the PMS inventory snapshot and correct local room status.

        Each room is applied in its own short transaction. Rooms the PMS knows
        but the local database does not are reported, never created. When
        ``cancel_event`` is set the run stops before the next room and still
        writes its log entry.

        A PMS failure is returned as an unsuccessful result. Anything else
        that aborts the run is logged as a failed run and re-raised.

        Returns:
            SyncInventoryResult; ``success`` is True only if no errors occurred
        """
        logger.info("inventory_sync_started", pms=self.adapter.name)
        started_at = utc_now()

        try:
            with pms_latency.labels(operation="sync_inventory").time():
                inventory = self.adapter.sync_inventory()
        except InventoryError as e:
            self._record_inventory_fetch_failure(e, started_at)
            return SyncInventoryResult(
                success=False, errors=[f"Inventory sync failed: {e}"], timestamp=started_at
            )
        except Exception as e:
            self._record_inventory_fetch_failure(e, started_at)
            raise

        pms_calls.labels(operation="sync_inventory", outcome="success").inc()

        errors: list[str] = []
        unknown_rooms: list[str] = []
        updated_rooms = 0
        cancelled = False

        try:
            for item in inventory:
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    logger.warning("inventory_sync_cancelled", processed=updated_rooms)
                    break

                try:
                    if self._apply_room(item):
                        updated_rooms += 1
                except LookupError:
                    unknown_rooms.append(item.room_number)
                    errors.append(f"Room {item.room_number} exists in PMS but not in local database")
                    logger.warning("inventory_sync_unknown_room", room_number=item.room_number)
                except (InventoryError, SQLAlchemyError) as e:
                    error_message = f"Failed to update room {item.room_number}: {e}"
                    errors.append(error_message)
                    logger.error(
                        "inventory_sync_room_failed", room_number=item.room_number, error=str(e)
                    )
        except Exception as e:
            logger.exception("inventory_sync_aborted", updated_rooms=updated_rooms, error=str(e))
            self._record(
                SyncAction.SYNC_INVENTORY,
                SyncDirection.INBOUND,
                SyncOutcome.FAILED,
                payload={
                    "inventory_count": len(inventory),
                    "updated_rooms": updated_rooms,
                    "unknown_rooms": unknown_rooms,
                    "error": str(e),
                    "timestamp": started_at,
                },
                error_message=f"Inventory sync aborted: {e}",
            )
            raise

        result = SyncInventoryResult(
            success=not errors,
            inventory_count=len(inventory),
            updated_rooms=updated_rooms,
            unknown_rooms=unknown_rooms,
            errors=errors,
            cancelled=cancelled,
            timestamp=started_at,
        )

        self._record(
            SyncAction.SYNC_INVENTORY,
            SyncDirection.INBOUND,
            SyncOutcome.SUCCESS if result.success else SyncOutcome.FAILED,
            payload={
                "inventory_count": result.inventory_count,
                "updated_rooms": updated_rooms,
                "unknown_rooms": unknown_rooms,
                "cancelled": cancelled,
                "timestamp": started_at,
            },
            error_message="; ".join(errors) if errors else None,
        )

        logger.info(
            "inventory_sync_completed",
            inventory_count=result.inventory_count,
            updated_rooms=updated_rooms,
            errors=len(errors),
            cancelled=cancelled,
        )
        return result

    def _record_inventory_fetch_failure(self, error: Exception, started_at: datetime) -> None:
        pms_calls.labels(operation="sync_inventory", outcome="error").inc()
        if isinstance(error, InventoryError):
            logger.error("inventory_sync_failed", error=str(error))
        else:
            logger.exception("inventory_sync_failed", error=str(error))
        self._record(
            SyncAction.SYNC_INVENTORY,
            SyncDirection.INBOUND,
            SyncOutcome.FAILED,
            payload={"error": str(error), "timestamp": started_at},
            error_message=f"Inventory sync failed: {error}",
        )

    def _apply_room(self, item: InventoryItem) -> bool:
        """
        Bring one local room's status in line with the PMS.

        Raises:
            LookupError: The room number is unknown locally
        """
        with transaction(self.engine) as conn:
            room = get_room_by_number(conn, item.room_number)
            if room is None:
                raise LookupError(item.room_number)

            changed = update_room_status(conn, room.id, item.status)

        if changed:
            rooms_reconciled.inc()
            logger.info(
                "room_status_reconciled",
                room_number=item.room_number,
                previous_status=room.status.value,
                status=item.status.value,
            )
        return changed

    def check_room_status(self, room_number: str) -> dict[str, Any]:
        """
        Ask the PMS for one room's status and compare it with the local one.

        Local state is not modified; inventory sync owns corrections.

        Raises:
            RoomNotFound: The room number is unknown locally
            InventoryError: The PMS call failed (logged, not retried)
        """
        with self.engine.connect() as conn:
            room = get_room_by_number(conn, room_number)
        if room is None:
            raise RoomNotFound(room_number)

        local_status = _status_value(room.status)
        try:
            with pms_latency.labels(operation="get_room_status").time():
                pms_status = self.adapter.get_room_status(room_number)
        except InventoryError as e:
            pms_calls.labels(operation="get_room_status", outcome="error").inc()
            logger.error("pms_room_status_failed", room_number=room_number, error=str(e))
            self._record(
                SyncAction.ROOM_STATUS,
                SyncDirection.INBOUND,
                SyncOutcome.FAILED,
                payload={"room_number": room_number, "local_status": local_status, "error": str(e)},
                error_message=str(e),
            )
            raise

        pms_calls.labels(operation="get_room_status", outcome="success").inc()
        result = {
            "room_number": room_number,
            "pms_status": pms_status.value,
            "local_status": local_status,
            "in_sync": pms_status.value == local_status,
        }
        self._record(
            SyncAction.ROOM_STATUS, SyncDirection.INBOUND, SyncOutcome.SUCCESS, payload=result
        )
        logger.info("pms_room_status_checked", **result)
        return result

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def _load_for_push(self, booking_id: UUID) -> Row[Any]:
        with self.engine.connect() as conn:
            row = get_booking_for_push(conn, booking_id)
        if row is None:
            raise BookingNotFound(booking_id)
        return row

    def push_booking_to_pms(self, booking_id: UUID) -> PMSBookingResponse:
        """
        Create the booking in the PMS unless it already carries a PMS id.

        Business rejections and transport failures are retried with
        exponential backoff. The local booking is never rolled back when the
        push ultimately fails. A cancelled or checked-out booking is never
        pushed; one cancelled while its push was in flight is withdrawn from
        the PMS again.

        Raises:
            BookingNotFound: Unknown booking
            BookingNotPushable: The booking is cancelled or checked out
            PMSPushFailed: All attempts failed
        """
        row = self._load_for_push(booking_id)
        if row.pms_booking_id:
            logger.info(
                "pms_push_skipped", booking_id=str(booking_id), pms_booking_id=row.pms_booking_id
            )
            return PMSBookingResponse(success=True, pms_booking_id=row.pms_booking_id)

        if row.status in UNPUSHABLE_STATUSES:
            logger.warning(
                "pms_push_refused", booking_id=str(booking_id), status=_status_value(row.status)
            )
            raise BookingNotPushable(booking_id, _status_value(row.status))

        data = booking_to_pms_data(row)
        errors: list[str] = []
        attempts = 0

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                delay = self.backoff_delay(attempt - 1)
                pms_push_retries.inc()
                logger.warning(
                    "pms_push_retry",
                    booking_id=str(booking_id),
                    attempt=attempt + 1,
                    delay_seconds=delay,
                    errors=errors,
                )
                self._sleep(delay)

                # Another worker may have pushed it, or it was cancelled, while we were backing off
                row = self._load_for_push(booking_id)
                if row.pms_booking_id:
                    return PMSBookingResponse(success=True, pms_booking_id=row.pms_booking_id)
                if row.status in UNPUSHABLE_STATUSES:
                    self._record_push_failure(
                        booking_id, data, errors, attempts, stopped_because=_status_value(row.status)
                    )
                    raise BookingNotPushable(booking_id, _status_value(row.status))

            attempts = attempt + 1
            try:
                with pms_latency.labels(operation="push_booking").time():
                    response = self.adapter.push_booking(data)
            except InventoryError as e:
                pms_calls.labels(operation="push_booking", outcome="error").inc()
                errors = [str(e)]
                logger.error("pms_push_error", booking_id=str(booking_id), error=str(e))
                continue

            if not response.success:
                pms_calls.labels(operation="push_booking", outcome="rejected").inc()
                errors = response.errors or ["PMS rejected the booking"]
                logger.warning("pms_push_rejected", booking_id=str(booking_id), errors=errors)
                continue

            if not response.pms_booking_id:
                # Retrying could create a second PMS booking we cannot see
                pms_calls.labels(operation="push_booking", outcome="error").inc()
                errors = ["PMS accepted the booking without returning an id"]
                logger.error("pms_push_missing_id", booking_id=str(booking_id))
                break

            pms_calls.labels(operation="push_booking", outcome="success").inc()
            return self._store_push_result(
                booking_id, data, response.pms_booking_id, response, attempt
            )

        self._record_push_failure(booking_id, data, errors, attempts)
        logger.error("pms_push_failed", booking_id=str(booking_id), attempts=attempts, errors=errors)
        raise PMSPushFailed(booking_id, attempts, errors)

    def _record_push_failure(
        self,
        booking_id: UUID,
        data: PMSBookingData,
        errors: list[str],
        attempts: int,
        stopped_because: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "pms_data": data.model_dump(mode="json"),
            "errors": errors,
            "attempts": attempts,
        }
        error_message = "; ".join(errors)
        if stopped_because is not None:
            payload["stopped_because"] = stopped_because
            error_message = f"Push stopped: booking is {stopped_because}; {error_message}"
            logger.warning(
                "pms_push_stopped",
                booking_id=str(booking_id),
                status=stopped_because,
                attempts=attempts,
            )
        self._record(
            SyncAction.PUSH_BOOKING,
            SyncDirection.OUTBOUND,
            SyncOutcome.FAILED,
            payload=payload,
            booking_id=booking_id,
            error_message=error_message,
        )

    def _store_push_result(
        self,
        booking_id: UUID,
        data: PMSBookingData,
        pms_booking_id: str,
        response: PMSBookingResponse,
        retry_count: int,
    ) -> PMSBookingResponse:
        """
        Persist the external id (write-once) together with its success log entry.

        If the local write fails after the PMS accepted the booking, a failed
        entry carrying the PMS id is logged before the error propagates, so the
        upstream booking can be matched by hand.
        """
        try:
            with transaction(self.engine) as conn:
                stored = set_pms_booking_id(conn, booking_id, pms_booking_id)
                current = get_booking(conn, booking_id)
                if current is None:
                    raise BookingNotFound(booking_id)

                if stored:
                    insert_sync_log(
                        conn,
                        action=SyncAction.PUSH_BOOKING,
                        direction=SyncDirection.OUTBOUND,
                        outcome=SyncOutcome.SUCCESS,
                        payload={
                            "pms_data": data.model_dump(mode="json"),
                            "response": response.model_dump(mode="json"),
                            "retry_count": retry_count,
                        },
                        booking_id=booking_id,
                    )
        except (InventoryError, SQLAlchemyError) as e:
            logger.error(
                "pms_push_store_failed",
                booking_id=str(booking_id),
                pms_booking_id=pms_booking_id,
                error=str(e),
            )
            self._record(
                SyncAction.PUSH_BOOKING,
                SyncDirection.OUTBOUND,
                SyncOutcome.FAILED,
                payload={
                    "pms_data": data.model_dump(mode="json"),
                    "pms_booking_id": pms_booking_id,
                    "confirmation_number": response.confirmation_number,
                    "retry_count": retry_count,
                    "error": str(e),
                },
                booking_id=booking_id,
                error_message=f"PMS accepted booking as {pms_booking_id} but storing the id failed: {e}",
            )
            raise

        if not stored:
            # A concurrent push won the race; withdraw our duplicate from the PMS
            logger.warning(
                "pms_push_duplicate",
                booking_id=str(booking_id),
                kept_pms_booking_id=current.pms_booking_id,
                duplicate_pms_booking_id=pms_booking_id,
            )
            self._withdraw_duplicate(booking_id, pms_booking_id, current.pms_booking_id)
            return PMSBookingResponse(success=True, pms_booking_id=current.pms_booking_id)

        logger.info(
            "pms_push_succeeded",
            booking_id=str(booking_id),
            pms_booking_id=pms_booking_id,
            retry_count=retry_count,
        )

        if current.status == BookingStatus.CANCELLED:
            # Cancelled locally while the push was in flight
            logger.warning(
                "pms_push_raced_cancellation", booking_id=str(booking_id), pms_booking_id=pms_booking_id
            )
            try:
                self.cancel_booking_in_pms(booking_id)
            except InventoryError as e:
                logger.error(
                    "pms_push_withdraw_failed",
                    booking_id=str(booking_id),
                    pms_booking_id=pms_booking_id,
                    error=str(e),
                )
        return response

    def _withdraw_duplicate(
        self, booking_id: UUID, duplicate_id: str, kept_id: Optional[str]
    ) -> None:
        try:
            self.adapter.cancel_booking(duplicate_id)
            outcome, error_message = SyncOutcome.SUCCESS, None
        except PMSBookingNotFound:
            outcome, error_message = SyncOutcome.SUCCESS, None
        except InventoryError as e:
            outcome, error_message = SyncOutcome.FAILED, str(e)
            logger.error(
                "pms_duplicate_withdraw_failed",
                booking_id=str(booking_id),
                pms_booking_id=duplicate_id,
                error=str(e),
            )

        self._record(
            SyncAction.CANCEL_BOOKING,
            SyncDirection.OUTBOUND,
            outcome,
            payload={"pms_booking_id": duplicate_id, "kept_pms_booking_id": kept_id, "duplicate": True},
            booking_id=booking_id,
            error_message=error_message,
        )

    def cancel_booking_in_pms(self, booking_id: UUID) -> bool:
        """
        Propagate a local cancellation to the PMS.

        Returns:
            bool: True if the PMS now has no active booking for it, False when
            the booking was never pushed (nothing to cancel)

        Raises:
            BookingNotFound: Unknown booking
            InventoryError: The PMS call failed (logged, not retried)
        """
        with self.engine.connect() as conn:
            booking = get_booking(conn, booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)

        if not booking.pms_booking_id:
            logger.warning("pms_cancel_skipped_no_pms_id", booking_id=str(booking_id))
            return False

        pms_booking_id = booking.pms_booking_id
        try:
            with pms_latency.labels(operation="cancel_booking").time():
                self.adapter.cancel_booking(pms_booking_id)
        except PMSBookingNotFound:
            pms_calls.labels(operation="cancel_booking", outcome="rejected").inc()
            logger.info(
                "pms_cancel_already_gone", booking_id=str(booking_id), pms_booking_id=pms_booking_id
            )
        except InventoryError as e:
            pms_calls.labels(operation="cancel_booking", outcome="error").inc()
            logger.error("pms_cancel_failed", booking_id=str(booking_id), error=str(e))
            self._record(
                SyncAction.CANCEL_BOOKING,
                SyncDirection.OUTBOUND,
                SyncOutcome.FAILED,
                payload={"pms_booking_id": pms_booking_id, "error": str(e)},
                booking_id=booking_id,
                error_message=str(e),
            )
            raise
        else:
            pms_calls.labels(operation="cancel_booking", outcome="success").inc()

        self._record(
            SyncAction.CANCEL_BOOKING,
            SyncDirection.OUTBOUND,
            SyncOutcome.SUCCESS,
            payload={"pms_booking_id": pms_booking_id},
            booking_id=booking_id,
        )
        logger.info("pms_cancel_succeeded", booking_id=str(booking_id), pms_booking_id=pms_booking_id)
        return True

    def check_connection(self) -> bool:
        """Probe the PMS; never raises."""
        connected = self.adapter.is_connected()
        logger.info("pms_health_checked", pms=self.adapter.name, connected=connected)
        return connected
