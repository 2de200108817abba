"""
Operator endpoints for PMS reconciliation.

Both endpoints require ``Authorization: Bearer <CRON_SECRET>``.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException

from hotel_inventory.dependencies import get_reconciliation_engine, require_cron_secret
from hotel_inventory.errors import InventoryError
from hotel_inventory.routes._helpers import raise_http_error
from hotel_inventory.schemas.pms import ManualSyncPayload
from hotel_inventory.services.reconciliation import ReconciliationEngine

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/cron/sync-inventory", dependencies=[Depends(require_cron_secret)])
def cron_sync_inventory(
    reconciliation: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> dict[str, Any]:
    """
    Scheduled inventory reconciliation, called by an external cron.

    Returns:
        dict: success flag, timestamp and per-run stats
    """
    try:
        logger.info("cron_sync_started")
        result = reconciliation.sync_inventory_from_pms()
        return {
            "success": result.success,
            "timestamp": result.timestamp.isoformat(),
            "stats": {
                "inventory_count": result.inventory_count,
                "updated_rooms": result.updated_rooms,
                "unknown_rooms": result.unknown_rooms,
                "error_count": len(result.errors),
                "errors": result.errors,
            },
        }
    except Exception as e:
        logger.exception("cron_sync_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Sync failed")


@router.post("/admin/pms/manual-sync", dependencies=[Depends(require_cron_secret)])
def manual_sync(
    payload: ManualSyncPayload,
    reconciliation: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> dict[str, Any]:
    """
    Run one PMS operation on demand.

    Actions:
        sync_inventory: full inbound reconciliation
        push_booking: outbound push of ``booking_id`` (with retries)
        room_status: compare the PMS status of ``room_number`` with the local one
        health_check: PMS connectivity probe
    """
    try:
        logger.info("manual_sync_requested", action=payload.action)

        if payload.action == "sync_inventory":
            return reconciliation.sync_inventory_from_pms().model_dump(mode="json")

        if payload.action == "push_booking":
            if payload.booking_id is None:
                raise HTTPException(
                    status_code=400, detail="booking_id required for push_booking action"
                )
            return reconciliation.push_booking_to_pms(payload.booking_id).model_dump(mode="json")

        if payload.action == "room_status":
            if not payload.room_number:
                raise HTTPException(
                    status_code=400, detail="room_number required for room_status action"
                )
            return reconciliation.check_room_status(payload.room_number)

        return {
            "connected": reconciliation.check_connection(),
            "pms_type": reconciliation.adapter.name,
        }

    except HTTPException:
        raise
    except InventoryError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception("manual_sync_failed", action=payload.action, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
