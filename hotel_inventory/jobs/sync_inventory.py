"""
One-shot and scheduled inbound inventory reconciliation.

Run once from a system cron or container job:
    python -m hotel_inventory.jobs.sync_inventory
"""

from __future__ import annotations

import sys
import threading
from typing import Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler

from hotel_inventory.db.engine import engine
from hotel_inventory.logging_config import setup_logging
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.pms.factory import build_pms_adapter
from hotel_inventory.pms.types import SyncInventoryResult
from hotel_inventory.services.reconciliation import ReconciliationEngine

logger = structlog.get_logger(__name__)

SYNC_JOB_ID = "inventory_sync"


def run_inventory_sync(
    adapter: PMSAdapter, cancel_event: Optional[threading.Event] = None
) -> SyncInventoryResult:
    return ReconciliationEngine(engine, adapter).sync_inventory_from_pms(cancel_event)


def start_scheduler(
    adapter: PMSAdapter, interval_seconds: int, cancel_event: threading.Event
) -> BackgroundScheduler:
    """
    Start periodic reconciliation in a background thread.

    Overlapping runs are skipped (max_instances=1); setting ``cancel_event``
    stops a running sync before its next room.
    """
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_inventory_sync,
        "interval",
        seconds=interval_seconds,
        id=SYNC_JOB_ID,
        kwargs={"adapter": adapter, "cancel_event": cancel_event},
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("inventory_sync_scheduled", interval_seconds=interval_seconds)
    return scheduler


def main() -> None:
    setup_logging()
    result = run_inventory_sync(build_pms_adapter())
    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
