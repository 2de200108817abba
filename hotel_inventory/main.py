# hotel_inventory/main.py

import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotel_inventory.config import (
    ALLOWED_ORIGINS,
    INVENTORY_SYNC_INTERVAL_SECONDS,
    NOTIFY_CHANNEL,
    REDIS_URL,
)
from hotel_inventory.jobs.sync_inventory import start_scheduler
from hotel_inventory.logging_config import setup_logging
from hotel_inventory.middleware import RequestIDMiddleware
from hotel_inventory.pms.factory import build_pms_adapter
from hotel_inventory.routes.availability import router as availability_router
from hotel_inventory.routes.bookings import router as bookings_router
from hotel_inventory.routes.health import router as health_router
from hotel_inventory.routes.metrics import router as metrics_router
from hotel_inventory.routes.pms_admin import router as pms_admin_router
from hotel_inventory.routes.room_blocks import router as room_blocks_router
from hotel_inventory.routes.rooms import router as rooms_router
from hotel_inventory.routes.webhook import router as webhook_router
from hotel_inventory.services.notifier import ChangeNotifier

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the PMS adapter, notifier and optional sync scheduler for this process."""
    logger.info("application_starting")

    app.state.pms_adapter = build_pms_adapter()
    app.state.notifier = ChangeNotifier(redis_url=REDIS_URL, channel=NOTIFY_CHANNEL)
    app.state.sync_cancel_event = threading.Event()

    scheduler: Optional[BackgroundScheduler] = None
    if INVENTORY_SYNC_INTERVAL_SECONDS > 0:
        scheduler = start_scheduler(
            app.state.pms_adapter,
            INVENTORY_SYNC_INTERVAL_SECONDS,
            app.state.sync_cancel_event,
        )

    logger.info("application_ready", notifications_enabled=app.state.notifier.enabled)
    yield

    app.state.sync_cancel_event.set()
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    app.state.notifier.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Hotel Inventory API",
    description="Room availability, conflict-free booking and PMS reconciliation",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(availability_router, tags=["Availability"])
app.include_router(rooms_router, tags=["Rooms"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(room_blocks_router, tags=["Room Blocks"])
app.include_router(pms_admin_router, tags=["PMS"])
app.include_router(webhook_router, tags=["Webhooks"])
