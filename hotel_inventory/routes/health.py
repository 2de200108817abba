"""
Health and readiness check endpoints for Kubernetes probes.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hotel_inventory.db.engine import check_engine_health
from hotel_inventory.dependencies import get_pms_adapter
from hotel_inventory.pms.base import PMSAdapter

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness probe endpoint.

    Example:
        >>> GET /health
        {"status": "ok"}
    """
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(adapter: PMSAdapter = Depends(get_pms_adapter)) -> JSONResponse:
    """
    Readiness probe endpoint.

    The database is required for traffic; an unreachable PMS is reported but
    does not fail readiness.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok", "pms": "ok"}}
    """
    checks: dict[str, Any] = {}

    checks["pms"] = "ok" if adapter.is_connected() else "unreachable"
    if checks["pms"] != "ok":
        logger.warning("readiness_pms_unreachable", pms=adapter.name)

    if check_engine_health():
        checks["database"] = "ok"
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", reason="database_not_accessible")
    checks["database"] = "failed"
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "checks": checks},
    )
