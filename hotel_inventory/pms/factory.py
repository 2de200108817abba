"""Select the PMS adapter implementation once at startup."""

from __future__ import annotations

from typing import Optional

import structlog

from hotel_inventory import config
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.pms.http import HttpPMSAdapter
from hotel_inventory.pms.mock import MockPMSAdapter

logger = structlog.get_logger(__name__)

SUPPORTED_PMS_TYPES = ("mock", "http")


def build_pms_adapter(pms_type: Optional[str] = None) -> PMSAdapter:
    """
    Build the adapter configured by PMS_TYPE.

    Args:
        pms_type: Override for config.PMS_TYPE (used by tests and scripts)

    Returns:
        A concrete PMSAdapter

    Raises:
        ValueError: If the PMS type is not supported or its settings are missing
    """
    pms_type = (pms_type or config.PMS_TYPE).lower()

    adapter: PMSAdapter
    if pms_type == "mock":
        adapter = MockPMSAdapter(error_rate=config.PMS_ERROR_RATE)
    elif pms_type == "http":
        adapter = HttpPMSAdapter(
            base_url=config.PMS_BASE_URL or "",
            api_key=config.PMS_API_KEY,
            timeout=config.PMS_TIMEOUT_SECONDS,
        )
    else:
        raise ValueError(
            f"Unsupported PMS_TYPE '{pms_type}'; expected one of {', '.join(SUPPORTED_PMS_TYPES)}"
        )

    logger.info("pms_adapter_selected", pms_type=pms_type)
    return adapter
