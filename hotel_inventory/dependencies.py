"""
FastAPI dependency injection providers.

The engine is a process-wide pool; the PMS adapter and change notifier are
built once in the application lifespan and kept on ``app.state``. Tests swap
any of them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.engine import Engine

from hotel_inventory import config
from hotel_inventory.db.engine import engine
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.routes._helpers import validate_bearer_or_401
from hotel_inventory.services.inbound_events import InboundEventHandler
from hotel_inventory.services.notifier import ChangeNotifier
from hotel_inventory.services.reconciliation import ReconciliationEngine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> mock_engine = Mock(spec=Engine)
        >>> app.dependency_overrides[get_db_engine] = lambda: mock_engine
    """
    yield engine


def get_pms_adapter(request: Request) -> PMSAdapter:
    """Return the adapter selected at startup (see hotel_inventory.pms.factory)."""
    adapter: PMSAdapter = request.app.state.pms_adapter
    return adapter


def get_notifier(request: Request) -> ChangeNotifier:
    notifier: ChangeNotifier = request.app.state.notifier
    return notifier


def get_reconciliation_engine(
    db_engine: Engine = Depends(get_db_engine),
    adapter: PMSAdapter = Depends(get_pms_adapter),
) -> ReconciliationEngine:
    return ReconciliationEngine(db_engine, adapter)


def get_inbound_event_handler(
    db_engine: Engine = Depends(get_db_engine),
    reconciliation: ReconciliationEngine = Depends(get_reconciliation_engine),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> InboundEventHandler:
    return InboundEventHandler(db_engine, reconciliation, notifier)


def require_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Guard for operator endpoints: ``Authorization: Bearer <CRON_SECRET>``."""
    validate_bearer_or_401(authorization, config.CRON_SECRET)
