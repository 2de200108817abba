"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock

import pytest
from fastapi import HTTPException
from sqlalchemy.engine import Engine

from hotel_inventory.dependencies import (
    get_db_engine,
    get_inbound_event_handler,
    get_notifier,
    get_pms_adapter,
    get_reconciliation_engine,
    require_cron_secret,
)
from hotel_inventory.services.inbound_events import InboundEventHandler
from hotel_inventory.services.reconciliation import ReconciliationEngine


def fake_request(**state: object) -> SimpleNamespace:
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_adapter_and_notifier_come_from_app_state() -> None:
    adapter, notifier = MagicMock(), MagicMock()
    request = fake_request(pms_adapter=adapter, notifier=notifier)

    assert get_pms_adapter(request) is adapter  # type: ignore[arg-type]
    assert get_notifier(request) is notifier  # type: ignore[arg-type]


@pytest.mark.unit
def test_reconciliation_and_event_handler_wiring() -> None:
    engine, adapter, notifier = Mock(spec=Engine), MagicMock(), MagicMock()

    reconciliation = get_reconciliation_engine(engine, adapter)
    handler = get_inbound_event_handler(engine, reconciliation, notifier)

    assert isinstance(reconciliation, ReconciliationEngine)
    assert reconciliation.adapter is adapter
    assert isinstance(handler, InboundEventHandler)
    assert handler.reconciliation is reconciliation
    assert handler.notifier is notifier


@pytest.mark.unit
def test_require_cron_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("hotel_inventory.config.CRON_SECRET", "s3cret")

    require_cron_secret("Bearer s3cret")
    with pytest.raises(HTTPException) as exc_info:
        require_cron_secret("Bearer nope")
    assert exc_info.value.status_code == 401


@pytest.mark.unit
def test_require_cron_secret_rejects_everything_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("hotel_inventory.config.CRON_SECRET", "")

    with pytest.raises(HTTPException):
        require_cron_secret("Bearer ")
