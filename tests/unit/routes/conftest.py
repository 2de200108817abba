"""
Route test fixtures.

TestClient is used without its context manager so the lifespan (adapter,
notifier, scheduler) never runs; every app.state-backed dependency is
overridden instead.
"""

from __future__ import annotations

from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from hotel_inventory.dependencies import (
    get_db_engine,
    get_inbound_event_handler,
    get_notifier,
    get_pms_adapter,
    get_reconciliation_engine,
)
from hotel_inventory.main import app


@pytest.fixture
def db_engine() -> MagicMock:
    return MagicMock()


@pytest.fixture
def pms_adapter() -> MagicMock:
    adapter = MagicMock()
    adapter.name = "mock"
    adapter.is_connected.return_value = True
    return adapter


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def reconciliation(pms_adapter: MagicMock) -> MagicMock:
    reconciliation = MagicMock()
    reconciliation.adapter = pms_adapter
    return reconciliation


@pytest.fixture
def event_handler() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(
    db_engine: MagicMock,
    pms_adapter: MagicMock,
    notifier: MagicMock,
    reconciliation: MagicMock,
    event_handler: MagicMock,
) -> Iterator[TestClient]:
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    app.dependency_overrides[get_pms_adapter] = lambda: pms_adapter
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_reconciliation_engine] = lambda: reconciliation
    app.dependency_overrides[get_inbound_event_handler] = lambda: event_handler
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def shared_secrets() -> Iterator[None]:
    """Pin the secrets regardless of any local .env file."""
    with patch("hotel_inventory.config.CRON_SECRET", "test-cron-secret"), patch(
        "hotel_inventory.config.PMS_WEBHOOK_SECRET", "test-webhook-secret"
    ), patch("hotel_inventory.config.PMS_WEBHOOK_ALLOW_UNSIGNED", False):
        yield
