"""
Unit tests for the inventory sync job entry points.
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest

from hotel_inventory.jobs import sync_inventory as job


@pytest.mark.unit
@patch("hotel_inventory.jobs.sync_inventory.ReconciliationEngine")
def test_run_inventory_sync_passes_cancel_event(mock_engine_cls: MagicMock) -> None:
    adapter = MagicMock()
    cancel_event = threading.Event()

    job.run_inventory_sync(adapter, cancel_event)

    mock_engine_cls.assert_called_once_with(job.engine, adapter)
    mock_engine_cls.return_value.sync_inventory_from_pms.assert_called_once_with(cancel_event)


@pytest.mark.unit
@patch("hotel_inventory.jobs.sync_inventory.BackgroundScheduler")
def test_start_scheduler_registers_single_instance_job(mock_scheduler_cls: MagicMock) -> None:
    adapter = MagicMock()
    cancel_event = threading.Event()

    scheduler = job.start_scheduler(adapter, 300, cancel_event)

    assert scheduler is mock_scheduler_cls.return_value
    args, kwargs = scheduler.add_job.call_args
    assert args == (job.run_inventory_sync, "interval")
    assert kwargs["seconds"] == 300
    assert kwargs["id"] == job.SYNC_JOB_ID
    assert kwargs["max_instances"] == 1
    assert kwargs["kwargs"] == {"adapter": adapter, "cancel_event": cancel_event}
    scheduler.start.assert_called_once_with()


@pytest.mark.unit
@pytest.mark.parametrize("success, exit_code", [(True, 0), (False, 1)])
@patch("hotel_inventory.jobs.sync_inventory.build_pms_adapter")
@patch("hotel_inventory.jobs.sync_inventory.run_inventory_sync")
def test_main_exit_code(
    mock_run: MagicMock, _mock_build: MagicMock, success: bool, exit_code: int
) -> None:
    mock_run.return_value = MagicMock(success=success)

    with pytest.raises(SystemExit) as exc_info:
        job.main()

    assert exc_info.value.code == exit_code
