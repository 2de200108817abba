from unittest.mock import patch

import pytest

from hotel_inventory.pms.factory import build_pms_adapter
from hotel_inventory.pms.http import HttpPMSAdapter
from hotel_inventory.pms.mock import MockPMSAdapter


@pytest.mark.unit
def test_builds_mock_adapter() -> None:
    with patch("hotel_inventory.pms.factory.config.PMS_ERROR_RATE", 25.0):
        adapter = build_pms_adapter("mock")

    assert isinstance(adapter, MockPMSAdapter)
    assert adapter.error_rate == 25.0


@pytest.mark.unit
def test_builds_http_adapter() -> None:
    with patch("hotel_inventory.pms.factory.config.PMS_BASE_URL", "https://pms.example.com"):
        adapter = build_pms_adapter("HTTP")

    assert isinstance(adapter, HttpPMSAdapter)


@pytest.mark.unit
def test_http_adapter_requires_base_url() -> None:
    with patch("hotel_inventory.pms.factory.config.PMS_BASE_URL", None):
        with pytest.raises(ValueError):
            build_pms_adapter("http")


@pytest.mark.unit
def test_unknown_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported PMS_TYPE"):
        build_pms_adapter("opera")


@pytest.mark.unit
def test_defaults_to_configured_type() -> None:
    with patch("hotel_inventory.pms.factory.config.PMS_TYPE", "mock"):
        assert isinstance(build_pms_adapter(), MockPMSAdapter)
