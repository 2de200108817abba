"""
Unit tests for the transaction() helper's error translation.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from hotel_inventory.db.engine import transaction
from hotel_inventory.errors import RoomNotFound, TransientStorageError


@pytest.mark.unit
def test_transaction_yields_connection() -> None:
    db_engine = MagicMock()

    with transaction(db_engine) as conn:
        assert conn is db_engine.begin.return_value.__enter__.return_value


@pytest.mark.unit
def test_transaction_maps_operational_error_to_transient() -> None:
    db_engine = MagicMock()
    db_engine.begin.side_effect = OperationalError("connect", {}, Exception("server closed"))

    with pytest.raises(TransientStorageError, match="server closed"):
        with transaction(db_engine):
            pass


@pytest.mark.unit
def test_transaction_passes_domain_errors_through() -> None:
    db_engine = MagicMock()

    with pytest.raises(RoomNotFound):
        with transaction(db_engine):
            raise RoomNotFound("101")
