"""
SQLAlchemy engine singleton with production-ready connection pooling.

Every booking request, sync run and webhook borrows its own connection from
this pool; per-room serialization happens inside PostgreSQL (see
hotel_inventory.db.locks), so the pool is the only process-wide shared object.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError

from hotel_inventory.config import DATABASE_URL
from hotel_inventory.errors import TransientStorageError

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,  # Number of connections to maintain in the pool
    max_overflow=20,  # Additional connections when pool is exhausted
    pool_pre_ping=True,  # Verify connections before using (detect stale connections)
    pool_recycle=3600,  # Recycle connections after 1 hour
    pool_timeout=10,  # Fail fast instead of queueing forever on an exhausted pool
    echo=False,
)


def check_engine_health() -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint before allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@contextmanager
def transaction(db_engine: Engine) -> Iterator[Connection]:
    """
    Open a transaction, translating connection-level failures into
    TransientStorageError so callers can report them as retryable.

    Domain errors raised inside the block pass through untouched after the
    transaction has been rolled back.

    Example:
        >>> with transaction(engine) as conn:
        ...     insert_sync_log(conn, ...)
    """
    try:
        with db_engine.begin() as conn:
            yield conn
    except OperationalError as e:
        raise TransientStorageError(str(e.orig) if e.orig else str(e)) from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise TransientStorageError(str(e.orig) if e.orig else str(e)) from e
        raise
