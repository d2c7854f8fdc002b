"""
core/db.py -- Engine construction and storage-failure mapping shared by stores.

Both auth/store.py and travel/store.py build their engines here so SQLite
connections get the same thread and journal settings, and so driver-level
connectivity failures map to StorageUnavailable in one place.

Layer rule: core/ is the kernel. No imports from api/, auth/, travel/, cache/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError

from core.errors import StorageUnavailable

logger = logging.getLogger("travelglobe.db")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


@contextmanager
def storage_guard(action: str) -> Iterator[None]:
    """Translate "database unreachable" driver errors into StorageUnavailable.

    IntegrityError and programming errors pass through untouched -- those are
    answers from a working database, not an outage.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("Storage unavailable during %s: %s", action, exc)
        raise StorageUnavailable(detail=action) from exc
