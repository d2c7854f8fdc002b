"""
travel/store.py -- SQLAlchemy Core persistence for visited/wishlist marks.

Pattern: Repository + Data Mapper (same as auth/store.py).

Schema design:
  One row per (user_id, country_code) with a status of "visited" or
  "wishlist". The composite primary key makes "a code belongs to at most one
  of the two sets" a property of the table rather than of the code that
  writes it: moving a code from wishlist to visited is an in-place status
  change, never an insert into one set plus a delete from the other.

Atomicity:
  Each mutation is a single statement -- an upsert (INSERT ... ON CONFLICT DO
  UPDATE) or a status-conditional DELETE -- executed inside one transaction
  that also reads back the post-mutation snapshot. There is no
  read-modify-write cycle in Python, so two concurrent requests for the same
  user and code cannot lose an update or leave the code in both sets.

Idempotence:
  Upserting the status a row already has and deleting a row that is not
  there are both no-ops, so every operation can be repeated safely.

Layer rule: no imports from api/, auth/, or cache/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, PrimaryKeyConstraint, String, Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine

from core.db import make_engine, storage_guard
from travel.models import MarkStatus, TravelState, normalize_country_code

logger = logging.getLogger("travelglobe.travel")

_DEFAULT_DB_URL = "sqlite:///travelglobe.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_marks = Table(
    "travel_marks",
    _metadata,
    Column("user_id", String(32), nullable=False),
    Column("country_code", String(2), nullable=False),  # uppercase ISO-2 shape
    Column("status", String(10), nullable=False),  # MarkStatus value
    Column("updated_at", String(32), nullable=False),
    PrimaryKeyConstraint("user_id", "country_code", name="pk_travel_marks"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TravelStore:
    """Repository for per-user travel marks.

    Usage:
        store = TravelStore()
        state = store.mark_visited(user.id, "fr")     # TravelState(visited=["FR"], wishlist=[])
        state = store.add_to_wishlist(user.id, "FR")  # TravelState(visited=[], wishlist=["FR"])
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        with storage_guard("initialize travel schema"):
            _metadata.create_all(self.engine)

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Connection]:
        """One connection, one transaction: committed on exit, rolled back on error."""
        with storage_guard(action), self.engine.begin() as conn:
            yield conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_state(self, user_id: str) -> TravelState:
        """Return both sets for the user, read in a single transaction."""
        with self._transaction("read travel state") as conn:
            return _snapshot(conn, user_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mark_visited(self, user_id: str, raw_code: str) -> TravelState:
        """None/Wishlisted -> Visited. Removes the code from the wishlist if present."""
        code = normalize_country_code(raw_code)
        return self._set_status(user_id, code, MarkStatus.visited)

    def unmark_visited(self, user_id: str, raw_code: str) -> TravelState:
        """Visited -> None. A wishlisted or unmarked code is left alone."""
        code = normalize_country_code(raw_code)
        return self._clear_status(user_id, code, MarkStatus.visited)

    def add_to_wishlist(self, user_id: str, raw_code: str) -> TravelState:
        """None/Visited -> Wishlisted. Removes the code from visited if present."""
        code = normalize_country_code(raw_code)
        return self._set_status(user_id, code, MarkStatus.wishlist)

    def remove_from_wishlist(self, user_id: str, raw_code: str) -> TravelState:
        """Wishlisted -> None. A visited or unmarked code is left alone."""
        code = normalize_country_code(raw_code)
        return self._clear_status(user_id, code, MarkStatus.wishlist)

    def _set_status(self, user_id: str, code: str, status: MarkStatus) -> TravelState:
        with self._transaction(f"set {status.value} {code}") as conn:
            stmt = self._insert().values(
                user_id=user_id,
                country_code=code,
                status=status.value,
                updated_at=_now_iso(),
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[_marks.c.user_id, _marks.c.country_code],
                set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
            )
            conn.execute(stmt)
            state = _snapshot(conn, user_id)
        logger.debug("User %s: %s -> %s", user_id, code, status.value)
        return state

    def _clear_status(self, user_id: str, code: str, status: MarkStatus) -> TravelState:
        with self._transaction(f"clear {status.value} {code}") as conn:
            conn.execute(
                _marks.delete().where(
                    (_marks.c.user_id == user_id) & (_marks.c.country_code == code) & (_marks.c.status == status.value)
                )
            )
            state = _snapshot(conn, user_id)
        logger.debug("User %s: %s cleared from %s", user_id, code, status.value)
        return state

    def _insert(self):
        """Dialect-specific INSERT that supports ON CONFLICT DO UPDATE."""
        if self.engine.dialect.name == "postgresql":
            return postgresql.insert(_marks)
        return sqlite.insert(_marks)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _snapshot(conn: Connection, user_id: str) -> TravelState:
    rows = conn.execute(
        select(_marks.c.country_code, _marks.c.status)
        .where(_marks.c.user_id == user_id)
        .order_by(_marks.c.country_code)
    ).fetchall()
    visited = [r.country_code for r in rows if r.status == MarkStatus.visited.value]
    wishlist = [r.country_code for r in rows if r.status == MarkStatus.wishlist.value]
    return TravelState(visited=visited, wishlist=wishlist)
