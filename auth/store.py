"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as travel/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The credential columns are read back only into the Credential dataclass;
  nothing in this module serializes them.

Failure mapping:
  IntegrityError on insert        -> EmailTaken (UNIQUE(email) fired; covers
                                     two concurrent registrations for one email)
  OperationalError/InterfaceError -> StorageUnavailable (via core.db.storage_guard)

Layer rule: no imports from api/, travel/, or cache/.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Credential, User
from core.db import make_engine, storage_guard
from core.errors import EmailTaken, StorageUnavailable

_DEFAULT_DB_URL = "sqlite:///travelglobe.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("email", String(255), nullable=False, unique=True),  # lowercased + trimmed
    Column("salt", String(64), nullable=False),  # hex, 16 bytes
    Column("password_hash", String(128), nullable=False),  # hex, 64 bytes
    Column("display_name", Text),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore()
        user = store.create_user(User(email="a@x.com", credential=hash_password("secret1")))
        same = store.get_by_email("A@x.com ")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        with storage_guard("initialize user schema"):
            _metadata.create_all(self.engine)

    @contextmanager
    def _connect(self, action: str) -> Iterator[Connection]:
        with storage_guard(action), self.engine.connect() as conn:
            yield conn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by the health check."""
        try:
            with self._connect("ping") as conn:
                conn.execute(text("SELECT 1"))
        except StorageUnavailable:
            return False
        return True

    def create_user(self, user: User) -> User:
        """Insert a new user and return it with id and created_at filled in.

        The email is normalized before insert. Raises EmailTaken if the UNIQUE
        constraint fires.
        """
        user_id = uuid.uuid4().hex
        created_at = _now_iso()
        email = normalize_email(user.email)
        try:
            with self._connect("create user") as conn:
                conn.execute(
                    _users.insert().values(
                        id=user_id,
                        email=email,
                        salt=user.credential.salt,
                        password_hash=user.credential.hash,
                        display_name=user.display_name,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise EmailTaken() from exc
        return User(
            id=user_id,
            email=email,
            credential=user.credential,
            display_name=user.display_name,
            created_at=created_at,
        )

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive via normalization). Returns None if not found."""
        with self._connect("find user by email") as conn:
            row = conn.execute(_users.select().where(_users.c.email == normalize_email(email))).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self._connect("find user by id") as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        credential=Credential(salt=row.salt, hash=row.password_hash),
        display_name=row.display_name,
        created_at=row.created_at,
    )
