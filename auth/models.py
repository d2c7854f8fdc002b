"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work; api/models.py owns the HTTP shape.

Layer rule: no imports from api/, travel/, or cache/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Credential:
    """Hex-encoded PBKDF2 salt and derived key. Never leaves the auth layer."""

    salt: str
    hash: str


@dataclass
class User:
    """A registered traveller.

    id is an opaque UUID4 hex string assigned by the store at creation and
    never changes. email is stored trimmed and lowercased; the store enforces
    uniqueness on it.
    """

    email: str
    credential: Credential
    id: str | None = None
    display_name: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims recovered from a verified session token."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
