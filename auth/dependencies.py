"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Tokens arrive as `Authorization: Bearer <token>`. Verification is delegated to
the TokenService on app.state; the user lookup goes to app.state.user_store.

try_get_current_user() is the soft variant (returns None when the caller is
anonymous or presents a bad token).
get_current_user() is the hard variant and raises Unauthorized (401).

Both variants let StorageUnavailable propagate: a store outage must surface as
503, never be mistaken for "not logged in".


Layer rule: no imports from api/, travel/, or cache/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService
from core.errors import AuthError, Unauthorized

logger = logging.getLogger("travelglobe.auth")

_BEARER_SCHEME = "bearer"


def bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, or None if absent.

    The scheme name is matched case-insensitively (RFC 7235).
    """
    scheme, _, token = request.headers.get("Authorization", "").strip().partition(" ")
    if scheme.lower() != _BEARER_SCHEME:
        return None
    return token.strip() or None


def _resolve_user(request: Request, token: str) -> User:
    """Verify the token and load its user. Raises an AuthError subclass on failure."""
    tokens: TokenService = request.app.state.tokens
    user_store: UserStore = request.app.state.user_store

    claims = tokens.verify(token)
    user = user_store.get_by_id(claims.user_id)
    if user is None:
        raise Unauthorized(detail=f"No user with id {claims.user_id}.")
    return user


def try_get_current_user(request: Request) -> User | None:
    """Attempt to authenticate the request. Returns None when anonymous or invalid."""
    token = bearer_token(request)
    if token is None:
        return None
    try:
        user = _resolve_user(request, token)
    except AuthError as exc:
        logger.info("Optional auth ignored bad token on %s: %s", request.url.path, exc.detail or exc.message)
        return None
    return user


def get_current_user(request: Request) -> User:
    """Require authentication. Raises Unauthorized if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    token = bearer_token(request)
    if token is None:
        logger.info("Rejected %s: no bearer token", request.url.path)
        raise Unauthorized(detail="Missing bearer token.")
    try:
        user = _resolve_user(request, token)
    except AuthError as exc:
        logger.info("Rejected %s: %s", request.url.path, exc.detail or exc.message)
        # Uniform message to the caller regardless of the specific reason.
        raise Unauthorized(detail=exc.detail) from exc
    return user
