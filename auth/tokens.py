"""
auth/tokens.py -- Session token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the user id (sub), email, issued-at and expiry. They are not persisted
       server-side: any process holding the key can verify them without a
       storage round trip, at the cost of no forced revocation before expiry.

  Expiry is checked against an injectable clock rather than jose's internal
       wall clock, so tests can step time forward deterministically. jose is
       still responsible for the signature and the token structure.

  SECRET_KEY and the token lifetime come from core.config.Settings and are
       handed to TokenService by the API lifespan. Nothing in this module
       reads configuration at import time.

Layer rule: no imports from api/, travel/, or cache/. Import from core/
is allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import TokenClaims
from core.errors import ExpiredToken, InvalidToken

logger = logging.getLogger("travelglobe.auth")

ALGORITHM = "HS256"
DEFAULT_EXPIRE_SECONDS = 7 * 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Mints and validates signed, time-bound bearer tokens.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue(user.id, user.email)
        claims = tokens.verify(token)   # raises InvalidToken / ExpiredToken
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key.")
        if expire_seconds <= 0:
            raise ValueError("expire_seconds must be positive.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self._clock = clock

    def issue(self, user_id: str, email: str) -> str:
        """Encode a signed JWT for the given identity, expiring expire_seconds from now."""
        now = self._clock()
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature and expiry; return the embedded claims.

        Pure and synchronous -- no storage or network access.

        Raises:
            InvalidToken: bad signature, malformed token, or missing claims.
            ExpiredToken: the clock has reached the embedded expiry.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidToken(detail=str(exc)) from exc

        user_id = payload.get("sub")
        email = payload.get("email")
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not user_id or not email or not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise InvalidToken(detail="Token is missing required claims.")

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        if self._clock() >= expires_at:
            raise ExpiredToken(detail=f"Token expired at {expires_at.isoformat()}.")

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=expires_at,
        )
