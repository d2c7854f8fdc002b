"""
auth/passwords.py -- Salted password hashing (PBKDF2-HMAC-SHA512).

Each call to hash_password() draws a fresh 16-byte salt from `secrets`, so no
two users ever share a salt even when they share a password. The derived key
is 64 bytes after 100,000 iterations; both salt and key are stored as hex.

verify_password() re-derives with the stored salt and compares with
hmac.compare_digest, which runs in constant time and returns False when the
lengths differ. A stored salt or hash that is not valid hex raises ValueError
-- that is corrupted data, not a wrong password, and must not be masked.

DUMMY_CREDENTIAL lets the login flow run the KDF even when the email is
unknown, so response time does not reveal whether an account exists.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from auth.models import Credential

SALT_BYTES = 16
KEY_BYTES = 64
ITERATIONS = 100_000
_DIGEST = "sha512"


def _derive(plain: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(_DIGEST, plain.encode("utf-8"), salt, ITERATIONS, dklen=KEY_BYTES)


def hash_password(plain: str) -> Credential:
    """Return a fresh salt and the derived key for the given plaintext."""
    salt = secrets.token_bytes(SALT_BYTES)
    return Credential(salt=salt.hex(), hash=_derive(plain, salt).hex())


def verify_password(plain: str, salt: str, hashed: str) -> bool:
    """Return True if the plaintext derives to the stored hash under the stored salt."""
    expected = bytes.fromhex(hashed)
    derived = _derive(plain, bytes.fromhex(salt))
    return hmac.compare_digest(expected, derived)


# Computed once at import so the first unknown-email login is not measurably
# faster than later ones.
DUMMY_CREDENTIAL: Credential = hash_password("travelglobe_timing_dummy")
