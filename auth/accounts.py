"""
auth/accounts.py -- Registration and password login flows.

Both flows raise typed errors from core.errors; the route layer turns them
into HTTP responses through the shared exception handler.

Account enumeration:
  authenticate_user() returns the same InvalidCredentials for "no such email"
  and "wrong password", and runs the KDF in both cases (against
  DUMMY_CREDENTIAL when the email is unknown) so response time does not leak
  which one happened.

Layer rule: no imports from api/, travel/, or cache/.
"""

from __future__ import annotations

import logging

from auth.models import User
from auth.passwords import DUMMY_CREDENTIAL, hash_password, verify_password
from auth.store import UserStore, normalize_email
from core.errors import EmailTaken, InvalidCredentials, MissingField, WeakPassword

logger = logging.getLogger("travelglobe.auth")

MIN_PASSWORD_LENGTH = 6


def register_user(store: UserStore, email: str, password: str, display_name: str | None = None) -> User:
    """Create a new account and return the stored User.

    Raises:
        MissingField: email is empty after trimming.
        WeakPassword: password shorter than MIN_PASSWORD_LENGTH.
        EmailTaken:   an account already exists for this email.
    """
    email = normalize_email(email)
    if not email:
        raise MissingField("Email is required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()

    # Fast path for the common duplicate case; the UNIQUE constraint in
    # create_user() still catches a concurrent registration racing past this.
    if store.get_by_email(email) is not None:
        raise EmailTaken()

    name = display_name.strip() if display_name else None
    user = store.create_user(User(email=email, credential=hash_password(password), display_name=name or None))
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Return the User for a correct email/password pair, else raise InvalidCredentials."""
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running the KDF
        verify_password(password, DUMMY_CREDENTIAL.salt, DUMMY_CREDENTIAL.hash)
        logger.info("Login rejected: unknown email")
        raise InvalidCredentials()
    if not verify_password(password, user.credential.salt, user.credential.hash):
        logger.info("Login rejected: bad password for user %s", user.id)
        raise InvalidCredentials()
    return user
