"""Unit tests for auth/store.py and auth/accounts.py.

Uses the in-memory user_store fixture from conftest.py.
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from auth.accounts import authenticate_user, register_user
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore
from core.errors import EmailTaken, InvalidCredentials, MissingField, StorageUnavailable, WeakPassword

# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_assigns_opaque_id(self, user_store: UserStore):
        user = user_store.create_user(User(email="a@x.com", credential=hash_password("secret1")))
        assert user.id and isinstance(user.id, str)
        assert user.created_at

    def test_email_normalized_on_create_and_lookup(self, user_store: UserStore):
        created = user_store.create_user(User(email="  Mixed@Example.COM ", credential=hash_password("secret1")))
        assert created.email == "mixed@example.com"
        found = user_store.get_by_email("MIXED@example.com")
        assert found is not None and found.id == created.id

    def test_get_by_id_round_trips_credential(self, user_store: UserStore):
        cred = hash_password("secret1")
        created = user_store.create_user(User(email="a@x.com", credential=cred, display_name="A"))
        found = user_store.get_by_id(created.id)
        assert found.credential == cred
        assert found.display_name == "A"

    def test_unknown_lookups_return_none(self, user_store: UserStore):
        assert user_store.get_by_id("nope") is None
        assert user_store.get_by_email("nobody@x.com") is None

    def test_duplicate_email_raises_email_taken(self, user_store: UserStore):
        user_store.create_user(User(email="a@x.com", credential=hash_password("secret1")))
        with pytest.raises(EmailTaken):
            user_store.create_user(User(email="A@X.com", credential=hash_password("other99")))

    def test_ping(self, user_store: UserStore):
        assert user_store.ping() is True

    def test_operational_error_becomes_storage_unavailable(self, user_store: UserStore):
        broken = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")))
        with patch.object(user_store.engine, "connect", broken):
            with pytest.raises(StorageUnavailable):
                user_store.get_by_id("anything")
            assert user_store.ping() is False


# ---------------------------------------------------------------------------
# register_user
# ---------------------------------------------------------------------------


class TestRegisterUser:
    def test_register_returns_stored_user(self, user_store: UserStore):
        user = register_user(user_store, "a@x.com", "secret1", " Alice ")
        assert user.email == "a@x.com"
        assert user.display_name == "Alice"
        assert user_store.get_by_id(user.id) is not None

    def test_blank_display_name_is_dropped(self, user_store: UserStore):
        assert register_user(user_store, "a@x.com", "secret1", "   ").display_name is None

    def test_register_twice_fails_regardless_of_password(self, user_store: UserStore):
        register_user(user_store, "a@x.com", "secret1")
        with pytest.raises(EmailTaken):
            register_user(user_store, "a@x.com", "completely-different")
        with pytest.raises(EmailTaken):
            register_user(user_store, " A@x.COM", "secret1")

    def test_short_password_is_weak(self, user_store: UserStore):
        with pytest.raises(WeakPassword):
            register_user(user_store, "a@x.com", "12345")
        assert user_store.get_by_email("a@x.com") is None

    def test_six_characters_is_enough(self, user_store: UserStore):
        assert register_user(user_store, "a@x.com", "123456").id

    def test_empty_email_is_missing_field(self, user_store: UserStore):
        with pytest.raises(MissingField):
            register_user(user_store, "   ", "secret1")


# ---------------------------------------------------------------------------
# authenticate_user
# ---------------------------------------------------------------------------


class TestAuthenticateUser:
    def test_correct_password_returns_user(self, user_store: UserStore):
        created = register_user(user_store, "a@x.com", "secret1")
        assert authenticate_user(user_store, "A@x.com", "secret1").id == created.id

    def test_wrong_password_and_unknown_email_look_identical(self, user_store: UserStore):
        register_user(user_store, "a@x.com", "secret1")
        with pytest.raises(InvalidCredentials) as wrong_pw:
            authenticate_user(user_store, "a@x.com", "wrong")
        with pytest.raises(InvalidCredentials) as unknown:
            authenticate_user(user_store, "b@x.com", "secret1")
        assert wrong_pw.value.message == unknown.value.message

    def test_unknown_email_still_runs_kdf(self, user_store: UserStore):
        with patch("auth.accounts.verify_password", return_value=False) as verify:
            with pytest.raises(InvalidCredentials):
                authenticate_user(user_store, "ghost@x.com", "secret1")
        verify.assert_called_once()
