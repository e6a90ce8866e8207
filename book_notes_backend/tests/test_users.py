"""Tests for the credential store."""

import pytest

from src.api.auth import create_password_context
from src.api.errors import ConflictError
from src.api.users import CredentialStore


@pytest.fixture
def users(db_session) -> CredentialStore:
    return CredentialStore(db_session, create_password_context(rounds=4))


class TestCredentialStore:
    def test_create_user_hashes_password(self, users):
        user = users.create_user("Reader@X.com", "secret1")

        assert user.id is not None
        assert user.email == "reader@x.com"
        assert user.password_hash != "secret1"
        assert user.password_hash.startswith("$2")

    def test_salt_differs_per_hash(self, users):
        first = users.create_user("a@x.com", "secret1")
        second = users.create_user("b@x.com", "secret1")

        assert first.password_hash != second.password_hash

    def test_duplicate_email_is_conflict(self, users):
        users.create_user("a@x.com", "secret1")

        with pytest.raises(ConflictError) as exc_info:
            users.create_user("A@x.COM", "other12")

        assert exc_info.value.message == "Email already registered"
        assert exc_info.value.status_code == 409

    def test_store_usable_after_conflict(self, users):
        users.create_user("a@x.com", "secret1")
        with pytest.raises(ConflictError):
            users.create_user("a@x.com", "secret1")

        assert users.create_user("b@x.com", "secret1").id is not None

    def test_find_user_by_email_is_case_insensitive(self, users):
        created = users.create_user("a@x.com", "secret1")

        assert users.find_user_by_email("A@X.com").id == created.id
        assert users.find_user_by_email("nobody@x.com") is None

    def test_verify_password(self, users):
        user = users.create_user("a@x.com", "secret1")

        assert users.verify_password("secret1", user.password_hash) is True
        assert users.verify_password("secret2", user.password_hash) is False

    def test_authenticate(self, users):
        user = users.create_user("a@x.com", "secret1")

        assert users.authenticate("A@x.com", "secret1").id == user.id
        assert users.authenticate("a@x.com", "wrong") is None
        assert users.authenticate("zz@x.com", "secret1") is None

    def test_unknown_email_still_runs_a_hash_check(self, users, monkeypatch):
        calls = []
        monkeypatch.setattr(users.pwd_context, "dummy_verify", lambda *a, **kw: calls.append(1) or False)

        assert users.authenticate("nobody@x.com", "secret1") is None
        assert calls == [1]
