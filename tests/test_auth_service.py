import inspect
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from blog_service.dependencies import get_current_user_id
from blog_service.models import User
from blog_service.services import auth_service
from blog_service.services.auth_service import CredentialManager
from blog_service.utils.exceptions import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    InvalidInput,
    NotFound,
)


def test_register_then_authenticate_returns_same_id(credentials):
    user = credentials.register("alice", "a@x.com", "pw123")
    assert credentials.authenticate("alice", "pw123") == user.id


def test_register_stores_hash_not_password(credentials, db_session):
    user = credentials.register("alice", "a@x.com", "pw123")
    stored = db_session.get(User, user.id)
    assert stored.password_hash != "pw123"
    assert "pw123" not in stored.password_hash
    assert stored.password_hash.startswith("$argon2")


def test_same_password_gives_different_hashes(credentials):
    first = credentials.register("alice", "a@x.com", "pw123")
    second = credentials.register("bob", "b@x.com", "pw123")
    assert first.password_hash != second.password_hash


def test_register_trims_username_and_email(credentials):
    user = credentials.register("  alice ", " a@x.com ", "pw123")
    assert user.username == "alice"
    assert user.email == "a@x.com"


def test_authenticate_with_untrimmed_username(credentials):
    user = credentials.register("  alice ", "a@x.com", "pw123")
    assert credentials.authenticate("  alice ", "pw123") == user.id
    assert credentials.authenticate("alice", "pw123") == user.id


def test_email_stored_lowercase(credentials):
    user = credentials.register("alice", "Alice@X.com", "pw123")
    assert user.email == "alice@x.com"


def test_duplicate_email_ignores_case(credentials, db_session):
    credentials.register("alice", "Alice@x.com", "pw123")
    with pytest.raises(DuplicateEmail):
        credentials.register("bob", "alice@x.com", "pw123")
    assert db_session.query(User).count() == 1


@pytest.mark.parametrize(
    "username, email, password",
    [
        ("", "a@x.com", "pw123"),
        ("   ", "a@x.com", "pw123"),
        ("alice", " \t", "pw123"),
        ("alice", "a@x.com", ""),
    ],
)
def test_register_rejects_blank_fields(credentials, db_session, username, email, password):
    with pytest.raises(InvalidInput):
        credentials.register(username, email, password)
    assert db_session.query(User).count() == 0


def test_duplicate_username(credentials, db_session):
    credentials.register("alice", "a@x.com", "pw123")
    with pytest.raises(DuplicateUsername):
        credentials.register("alice", "other@x.com", "pw123")
    assert db_session.query(User).count() == 1


def test_duplicate_email(credentials, db_session):
    credentials.register("alice", "a@x.com", "pw123")
    with pytest.raises(DuplicateEmail):
        credentials.register("alice2", "a@x.com", "pw123")
    assert db_session.query(User).count() == 1


def test_session_usable_after_duplicate(credentials):
    alice = credentials.register("alice", "a@x.com", "pw123")
    with pytest.raises(DuplicateUsername):
        credentials.register("alice", "b@x.com", "pw123")
    assert alice.username == "alice"
    assert alice.email == "a@x.com"

    bob = credentials.register("bob", "b@x.com", "pw123")
    assert credentials.authenticate("bob", "pw123") == bob.id


def test_username_is_case_sensitive(credentials, alice):
    with pytest.raises(InvalidCredentials):
        credentials.authenticate("ALICE", "pw123")


def test_wrong_password_and_unknown_user_look_the_same(credentials, alice):
    with pytest.raises(InvalidCredentials) as wrong_password:
        credentials.authenticate("alice", "nope")
    with pytest.raises(InvalidCredentials) as unknown_user:
        credentials.authenticate("mallory", "pw123")

    assert type(wrong_password.value) is type(unknown_user.value)
    assert wrong_password.value.detail == unknown_user.value.detail
    assert wrong_password.value.code == unknown_user.value.code


def test_unknown_user_still_verifies_password(credentials, monkeypatch):
    calls = []
    real_verify = auth_service.verify_password

    def spy(password, hashed):
        calls.append(hashed)
        return real_verify(password, hashed)

    monkeypatch.setattr(auth_service, "verify_password", spy)

    with pytest.raises(InvalidCredentials):
        credentials.authenticate("ghost", "pw123")

    assert calls == [auth_service.DUMMY_PASSWORD_HASH]


def test_token_round_trip(credentials, alice):
    token = credentials.issue_token(alice.id)
    assert credentials.verify_token(token) == alice.id


def test_expired_token_rejected(db_session, alice):
    manager = CredentialManager(db_session, token_ttl=timedelta(seconds=-5))
    token = manager.issue_token(alice.id)
    with pytest.raises(InvalidCredentials):
        manager.verify_token(token)


def test_forged_token_rejected(credentials, alice):
    forged = jwt.encode(
        {
            "sub": str(alice.id),
            "token_type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        "another-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidCredentials):
        credentials.verify_token(forged)


def test_garbage_token_rejected(credentials):
    with pytest.raises(InvalidCredentials):
        credentials.verify_token("not-a-jwt")


def test_get_user(credentials, alice):
    assert credentials.get_user(alice.id).username == "alice"
    with pytest.raises(NotFound):
        credentials.get_user(uuid.uuid4())


def test_delete_user(credentials, alice):
    credentials.delete_user(alice.id)
    with pytest.raises(NotFound):
        credentials.get_user(alice.id)
    with pytest.raises(InvalidCredentials):
        credentials.authenticate("alice", "pw123")
    with pytest.raises(NotFound):
        credentials.delete_user(alice.id)


def test_current_user_dependency_needs_no_session(credentials, alice):
    assert list(inspect.signature(get_current_user_id).parameters) == ["credentials"]

    token = credentials.issue_token(alice.id)
    bearer = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    assert get_current_user_id(bearer) == alice.id

    with pytest.raises(InvalidCredentials):
        get_current_user_id(None)
