"""Unit tests for model-level validation and helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from brain_api.models.base import utcnow
from brain_api.models.refresh_session import RefreshSession
from brain_api.models.user import User
from tests.factories.user import RefreshSessionFactory, UserFactory


def test_email_is_normalized():
    user = User(username="alice", email="  Alice@Example.COM ", password_hash="x")
    assert user.email == "alice@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
def test_malformed_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(username="alice", email=email, password_hash="x")


def test_username_is_trimmed():
    user = User(username="  alice  ", email="alice@example.com", password_hash="x")
    assert user.username == "alice"


@pytest.mark.parametrize("username", ["ab", "x" * 31, "   a   "])
def test_username_length_is_enforced(username):
    with pytest.raises(ValueError, match="3-30"):
        User(username=username, email="alice@example.com", password_hash="x")


def test_clear_one_time_tokens():
    user = UserFactory(
        password_reset_token_hash="a" * 64,
        password_reset_expires=utcnow(),
        email_verification_token_hash="b" * 64,
        email_verification_expires=utcnow(),
    )

    user.clear_password_reset()
    user.clear_email_verification()

    assert user.password_reset_token_hash is None
    assert user.password_reset_expires is None
    assert user.email_verification_token_hash is None
    assert user.email_verification_expires is None


def test_refresh_session_expiry_boundary():
    now = utcnow()
    record = RefreshSession(expires_at=now)

    assert record.is_expired(now)
    assert record.is_expired(now + timedelta(seconds=1))
    assert not record.is_expired(now - timedelta(seconds=1))


def test_stored_datetimes_are_utc_aware(session):
    record = RefreshSessionFactory()
    session.expire_all()

    reloaded = session.get(RefreshSession, record.id)
    assert reloaded.expires_at.tzinfo is not None
    assert reloaded.created_at.utcoffset() == timedelta(0)
