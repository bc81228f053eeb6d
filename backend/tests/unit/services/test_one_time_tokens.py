"""Unit tests for the password reset and e-mail verification token flows."""

from __future__ import annotations

from datetime import timedelta

import pytest

from brain_api.services._shared.errors import AuthError, AuthErrorKind
from brain_api.services.auth.one_time import (
    EmailVerificationFlow,
    OneTimeTokenFlow,
    PasswordResetFlow,
)
from brain_api.services.auth.tokens import token_digest
from tests.factories.user import UserFactory
from tests.helpers.utils import reload_user


@pytest.fixture()
def reset_flow(hasher) -> PasswordResetFlow:
    return PasswordResetFlow(hasher=hasher, ttl=timedelta(hours=1))


@pytest.fixture()
def verification_flow() -> EmailVerificationFlow:
    return EmailVerificationFlow(ttl=timedelta(hours=24))


class TestPasswordResetFlow:
    def test_unknown_email_returns_none(self, reset_flow):
        assert reset_flow.request("nobody@example.com") is None

    def test_request_stores_only_the_digest(self, reset_flow, session):
        user = UserFactory(email="reset@example.com")

        token = reset_flow.request("  RESET@example.com ")

        assert token is not None and len(token) == 64
        stored = reload_user(session, user.id)
        assert stored.password_reset_token_hash == token_digest(token)
        assert stored.password_reset_token_hash != token
        assert stored.password_reset_expires is not None

    def test_new_request_replaces_outstanding_token(self, reset_flow):
        user = UserFactory()
        first = reset_flow.request(user.email)
        second = reset_flow.request(user.email)

        with pytest.raises(AuthError) as exc:
            reset_flow.consume(first, "N3w!pass")
        assert exc.value.kind is AuthErrorKind.INVALID_RESET_TOKEN
        assert reset_flow.consume(second, "N3w!pass") == user.id

    def test_consume_resets_password_sessions_and_lockout(
        self, reset_flow, hasher, service, session
    ):
        user = UserFactory(password="Old!pass1", login_attempts=3)
        service.issue_session(user.id)
        service.issue_session(user.id)
        token = reset_flow.request(user.email)

        assert reset_flow.consume(token, "N3w!pass") == user.id

        stored = reload_user(session, user.id)
        assert stored.sessions == []
        assert stored.login_attempts == 0
        assert stored.lock_until is None
        assert stored.password_reset_token_hash is None
        assert stored.password_reset_expires is None
        assert hasher.verify("N3w!pass", stored.password_hash) is True
        assert hasher.verify("Old!pass1", stored.password_hash) is False

    def test_token_is_single_use(self, reset_flow):
        user = UserFactory()
        token = reset_flow.request(user.email)
        reset_flow.consume(token, "N3w!pass")

        with pytest.raises(AuthError) as exc:
            reset_flow.consume(token, "An0ther!pw")
        assert exc.value.kind is AuthErrorKind.INVALID_RESET_TOKEN

    def test_expired_token_is_indistinguishable_from_wrong(self, reset_flow, freeze_time):
        with freeze_time("2024-01-01 12:00:00") as frozen:
            user = UserFactory()
            token = reset_flow.request(user.email)
            frozen.tick(timedelta(hours=1, seconds=1))

            with pytest.raises(AuthError) as expired:
                reset_flow.consume(token, "N3w!pass")
            with pytest.raises(AuthError) as wrong:
                reset_flow.consume("0" * 64, "N3w!pass")

        assert expired.value.kind is wrong.value.kind is AuthErrorKind.INVALID_RESET_TOKEN
        assert str(expired.value) == str(wrong.value)


class TestEmailVerificationFlow:
    def test_verified_account_is_not_eligible(self, verification_flow):
        user = UserFactory(is_email_verified=True)

        assert verification_flow.request(user.email) is None

    def test_unknown_email_returns_none(self, verification_flow):
        assert verification_flow.request("ghost@example.com") is None

    def test_consume_marks_verified(self, verification_flow, session):
        user = UserFactory(is_email_verified=False)
        token = verification_flow.request(user.email)

        assert verification_flow.consume(token) == user.id

        stored = reload_user(session, user.id)
        assert stored.is_email_verified is True
        assert stored.email_verification_token_hash is None
        assert stored.email_verification_expires is None

    def test_expired_token(self, verification_flow, freeze_time):
        with freeze_time("2024-01-01 12:00:00") as frozen:
            user = UserFactory(is_email_verified=False)
            token = verification_flow.request(user.email)
            frozen.tick(timedelta(hours=24))

            with pytest.raises(AuthError) as exc:
                verification_flow.consume(token)

        assert exc.value.kind is AuthErrorKind.INVALID_VERIFICATION_TOKEN

    def test_reset_token_does_not_verify_email(self, verification_flow, reset_flow):
        user = UserFactory(is_email_verified=False)
        reset_token = reset_flow.request(user.email)

        with pytest.raises(AuthError) as exc:
            verification_flow.consume(reset_token)
        assert exc.value.kind is AuthErrorKind.INVALID_VERIFICATION_TOKEN


def test_flow_without_column_bindings_cannot_be_built():
    class Unbound(OneTimeTokenFlow):
        invalid_kind = AuthErrorKind.INVALID_RESET_TOKEN
        event = "unbound"

        def _store(self, user, digest, expires_at):
            user.password_reset_token_hash = digest

    with pytest.raises(TypeError, match="_find"):
        Unbound(ttl=timedelta(hours=1))
