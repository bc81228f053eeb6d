# brain_api/services/auth/one_time.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from brain_api.models.user import User
from brain_api.repositories.user import UserRepository
from brain_api.services._shared.base import BaseService, ServiceContext
from brain_api.services._shared.errors import AuthError, AuthErrorKind
from brain_api.services.auth.passwords import PasswordHasher
from brain_api.services.auth.tokens import new_opaque_token, token_digest

logger = logging.getLogger(__name__)


class OneTimeTokenFlow(BaseService, ABC):
    """
    Single-use, time-boxed token flow.

    The raw token is returned to the caller for delivery; only its SHA-256
    digest and expiry are stored on the user. Lookup requires a matching
    digest AND an unexpired window, and a single failure kind covers both
    "wrong" and "expired" so callers cannot tell them apart.

    Subclasses bind the flow to a pair of user columns.
    """

    #: Failure kind raised by :meth:`_claim`.
    invalid_kind: AuthErrorKind
    #: Log event prefix.
    event: str

    def __init__(self, *, ttl: timedelta, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.ttl = ttl

    # --- column bindings ---------------------------------------------------

    @abstractmethod
    def _store(self, user: User, digest: str, expires_at: datetime) -> None:
        """Write ``digest`` and ``expires_at`` to the user's token columns."""

    @abstractmethod
    def _find(self, repo: UserRepository, digest: str, now: datetime) -> User | None:
        """Return the user holding ``digest`` if it is still inside its window."""

    def _eligible(self, user: User) -> bool:
        return True

    # --- shared flow -------------------------------------------------------

    def issue(self, user: User, now: datetime) -> str:
        """
        Generate a token for ``user`` inside the caller's unit of work.

        A new token replaces any outstanding one.
        """
        raw = new_opaque_token()
        self._store(user, token_digest(raw), now + self.ttl)
        return raw

    def request(self, email: str) -> str | None:
        """
        Issue a token for the account registered under ``email``.

        :returns: The raw token, or ``None`` when no eligible account exists.
            Both outcomes are indistinguishable to HTTP clients.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email, for_update=True)
            if user is None or not self._eligible(user):
                token = None
            else:
                token = self.issue(user, self.now_utc())
                user_id = user.id
        if token is not None:
            logger.info(
                "%s token issued",
                self.event,
                extra={"event": f"auth.{self.event}.issued", "user_id": user_id},
            )
        return token

    def _claim(self, repo: UserRepository, token: str) -> User:
        user = self._find(repo, token_digest(token), self.now_utc())
        if user is None:
            raise AuthError(self.invalid_kind)
        return user


class PasswordResetFlow(OneTimeTokenFlow):
    """Forgot-password tokens (default window: 1 hour)."""

    invalid_kind = AuthErrorKind.INVALID_RESET_TOKEN
    event = "password_reset"

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        ttl: timedelta = timedelta(hours=1),
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ttl=ttl, ctx=ctx)
        self.hasher = hasher

    def _store(self, user: User, digest: str, expires_at: datetime) -> None:
        user.password_reset_token_hash = digest
        user.password_reset_expires = expires_at

    def _find(self, repo: UserRepository, digest: str, now: datetime) -> User | None:
        return repo.get_by_reset_token_hash(digest, now=now)

    def consume(self, token: str, new_password: str) -> int:
        """
        Set a new password for the token holder.

        Clears the reset token, every refresh session (global logout) and the
        lockout state.

        :returns: The user id.
        :raises AuthError: ``INVALID_RESET_TOKEN`` for unknown or expired tokens.
        """
        with self.rw_uow() as uow:
            user = self._claim(uow.users, token)
            user.password_hash = self.hasher.hash(new_password)
            user.clear_password_reset()
            user.sessions.clear()
            user.login_attempts = 0
            user.lock_until = None
            user_id = user.id
        logger.info(
            "password reset completed",
            extra={"event": "auth.password_reset.completed", "user_id": user_id},
        )
        return user_id


class EmailVerificationFlow(OneTimeTokenFlow):
    """E-mail ownership confirmation tokens (default window: 24 hours)."""

    invalid_kind = AuthErrorKind.INVALID_VERIFICATION_TOKEN
    event = "email_verification"

    def __init__(
        self, *, ttl: timedelta = timedelta(hours=24), ctx: ServiceContext | None = None
    ) -> None:
        super().__init__(ttl=ttl, ctx=ctx)

    def _store(self, user: User, digest: str, expires_at: datetime) -> None:
        user.email_verification_token_hash = digest
        user.email_verification_expires = expires_at

    def _find(self, repo: UserRepository, digest: str, now: datetime) -> User | None:
        return repo.get_by_verification_token_hash(digest, now=now)

    def _eligible(self, user: User) -> bool:
        return not user.is_email_verified

    def consume(self, token: str) -> int:
        """
        Mark the token holder's e-mail as verified.

        :returns: The user id.
        :raises AuthError: ``INVALID_VERIFICATION_TOKEN`` for unknown or expired tokens.
        """
        with self.rw_uow() as uow:
            user = self._claim(uow.users, token)
            user.is_email_verified = True
            user.clear_email_verification()
            user_id = user.id
        logger.info(
            "email verified",
            extra={"event": "auth.email_verification.completed", "user_id": user_id},
        )
        return user_id
