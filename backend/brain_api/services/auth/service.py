# brain_api/services/auth/service.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from brain_api.models.user import User
from brain_api.repositories.user import normalize_email
from brain_api.services._shared.base import BaseService, ServiceContext
from brain_api.services._shared.errors import AuthError, AuthErrorKind, violates
from brain_api.services._shared.ports.denylist_store import TokenDenylistStore
from brain_api.services._shared.ports.token_codec import TokenCodec
from brain_api.services._shared.ports.token_mailer import MailPurpose, TokenMailer
from brain_api.services.auth.dto import (
    ChangePasswordIn,
    LogoutIn,
    RefreshIn,
    ResetPasswordIn,
    SessionOut,
    SigninIn,
    SigninOut,
    SignupIn,
    SignupOut,
    TokenPairOut,
    UserPublicOut,
)
from brain_api.services.auth.lockout import LockoutGuard
from brain_api.services.auth.one_time import EmailVerificationFlow, PasswordResetFlow
from brain_api.services.auth.passwords import PasswordHasher, password_policy_violations
from brain_api.services.auth.sessions import SessionManager
from brain_api.services.auth.settings import AuthSettings

logger = logging.getLogger(__name__)


def to_public(user: User) -> UserPublicOut:
    """Project a user onto its public fields (no password or token material)."""
    return UserPublicOut(
        id=user.id,
        username=user.username,
        email=user.email,
        is_email_verified=bool(user.is_email_verified),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class AuthService(BaseService):
    """
    Authentication façade used by the HTTP layer and the CLI.

    Composes the password hasher, lockout guard, session manager and the
    one-time token flows. Every read-modify-write happens on a user row
    fetched ``FOR UPDATE`` inside a single unit of work.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        codec: TokenCodec,
        denylist: TokenDenylistStore,
        mailer: TokenMailer,
        hasher: PasswordHasher | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param settings: Immutable auth configuration.
        :param codec: Bearer token codec.
        :param denylist: Access-token denylist (logout).
        :param mailer: One-time token delivery channel.
        :param hasher: Password hasher; built from ``settings`` when omitted.
        :param ctx: Request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.settings = settings
        self.denylist = denylist
        self.mailer = mailer
        self.hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
        self.lockout = LockoutGuard(
            threshold=settings.lockout_threshold, duration=settings.lockout_duration
        )
        self.sessions = SessionManager(codec=codec, settings=settings, ctx=ctx)
        self.password_reset = PasswordResetFlow(
            hasher=self.hasher, ttl=settings.reset_token_ttl, ctx=ctx
        )
        self.email_verification = EmailVerificationFlow(
            ttl=settings.verification_token_ttl, ctx=ctx
        )

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def signup(self, dto: SignupIn) -> SignupOut:
        """
        Register a new account.

        :raises AuthError: ``WEAK_PASSWORD`` or ``USER_EXISTS`` (email or username taken).
        """
        self._ensure_password_policy(dto.password)
        verification_token: str | None = None

        with self.rw_uow() as uow:
            if uow.users.exists_by_email_or_username(dto.email, dto.username):
                raise AuthError(AuthErrorKind.USER_EXISTS)
            user = User(
                username=dto.username,
                email=dto.email,
                password_hash=self.hasher.hash(dto.password),
                login_attempts=0,
                is_email_verified=self.settings.email_verified_by_default,
            )
            try:
                uow.users.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent signup.
                if violates(exc, "uq_users_email") or violates(exc, "uq_users_username"):
                    raise AuthError(AuthErrorKind.USER_EXISTS) from exc
                raise
            if not user.is_email_verified:
                verification_token = self.email_verification.issue(user, self.now_utc())

        if verification_token is not None:
            self.mailer.send(
                purpose=MailPurpose.EMAIL_VERIFICATION,
                email=user.email,
                token=verification_token,
            )
        logger.info("user registered", extra={"event": "auth.signup", "user_id": user.id})
        return SignupOut(user=to_public(user), verification_token=verification_token)

    # ------------------------------------------------------------------ #
    # Sign-in / tokens
    # ------------------------------------------------------------------ #

    def signin(self, dto: SigninIn) -> SigninOut:
        """
        Authenticate credentials and open a new session.

        Unknown e-mail and wrong password both yield ``INVALID_CREDENTIALS``;
        the unknown-e-mail path still pays for one bcrypt comparison.

        :raises AuthError: ``ACCOUNT_LOCKED`` or ``INVALID_CREDENTIALS``.
        """
        now = self.now_utc()
        failure: AuthErrorKind | None = None
        tokens: TokenPairOut | None = None

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email, for_update=True)
            if user is None:
                self.hasher.dummy_verify(dto.password)
                failure = AuthErrorKind.INVALID_CREDENTIALS
            else:
                self.lockout.check(user, now)
                if not self.hasher.verify(dto.password, user.password_hash):
                    # Counter must be committed, so raise after the block.
                    self.lockout.register_failure(user, now)
                    failure = AuthErrorKind.INVALID_CREDENTIALS
                else:
                    self.lockout.register_success(user)
                    if self.hasher.needs_rehash(user.password_hash):
                        user.password_hash = self.hasher.hash(dto.password)
                    device_info = dto.device_info or self.ctx.device_info
                    tokens = self.sessions.attach(user, device_info, now)

        if failure is not None or user is None or tokens is None:
            logger.warning(
                "sign-in failed",
                extra={"event": "auth.signin.failed", "user_id": user.id if user else None},
            )
            raise AuthError(failure or AuthErrorKind.INVALID_CREDENTIALS)

        logger.info("sign-in succeeded", extra={"event": "auth.signin", "user_id": user.id})
        return SigninOut(user=to_public(user), tokens=tokens)

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """Rotate a refresh token (see :meth:`SessionManager.refresh`)."""
        return self.sessions.refresh(dto.refresh_token)

    def issue_session(self, user_id: int, device_info: str | None = None) -> TokenPairOut:
        """Open a session for an already-authenticated user (e.g. the CLI)."""
        return self.sessions.issue_session(user_id, device_info)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> bool:
        """
        Close the session identified by ``dto.refresh_token``.

        The presented access token is denylisted until it expires. An unknown
        refresh token is a no-op.

        :returns: ``True`` when a session was removed.
        :raises AuthError: ``USER_NOT_FOUND``.
        """
        removed = self.sessions.revoke(dto.user_id, dto.refresh_token)
        self._deny_access_token(dto.access_jti, dto.access_expires_at)
        return removed

    def logout_all(
        self,
        user_id: int,
        *,
        access_jti: str | None = None,
        access_expires_at: datetime | None = None,
    ) -> int:
        """
        Close every session of ``user_id``.

        :returns: Number of sessions removed.
        """
        removed = self.sessions.revoke_all(user_id)
        self._deny_access_token(access_jti, access_expires_at)
        return removed

    # ------------------------------------------------------------------ #
    # Passwords
    # ------------------------------------------------------------------ #

    def change_password(self, dto: ChangePasswordIn) -> int:
        """
        Replace the password after re-verifying the current one.

        Keeps only the caller's current session when ``dto.refresh_token``
        matches one; otherwise every session is closed.

        :returns: Number of sessions removed.
        :raises AuthError: ``WEAK_PASSWORD``, ``USER_NOT_FOUND`` or ``INVALID_PASSWORD``.
        """
        self._ensure_password_policy(dto.new_password)
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(dto.user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            if not self.hasher.verify(dto.current_password, user.password_hash):
                raise AuthError(AuthErrorKind.INVALID_PASSWORD)
            user.password_hash = self.hasher.hash(dto.new_password)
            removed = self.sessions.prune(user, keep_refresh_token=dto.refresh_token)
        logger.info(
            "password changed",
            extra={"event": "auth.password.changed", "user_id": dto.user_id, "removed": removed},
        )
        return removed

    def forgot_password(self, email: str) -> str | None:
        """
        Start a password reset for ``email``.

        The token is delivered through the mailer. The return value exists
        for the CLI and tests; HTTP callers must answer identically whether
        or not it is ``None``.
        """
        token = self.password_reset.request(email)
        if token is not None:
            self.mailer.send(
                purpose=MailPurpose.PASSWORD_RESET, email=normalize_email(email), token=token
            )
        return token

    def reset_password(self, dto: ResetPasswordIn) -> None:
        """
        Consume a reset token and set a new password (closes all sessions).

        :raises AuthError: ``WEAK_PASSWORD`` or ``INVALID_RESET_TOKEN``.
        """
        self._ensure_password_policy(dto.new_password)
        self.password_reset.consume(dto.token, dto.new_password)

    # ------------------------------------------------------------------ #
    # E-mail verification
    # ------------------------------------------------------------------ #

    def verify_email(self, token: str) -> None:
        """:raises AuthError: ``INVALID_VERIFICATION_TOKEN``."""
        self.email_verification.consume(token)

    def resend_verification(self, email: str) -> str | None:
        """Issue a fresh verification token unless the account is unknown or verified."""
        token = self.email_verification.request(email)
        if token is not None:
            self.mailer.send(
                purpose=MailPurpose.EMAIL_VERIFICATION,
                email=normalize_email(email),
                token=token,
            )
        return token

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_current_user(self, user_id: int) -> UserPublicOut:
        """:raises AuthError: ``USER_NOT_FOUND``."""
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            return to_public(user)

    def find_user_id(self, email: str) -> int | None:
        """Resolve an e-mail address to a user id (operator tooling)."""
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            return user.id if user is not None else None

    def list_sessions(self, user_id: int) -> list[SessionOut]:
        return self.sessions.list_sessions(user_id)

    def revoke_session(self, user_id: int, session_id: str) -> bool:
        return self.sessions.revoke_session(user_id, session_id)

    def is_access_token_revoked(self, jti: str) -> bool:
        return self.denylist.is_revoked(jti)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _ensure_password_policy(self, password: str) -> None:
        problems = password_policy_violations(password)
        if problems:
            raise AuthError(
                AuthErrorKind.WEAK_PASSWORD,
                detail="Password must have " + ", ".join(problems) + ".",
            )

    def _deny_access_token(self, jti: str | None, expires_at: datetime | None) -> None:
        if jti and expires_at is not None:
            self.denylist.revoke_jti(jti=jti, expires_at=expires_at)
