# brain_api/services/auth/sessions.py
from __future__ import annotations

import logging
from datetime import datetime
from uuid import uuid4

from brain_api.models.refresh_session import RefreshSession
from brain_api.models.user import User
from brain_api.services._shared.base import BaseService, ServiceContext
from brain_api.services._shared.errors import AuthError, AuthErrorKind
from brain_api.services._shared.ports.token_codec import (
    TokenCodec,
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    TokenTypeError,
)
from brain_api.services.auth.dto import SessionOut, TokenPairOut
from brain_api.services.auth.settings import AuthSettings
from brain_api.services.auth.tokens import token_digest

logger = logging.getLogger(__name__)


def parse_subject(subject_id: str) -> int:
    """
    Convert a token ``sub`` claim back into a user primary key.

    :raises AuthError: ``INVALID_REFRESH_TOKEN`` for non-numeric subjects.
    """
    try:
        return int(subject_id)
    except (TypeError, ValueError) as exc:
        raise AuthError(AuthErrorKind.INVALID_REFRESH_TOKEN) from exc


class SessionManager(BaseService):
    """
    Refresh-token lifecycle: issue, rotate, enumerate, revoke, evict.

    A user's sessions are ordered by insertion. Issuing one beyond
    ``max_sessions`` evicts the oldest (FIFO). Rotation rewrites the matched
    session in place, so a refresh token is single-use: replaying a
    rotated-out token misses the hash lookup.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        settings: AuthSettings,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.codec = codec
        self.settings = settings

    # ------------------------------------------------------------------ #
    # In-transaction helpers (caller owns the UoW)
    # ------------------------------------------------------------------ #

    def attach(self, user: User, device_info: str | None, now: datetime) -> TokenPairOut:
        """
        Append a new session to ``user`` and return its token pair.

        :param user: User fetched for update in the caller's unit of work.
        :param device_info: Client descriptor; truncated to the configured length.
        :param now: Issuance time.
        """
        device = self._truncate(device_info)
        session_id = uuid4().hex
        pair, token_hash = self._mint_pair(user.id, device, session_id)
        user.sessions.append(
            RefreshSession(
                session_id=session_id,
                token_hash=token_hash,
                device_info=device,
                created_at=now,
                last_active_at=now,
                expires_at=now + self.settings.refresh_token_ttl,
            )
        )
        evicted = 0
        while len(user.sessions) > self.settings.max_sessions:
            del user.sessions[0]
            evicted += 1
        logger.info(
            "refresh session issued",
            extra={"event": "auth.session.issued", "user_id": user.id, "evicted": evicted},
        )
        return pair

    def prune(self, user: User, *, keep_refresh_token: str | None = None) -> int:
        """
        Remove every session except the one matching ``keep_refresh_token``.

        :returns: Number of sessions removed.
        """
        keep_hash = token_digest(keep_refresh_token) if keep_refresh_token else None
        survivors = [s for s in user.sessions if keep_hash and s.token_hash == keep_hash]
        removed = len(user.sessions) - len(survivors)
        user.sessions[:] = survivors
        return removed

    # ------------------------------------------------------------------ #
    # Use cases
    # ------------------------------------------------------------------ #

    def issue_session(self, user_id: int, device_info: str | None = None) -> TokenPairOut:
        """
        Mint an access/refresh pair backed by a new session.

        :raises AuthError: ``USER_NOT_FOUND`` when the user does not exist.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            return self.attach(user, device_info, self.now_utc())

    def refresh(self, refresh_token: str) -> TokenPairOut:
        """
        Exchange a refresh token for a new pair, rotating its session in place.

        :raises AuthError: ``REFRESH_TOKEN_EXPIRED`` (codec or stored expiry),
            ``INVALID_TOKEN_TYPE``, ``INVALID_REFRESH_TOKEN`` (forged, unknown
            or already rotated) or ``USER_NOT_FOUND``.
        """
        try:
            claims = self.codec.verify(refresh_token, expected_type=TokenType.REFRESH)
        except TokenExpiredError as exc:
            raise AuthError(AuthErrorKind.REFRESH_TOKEN_EXPIRED) from exc
        except TokenTypeError as exc:
            raise AuthError(AuthErrorKind.INVALID_TOKEN_TYPE) from exc
        except TokenInvalidError as exc:
            raise AuthError(AuthErrorKind.INVALID_REFRESH_TOKEN) from exc

        user_id = parse_subject(claims.subject_id)
        token_hash = token_digest(refresh_token)
        stale = False

        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            entry = self._find_by_hash(user, token_hash)
            if entry is None:
                raise AuthError(AuthErrorKind.INVALID_REFRESH_TOKEN)

            now = self.now_utc()
            if entry.is_expired(now):
                # Persist the removal before failing.
                user.sessions.remove(entry)
                stale = True
            else:
                pair = self._rotate(user.id, entry, now)

        if stale:
            logger.info(
                "expired refresh session removed",
                extra={"event": "auth.session.expired", "user_id": user_id},
            )
            raise AuthError(AuthErrorKind.REFRESH_TOKEN_EXPIRED)

        logger.info(
            "refresh session rotated",
            extra={"event": "auth.session.rotated", "user_id": user_id},
        )
        return pair

    def revoke(self, user_id: int, refresh_token: str) -> bool:
        """
        Remove the session matching ``refresh_token`` (single-device logout).

        Unknown or already-rotated tokens are a no-op.

        :returns: ``True`` when a session was removed.
        :raises AuthError: ``USER_NOT_FOUND`` when the user does not exist.
        """
        token_hash = token_digest(refresh_token)
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            entry = self._find_by_hash(user, token_hash)
            if entry is not None:
                user.sessions.remove(entry)
        logger.info(
            "logout",
            extra={
                "event": "auth.session.revoked",
                "user_id": user_id,
                "matched": entry is not None,
            },
        )
        return entry is not None

    def revoke_all(self, user_id: int) -> int:
        """
        Remove every session of ``user_id`` (logout of all devices).

        :returns: Number of sessions removed.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            removed = self.prune(user)
        logger.info(
            "logout from all devices",
            extra={"event": "auth.session.revoked_all", "user_id": user_id, "removed": removed},
        )
        return removed

    def list_sessions(self, user_id: int) -> list[SessionOut]:
        """Return the user's unexpired sessions, oldest first."""
        now = self.now_utc()
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            return [
                SessionOut(
                    session_id=s.session_id,
                    device_info=s.device_info,
                    created_at=s.created_at,
                    last_active_at=s.last_active_at,
                    expires_at=s.expires_at,
                )
                for s in user.sessions
                if not s.is_expired(now)
            ]

    def revoke_session(self, user_id: int, session_id: str) -> bool:
        """
        Remove one session by its id (device management).

        :returns: ``True`` when the session existed and belonged to ``user_id``.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise AuthError(AuthErrorKind.USER_NOT_FOUND)
            entry = next((s for s in user.sessions if s.session_id == session_id), None)
            if entry is not None:
                user.sessions.remove(entry)
        return entry is not None

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _mint_pair(
        self, user_id: int, device_info: str | None, session_id: str
    ) -> tuple[TokenPairOut, str]:
        access = self.codec.sign(
            subject_id=user_id,
            token_type=TokenType.ACCESS,
            ttl=self.settings.access_token_ttl,
        )
        refresh = self.codec.sign(
            subject_id=user_id,
            token_type=TokenType.REFRESH,
            ttl=self.settings.refresh_token_ttl,
            device_info=device_info,
            session_id=session_id,
        )
        pair = TokenPairOut(
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.settings.access_token_ttl.total_seconds()),
        )
        return pair, token_digest(refresh)

    def _rotate(self, user_id: int, entry: RefreshSession, now: datetime) -> TokenPairOut:
        pair, token_hash = self._mint_pair(user_id, entry.device_info, entry.session_id)
        entry.token_hash = token_hash
        entry.expires_at = now + self.settings.refresh_token_ttl
        entry.last_active_at = now
        return pair

    def _truncate(self, device_info: str | None) -> str | None:
        if not device_info:
            return None
        return device_info[: self.settings.device_info_max_length]

    @staticmethod
    def _find_by_hash(user: User, token_hash: str) -> RefreshSession | None:
        return next((s for s in user.sessions if s.token_hash == token_hash), None)
