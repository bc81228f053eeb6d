# brain_api/services/auth/lockout.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from brain_api.models.user import User
from brain_api.services._shared.errors import AuthError, AuthErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LockoutGuard:
    """
    Brute-force lockout for sign-in attempts.

    States per user: unlocked with ``login_attempts`` consecutive failures,
    or locked until ``lock_until``. Expired locks are reaped lazily by the
    next :meth:`check`, never by a background sweep.

    All methods mutate the ``User`` instance the caller fetched for update;
    the caller owns the transaction.

    :param threshold: Consecutive failures that lock the account.
    :param duration: Lock window, measured from the triggering failure.
    """

    threshold: int = 5
    duration: timedelta = timedelta(minutes=15)

    def is_locked(self, user: User, now: datetime) -> bool:
        return user.lock_until is not None and user.lock_until > now

    def check(self, user: User, now: datetime) -> None:
        """
        Gate a sign-in attempt before any password work is done.

        :raises AuthError: ``ACCOUNT_LOCKED`` while the lock is active.
        """
        if self.is_locked(user, now):
            raise AuthError(AuthErrorKind.ACCOUNT_LOCKED)
        if user.lock_until is not None:
            # Stale lock: this attempt starts a new streak.
            user.lock_until = None
            user.login_attempts = 0

    def register_failure(self, user: User, now: datetime) -> bool:
        """
        Count a failed attempt.

        :returns: ``True`` when this failure locked the account.
        """
        user.login_attempts = (user.login_attempts or 0) + 1
        if user.login_attempts >= self.threshold:
            user.lock_until = now + self.duration
            logger.warning(
                "account locked after %s failed attempts",
                user.login_attempts,
                extra={"event": "auth.lockout", "user_id": user.id},
            )
            return True
        return False

    def register_success(self, user: User) -> None:
        user.login_attempts = 0
        user.lock_until = None
