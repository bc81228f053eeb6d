# brain_api/services/auth/settings.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Immutable authentication configuration.

    Built once by the application factory and injected into every auth
    component. Tests construct their own instance with a low bcrypt cost and
    short lifetimes.

    :param jwt_secret: Signing secret shared by access and refresh tokens.
    :param jwt_algorithm: JWS algorithm (HMAC family).
    :param access_token_ttl: Access token lifetime.
    :param refresh_token_ttl: Refresh token and refresh session lifetime.
    :param bcrypt_rounds: bcrypt cost factor (4..31).
    :param max_sessions: Maximum concurrent refresh sessions per user.
    :param lockout_threshold: Consecutive failures that lock an account.
    :param lockout_duration: Lock window measured from the triggering failure.
    :param reset_token_ttl: Password reset token lifetime.
    :param verification_token_ttl: E-mail verification token lifetime.
    :param email_verified_by_default: Whether signup marks e-mail as verified.
    :param device_info_max_length: Truncation limit for session device info.
    """

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=30)
    bcrypt_rounds: int = 12
    max_sessions: int = 5
    lockout_threshold: int = 5
    lockout_duration: timedelta = timedelta(minutes=15)
    reset_token_ttl: timedelta = timedelta(hours=1)
    verification_token_ttl: timedelta = timedelta(hours=24)
    email_verified_by_default: bool = True
    device_info_max_length: int = 255

    def __post_init__(self) -> None:
        if not self.jwt_secret or not self.jwt_secret.strip():
            raise RuntimeError("JWT_SECRET_KEY is not configured.")
        if not self.jwt_algorithm.startswith("HS"):
            raise ValueError(f"Unsupported JWT algorithm: {self.jwt_algorithm!r}")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31.")
        if self.max_sessions < 1:
            raise ValueError("max_sessions must be >= 1.")
        if self.lockout_threshold < 1:
            raise ValueError("lockout_threshold must be >= 1.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """
        Build settings from a Flask config mapping.

        :param config: ``app.config`` or any mapping exposing ``AUTH_*`` keys.
        :returns: Frozen settings.
        :raises RuntimeError: When ``JWT_SECRET_KEY`` is absent or blank.
        """
        return cls(
            jwt_secret=str(config.get("JWT_SECRET_KEY") or ""),
            jwt_algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            access_token_ttl=timedelta(minutes=int(config.get("AUTH_ACCESS_TOKEN_MINUTES", 15))),
            refresh_token_ttl=timedelta(days=int(config.get("AUTH_REFRESH_TOKEN_DAYS", 30))),
            bcrypt_rounds=int(config.get("AUTH_BCRYPT_ROUNDS", 12)),
            max_sessions=int(config.get("AUTH_MAX_SESSIONS", 5)),
            lockout_threshold=int(config.get("AUTH_LOCKOUT_THRESHOLD", 5)),
            lockout_duration=timedelta(minutes=int(config.get("AUTH_LOCKOUT_MINUTES", 15))),
            reset_token_ttl=timedelta(minutes=int(config.get("AUTH_RESET_TOKEN_MINUTES", 60))),
            verification_token_ttl=timedelta(
                hours=int(config.get("AUTH_VERIFICATION_TOKEN_HOURS", 24))
            ),
            email_verified_by_default=bool(config.get("AUTH_EMAIL_VERIFIED_BY_DEFAULT", True)),
        )
