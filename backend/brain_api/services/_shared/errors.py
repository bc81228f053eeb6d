"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between repositories,
domain models, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``brain_api/core/errors.py`` via :func:`brain_api.services._shared.base.translate_service_error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    # PostgreSQL includes the constraint name, SQLite the column list
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    _, _, column = constraint_name.lower().rpartition("_")
    return bool(column) and f"users.{column}" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer translates them to APIError.
    """

    pass


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class AuthErrorKind(str, Enum):
    """Closed set of authentication failure kinds callers match on."""

    USER_EXISTS = "user_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    REFRESH_TOKEN_EXPIRED = "refresh_token_expired"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    INVALID_TOKEN_TYPE = "invalid_token_type"
    USER_NOT_FOUND = "user_not_found"
    INVALID_PASSWORD = "invalid_password"
    INVALID_RESET_TOKEN = "invalid_reset_token"
    INVALID_VERIFICATION_TOKEN = "invalid_verification_token"
    WEAK_PASSWORD = "weak_password"


# Client-safe messages. They never reveal which of two merged causes happened.
AUTH_ERROR_MESSAGES: dict[AuthErrorKind, str] = {
    AuthErrorKind.USER_EXISTS: "An account with this email or username already exists.",
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password.",
    AuthErrorKind.ACCOUNT_LOCKED: "Account is temporarily locked.",
    AuthErrorKind.REFRESH_TOKEN_EXPIRED: "Refresh token expired. Please sign in again.",
    AuthErrorKind.INVALID_REFRESH_TOKEN: "Invalid refresh token.",
    AuthErrorKind.INVALID_TOKEN_TYPE: "Invalid token type.",
    AuthErrorKind.USER_NOT_FOUND: "User not found.",
    AuthErrorKind.INVALID_PASSWORD: "Incorrect current password.",
    AuthErrorKind.INVALID_RESET_TOKEN: "Invalid or expired reset token.",
    AuthErrorKind.INVALID_VERIFICATION_TOKEN: "Invalid or expired verification token.",
    AuthErrorKind.WEAK_PASSWORD: "Password does not meet the complexity requirements.",
}


class AuthError(ServiceError):
    """
    Operational authentication failure.

    :param kind: Failure kind (see :class:`AuthErrorKind`).
    :type kind: AuthErrorKind
    :param detail: Optional client-safe detail overriding the default message.
    :type detail: str | None
    """

    def __init__(self, kind: AuthErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail or AUTH_ERROR_MESSAGES[kind]
        super().__init__(self.detail)

    def __repr__(self) -> str:
        return f"AuthError(kind={self.kind.name})"
