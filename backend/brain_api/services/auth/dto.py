# brain_api/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignupIn:
    """
    Input DTO for account registration.

    :param username: Public handle (3-30 characters).
    :type username: str
    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password (policy-checked, then hashed).
    :type password: str
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SigninIn:
    """
    Input DTO for sign-in.

    :param email: Login email.
    :type email: str
    :param password: Raw password to verify.
    :type password: str
    :param device_info: Client descriptor stored on the new session.
    :type device_info: str | None
    """

    email: str
    password: str
    device_info: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for single-device logout.

    The refresh token is mandatory: it identifies the session to revoke.

    :param user_id: Authenticated user (from the access token).
    :type user_id: int
    :param refresh_token: Refresh token of the session being closed.
    :type refresh_token: str
    :param access_jti: ``jti`` of the access token used for the call.
    :type access_jti: str | None
    :param access_expires_at: Expiry of that access token.
    :type access_expires_at: datetime | None
    """

    user_id: int
    refresh_token: str
    access_jti: str | None = None
    access_expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    """
    Input DTO for an authenticated password change.

    :param user_id: Authenticated user.
    :type user_id: int
    :param current_password: Old password, re-verified.
    :type current_password: str
    :param new_password: Replacement password (policy-checked).
    :type new_password: str
    :param refresh_token: Caller's current refresh token; its session survives.
    :type refresh_token: str | None
    """

    user_id: int
    current_password: str
    new_password: str
    refresh_token: str | None = None


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    """
    Input DTO for consuming a password reset token.

    :param token: Raw reset token received by e-mail.
    :type token: str
    :param new_password: Replacement password (policy-checked).
    :type new_password: str
    """

    token: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    User representation without password or token material.
    """

    id: int
    username: str
    email: str
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class SignupOut:
    """
    Output DTO for registration.

    :param user: Created user.
    :type user: UserPublicOut
    :param verification_token: Raw verification token when e-mail is not
        verified by default; ``None`` otherwise. Delivered through the mailer.
    :type verification_token: str | None
    """

    user: UserPublicOut
    verification_token: str | None = None


@dataclass(frozen=True, slots=True)
class SigninOut:
    """
    Output DTO for sign-in.
    """

    user: UserPublicOut
    tokens: TokenPairOut


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Active refresh session as shown to its owner (no token hash).
    """

    session_id: str
    device_info: str | None
    created_at: datetime
    last_active_at: datetime
    expires_at: datetime
