"""Authentication and session lifecycle core.

Components
----------
- :class:`AuthService`: façade used by the HTTP layer and the CLI.
- :class:`SessionManager`: refresh sessions (issue, rotate, evict, revoke).
- :class:`LockoutGuard`: brute-force lockout.
- :class:`PasswordResetFlow` / :class:`EmailVerificationFlow`: one-time tokens.
- :class:`PasswordHasher`: bcrypt hashing and the password policy.
"""

from __future__ import annotations

from .dto import (
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
from .lockout import LockoutGuard
from .one_time import EmailVerificationFlow, PasswordResetFlow
from .passwords import PasswordHasher, password_policy_violations
from .service import AuthService
from .sessions import SessionManager
from .settings import AuthSettings

__all__ = [
    "AuthService",
    "AuthSettings",
    "SessionManager",
    "LockoutGuard",
    "PasswordResetFlow",
    "EmailVerificationFlow",
    "PasswordHasher",
    "password_policy_violations",
    "SignupIn",
    "SigninIn",
    "RefreshIn",
    "LogoutIn",
    "ChangePasswordIn",
    "ResetPasswordIn",
    "TokenPairOut",
    "UserPublicOut",
    "SignupOut",
    "SigninOut",
    "SessionOut",
]
