"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    EmailSchema,
    RefreshTokenSchema,
    ResetPasswordSchema,
    SessionSchema,
    SigninSchema,
    SignupSchema,
    TokenPairSchema,
    VerifyEmailSchema,
)
from .user import UserSchema

__all__ = [
    "SignupSchema",
    "SigninSchema",
    "RefreshTokenSchema",
    "ChangePasswordSchema",
    "EmailSchema",
    "ResetPasswordSchema",
    "VerifyEmailSchema",
    "TokenPairSchema",
    "SessionSchema",
    "UserSchema",
]
