"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`brain_api.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``brain_api.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Errors (from ``brain_api.services._shared.errors``)
    * :class:`ServiceError`, :class:`AuthError`, :class:`AuthErrorKind`

- Authentication (from ``brain_api.services.auth``)
    * :class:`AuthService`, :class:`AuthSettings`
    * DTOs: :class:`SignupIn`, :class:`SigninIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`ChangePasswordIn`, :class:`ResetPasswordIn`,
      :class:`TokenPairOut`, :class:`UserPublicOut`, :class:`SignupOut`,
      :class:`SigninOut`, :class:`SessionOut`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext
from ._shared.errors import AuthError, AuthErrorKind, ServiceError

# Authentication service + DTOs
from .auth import (
    AuthService,
    AuthSettings,
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

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Errors
    "ServiceError",
    "AuthError",
    "AuthErrorKind",
    # Auth
    "AuthService",
    "AuthSettings",
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
