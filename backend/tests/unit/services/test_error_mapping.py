"""Unit tests for service error translation into HTTP problems."""

from __future__ import annotations

from http import HTTPStatus

import pytest

from brain_api.core.errors import APIError, NotFound
from brain_api.services._shared.base import AUTH_ERROR_STATUS, translate_service_error
from brain_api.services._shared.errors import (
    AUTH_ERROR_MESSAGES,
    AuthError,
    AuthErrorKind,
    NotFoundError,
    ServiceError,
)


def test_every_kind_has_a_status_and_message():
    assert set(AUTH_ERROR_STATUS) == set(AuthErrorKind)
    assert set(AUTH_ERROR_MESSAGES) == set(AuthErrorKind)


@pytest.mark.parametrize(
    ("kind", "status"),
    [
        (AuthErrorKind.USER_EXISTS, HTTPStatus.FORBIDDEN),
        (AuthErrorKind.INVALID_CREDENTIALS, HTTPStatus.FORBIDDEN),
        (AuthErrorKind.ACCOUNT_LOCKED, HTTPStatus.LOCKED),
        (AuthErrorKind.REFRESH_TOKEN_EXPIRED, HTTPStatus.UNAUTHORIZED),
        (AuthErrorKind.INVALID_REFRESH_TOKEN, HTTPStatus.UNAUTHORIZED),
        (AuthErrorKind.INVALID_TOKEN_TYPE, HTTPStatus.UNAUTHORIZED),
        (AuthErrorKind.USER_NOT_FOUND, HTTPStatus.UNAUTHORIZED),
        (AuthErrorKind.INVALID_PASSWORD, HTTPStatus.FORBIDDEN),
        (AuthErrorKind.INVALID_RESET_TOKEN, HTTPStatus.BAD_REQUEST),
        (AuthErrorKind.INVALID_VERIFICATION_TOKEN, HTTPStatus.BAD_REQUEST),
        (AuthErrorKind.WEAK_PASSWORD, HTTPStatus.BAD_REQUEST),
    ],
)
def test_auth_error_translation(kind, status):
    api_error = translate_service_error(AuthError(kind))

    assert isinstance(api_error, APIError)
    assert api_error.status_code == status
    assert api_error.code == kind.value
    assert api_error.message == AUTH_ERROR_MESSAGES[kind]


def test_detail_overrides_default_message():
    api_error = translate_service_error(
        AuthError(AuthErrorKind.WEAK_PASSWORD, detail="Password must have 8-20 characters.")
    )
    assert api_error.message == "Password must have 8-20 characters."


def test_not_found_translation():
    api_error = translate_service_error(NotFoundError("User", 3))
    assert isinstance(api_error, NotFound)
    assert api_error.status_code == HTTPStatus.NOT_FOUND


def test_generic_service_error_is_bad_request():
    api_error = translate_service_error(ServiceError("nope"))
    assert api_error.status_code == 400
    assert api_error.code == "bad_request"


def test_auth_error_repr_hides_detail():
    assert repr(AuthError(AuthErrorKind.INVALID_CREDENTIALS)) == (
        "AuthError(kind=INVALID_CREDENTIALS)"
    )
