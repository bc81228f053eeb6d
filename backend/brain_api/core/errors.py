"""RFC 7807 problem+json rendering for every error that leaves the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from brain_api.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    423: "locked",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a Problem Details document.

    :param status: HTTP status code.
    :param code: Stable machine-readable code (``invalid_credentials``, ...).
    :param message: Client-safe summary; never contains token or hash material.
    :param details: Optional structured payload (validation messages).
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def _render(problem: dict[str, Any], *, exc_info: bool = False) -> tuple[Response, int]:
    status = int(problem["status"])
    if status >= 500:
        log.error(
            "request failed: code=%s status=%s request_id=%s",
            problem["code"],
            status,
            problem["request_id"],
            exc_info=exc_info,
        )
    else:
        log.warning(
            "request rejected: code=%s status=%s request_id=%s",
            problem["code"],
            status,
            problem["request_id"],
        )
    resp = jsonify(problem)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


def problem_response(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """Problem response for callers outside Flask error handlers (JWT loaders)."""
    return _render(_as_problem(status=status, code=code, message=message, details=details))


class APIError(Exception):
    """
    Error already shaped for HTTP.

    :param message: Client-facing description.
    :param status_code: HTTP status (``400`` by default).
    :param code: Machine-readable code.
    :param details: Optional structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class NotFound(APIError):
    """404 for resources the caller cannot see (e.g. another user's session)."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


def init_app(app: Flask) -> None:
    """
    Register the problem+json error handlers.

    Auth failures arrive as :class:`~brain_api.services._shared.errors.ServiceError`
    and are mapped by :func:`~brain_api.services._shared.base.translate_service_error`.
    Database errors never expose driver messages.
    """
    from brain_api.services._shared.base import translate_service_error
    from brain_api.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _render(err.to_problem())

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return _render(translate_service_error(err).to_problem())

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        code = STATUS_CODES.get(status, "error")
        return _render(_as_problem(status=status, code=code, message=message))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        return _render(problem)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        problem = _as_problem(
            status=HTTPStatus.CONFLICT, code="conflict", message="Resource conflict"
        )
        log.error("integrity error", exc_info=True)
        return _render(problem)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        return _render(problem, exc_info=True)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        return _render(problem, exc_info=True)
