"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from brain_api.core.auth import get_components
from brain_api.core.errors import APIError
from brain_api.core.logger import ensure_request_id
from brain_api.services._shared.base import ServiceContext
from brain_api.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

USER_AGENT_MAX_LENGTH = 100


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def json_body() -> dict[str, Any]:
    """Return the request JSON object (empty dict when absent or not an object)."""

    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, non-revoked JWT **access** token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the authenticated user id from the verified access token."""

    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError) as exc:
        raise APIError("Invalid token subject", status_code=401, code="invalid_token") from exc


def current_access_token() -> tuple[str | None, datetime | None]:
    """Return ``(jti, expires_at)`` of the verified access token."""

    claims = get_jwt() or {}
    exp = claims.get("exp")
    expires_at = datetime.fromtimestamp(int(exp), tz=UTC) if exp is not None else None
    return claims.get("jti"), expires_at


def device_info() -> str:
    """Describe the calling client as ``<user agent> - <address>``."""

    user_agent = (request.headers.get("User-Agent") or "Unknown")[:USER_AGENT_MAX_LENGTH]
    address = request.remote_addr or "Unknown"
    return f"{user_agent} - {address}"


def get_auth_service() -> AuthService:
    """Build an :class:`AuthService` bound to the current request context."""

    ctx = ServiceContext(request_id=ensure_request_id(), device_info=device_info())
    return get_components().service(ctx)
