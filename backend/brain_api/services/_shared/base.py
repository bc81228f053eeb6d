# brain_api/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus

from brain_api.core import errors as api_errors
from brain_api.models.base import utcnow
from brain_api.services._shared.errors import (
    AuthError,
    AuthErrorKind,
    NotFoundError,
    ServiceError,
)
from brain_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

# Every AuthErrorKind must appear here; tests enforce it.
AUTH_ERROR_STATUS: dict[AuthErrorKind, HTTPStatus] = {
    AuthErrorKind.USER_EXISTS: HTTPStatus.FORBIDDEN,
    AuthErrorKind.INVALID_CREDENTIALS: HTTPStatus.FORBIDDEN,
    AuthErrorKind.ACCOUNT_LOCKED: HTTPStatus.LOCKED,
    AuthErrorKind.REFRESH_TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    AuthErrorKind.INVALID_REFRESH_TOKEN: HTTPStatus.UNAUTHORIZED,
    AuthErrorKind.INVALID_TOKEN_TYPE: HTTPStatus.UNAUTHORIZED,
    AuthErrorKind.USER_NOT_FOUND: HTTPStatus.UNAUTHORIZED,
    AuthErrorKind.INVALID_PASSWORD: HTTPStatus.FORBIDDEN,
    AuthErrorKind.INVALID_RESET_TOKEN: HTTPStatus.BAD_REQUEST,
    AuthErrorKind.INVALID_VERIFICATION_TOKEN: HTTPStatus.BAD_REQUEST,
    AuthErrorKind.WEAK_PASSWORD: HTTPStatus.BAD_REQUEST,
}


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    :param device_info: Client descriptor (user agent + address) for new sessions.
    """

    actor_id: int | None = None
    request_id: str | None = None
    device_info: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Provide the service clock (:meth:`now_utc`) so tests can freeze it.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Raising inside ``with self.rw_uow()`` rolls the transaction back. State
      that must survive a failure (lockout counters, reaped sessions) is
      committed first and the error raised after the block.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work (commits on clean exit).

        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    @staticmethod
    def now_utc() -> datetime:
        return utcnow()


def translate_service_error(exc: ServiceError) -> api_errors.APIError:
    """
    Map a service-level error to an API-level (HTTP) error.

    :param exc: Exception raised within the service layer.
    :returns: :class:`~brain_api.core.errors.APIError` ready to render.
    """
    if isinstance(exc, AuthError):
        return api_errors.APIError(
            message=exc.detail,
            status_code=AUTH_ERROR_STATUS[exc.kind],
            code=exc.kind.value,
        )

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    # Any other ServiceError subclass -> 400 Bad Request
    return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")
