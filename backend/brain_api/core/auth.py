"""Authentication wiring: settings, token codec, denylist, mailer and JWT callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from flask import Flask, current_app
from flask_jwt_extended.exceptions import WrongTokenError

from brain_api.core.errors import problem_response
from brain_api.core.extensions import get_redis, jwt
from brain_api.infra.jwt.jwt_token_codec import JWTTokenCodec
from brain_api.infra.redis.redis_denylist_store import RedisTokenDenylistStore
from brain_api.services._shared.base import ServiceContext
from brain_api.services._shared.ports.denylist_store import (
    InMemoryDenylistStore,
    TokenDenylistStore,
)
from brain_api.services._shared.ports.token_codec import TokenCodec
from brain_api.services._shared.ports.token_mailer import LoggingTokenMailer, TokenMailer
from brain_api.services.auth.passwords import PasswordHasher
from brain_api.services.auth.service import AuthService
from brain_api.services.auth.settings import AuthSettings

EXTENSION_KEY = "brain_auth"


@dataclass(frozen=True, slots=True)
class AuthComponents:
    """
    Process-wide auth collaborators, built once per application.

    :param settings: Immutable auth configuration.
    :param codec: Bearer token codec.
    :param denylist: Access-token denylist.
    :param mailer: One-time token delivery channel.
    :param hasher: Shared password hasher (keeps its dummy hash warm).
    """

    settings: AuthSettings
    codec: TokenCodec
    denylist: TokenDenylistStore
    mailer: TokenMailer
    hasher: PasswordHasher

    def service(self, ctx: ServiceContext | None = None) -> AuthService:
        return AuthService(
            settings=self.settings,
            codec=self.codec,
            denylist=self.denylist,
            mailer=self.mailer,
            hasher=self.hasher,
            ctx=ctx,
        )


def get_components(app: Flask | None = None) -> AuthComponents:
    target = app or current_app
    return target.extensions[EXTENSION_KEY]


def init_app(app: Flask) -> None:
    """
    Build the auth components and register Flask-JWT-Extended callbacks.

    Must run after :func:`brain_api.core.extensions.init_app` so the Redis
    client (when configured) is available.

    :raises RuntimeError: When ``JWT_SECRET_KEY`` is missing.
    """
    settings = AuthSettings.from_mapping(app.config)

    redis_client = get_redis(app)
    denylist: TokenDenylistStore
    if redis_client is not None:
        denylist = RedisTokenDenylistStore(redis_client)
    else:
        denylist = InMemoryDenylistStore()

    mailer = app.config.get("AUTH_TOKEN_MAILER") or LoggingTokenMailer()

    app.extensions[EXTENSION_KEY] = AuthComponents(
        settings=settings,
        codec=JWTTokenCodec(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm),
        denylist=denylist,
        mailer=mailer,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
    )
    _register_jwt_callbacks(app)


def _jwt_problem(status: HTTPStatus, code: str, message: str):
    return problem_response(status=int(status), code=code, message=message)


def _register_jwt_callbacks(app: Flask) -> None:
    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        jti = jwt_payload.get("jti")
        return bool(jti) and get_components().denylist.is_revoked(str(jti))

    @jwt.expired_token_loader
    def _expired(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _jwt_problem(HTTPStatus.UNAUTHORIZED, "token_expired", "Token expired")

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        return _jwt_problem(HTTPStatus.UNAUTHORIZED, "invalid_token", "Invalid or expired token")

    @jwt.unauthorized_loader
    def _missing(reason: str):
        return _jwt_problem(HTTPStatus.UNAUTHORIZED, "unauthorized", "No token provided")

    @jwt.revoked_token_loader
    def _revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _jwt_problem(HTTPStatus.UNAUTHORIZED, "token_revoked", "Token has been revoked")

    @app.errorhandler(WrongTokenError)
    def _wrong_type(err: WrongTokenError):
        # A refresh token presented where an access token is required.
        return _jwt_problem(HTTPStatus.UNAUTHORIZED, "invalid_token_type", "Invalid token type")
