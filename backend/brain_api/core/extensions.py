"""Flask extension singletons and the optional Redis connection."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION_KEY = "brain_redis"

# Constraint names must match the migration revisions (uq_users_email, ...)
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    session_options={"autoflush": False},
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def init_app(app: Flask) -> None:
    """Bind the database, migrations and JWT verification to ``app``.

    When ``REDIS_URL`` is configured a client is created and pinged once;
    an unreachable server aborts startup instead of silently falling back to
    the per-process denylist.

    :raises RuntimeError: When Redis is configured but unreachable.
    """
    db.init_app(app)

    # Alembic autogenerate needs every mapped table registered on the metadata
    from brain_api import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    app.extensions[REDIS_EXTENSION_KEY] = _connect_redis(app)


def _connect_redis(app: Flask) -> redis.Redis | None:
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        return None

    client = redis.Redis.from_url(
        redis_url,
        socket_timeout=app.config.get("REDIS_SOCKET_TIMEOUT", 2.0),
        socket_connect_timeout=app.config.get("REDIS_SOCKET_TIMEOUT", 2.0),
    )
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.logger.info("redis denylist backend connected")
    return client


def get_redis(app: Flask | None = None) -> redis.Redis | None:
    """Return the Redis client of ``app`` (default: current app), or ``None``."""
    target = app or current_app
    return target.extensions.get(REDIS_EXTENSION_KEY)
