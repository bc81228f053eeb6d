"""Application factory wiring Flask extensions, auth components and blueprints."""

from __future__ import annotations

from flask import Flask

from brain_api.core.config import BaseConfig, get_config
from brain_api.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
    overrides: dict | None = None,
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object, class or import path. Defaults to the class
        selected by ``APP_ENV``.
    :param overrides: Extra settings applied last (tests inject collaborators
        such as ``AUTH_TOKEN_MAILER`` this way).
    :raises RuntimeError: When ``JWT_SECRET_KEY`` is not configured.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    if overrides:
        app.config.update(overrides)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from brain_api.core import proxy

    proxy.init_app(app)

    from brain_api.core import extensions

    extensions.init_app(app)

    # Token codec, denylist and mailer depend on the Redis client above
    from brain_api.core import auth

    auth.init_app(app)

    init_logging(app)

    from brain_api.core import cors

    cors.init_app(app)

    from brain_api.api import init_app as init_api

    init_api(app)

    from brain_api.core import errors

    errors.init_app(app)

    from brain_api import cli as app_cli

    app_cli.init_app(app)

    return app
