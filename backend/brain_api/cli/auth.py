"""Flask CLI commands for operator-side account management."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from brain_api.core.auth import get_components
from brain_api.services._shared.base import ServiceContext
from brain_api.services._shared.errors import AuthError
from brain_api.services.auth.dto import SignupIn
from brain_api.services.auth.service import AuthService

LOGGER = logging.getLogger(__name__)

CLI_DEVICE_INFO = "flask-cli"


def _service() -> AuthService:
    """Build an auth service bound to the current application."""
    return get_components(current_app).service(ServiceContext(device_info=CLI_DEVICE_INFO))


@click.group("auth")
def auth_cli() -> None:
    """Account and session administration commands."""


@auth_cli.command("create-user")
@click.option("--username", required=True, help="Public handle (3-30 characters).")
@click.option("--email", required=True, help="Login e-mail address.")
@click.password_option(help="Initial password; prompted when omitted.")
@with_appcontext
def create_user_command(username: str, email: str, password: str) -> None:
    """Register an account, bypassing the HTTP surface."""
    try:
        result = _service().signup(SignupIn(username=username, email=email, password=password))
    except AuthError as exc:
        raise click.ClickException(exc.detail) from exc
    except ValueError as exc:
        # Model validators reject malformed e-mail or username.
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created user id={result.user.id} email={result.user.email}")
    if result.verification_token is not None:
        click.echo("E-mail verification pending; a token was handed to the mailer.")


@auth_cli.command("revoke-sessions")
@click.argument("email")
@with_appcontext
def revoke_sessions_command(email: str) -> None:
    """Close every refresh session of the account registered under EMAIL."""
    service = _service()
    try:
        user_id = service.find_user_id(email)
        if user_id is None:
            raise click.ClickException(f"No account registered under {email!r}.")
        removed = service.logout_all(user_id)
    except AuthError as exc:
        raise click.ClickException(exc.detail) from exc
    LOGGER.info(
        "sessions revoked from CLI",
        extra={"event": "auth.cli.revoke_sessions", "user_id": user_id, "removed": removed},
    )
    click.echo(f"Revoked {removed} session(s) for user id={user_id}")
