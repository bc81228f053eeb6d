"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from brain_api.models.user import USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH

# Upper bound only; the password policy itself is enforced by the service.
_password = validate.Length(min=1, max=128)


class SignupSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=USERNAME_MIN_LENGTH, max=USERNAME_MAX_LENGTH),
            validate.Regexp(
                r"^[a-zA-Z0-9_ ]+$",
                error="Username can only contain letters, numbers, underscores and spaces.",
            ),
        ],
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=_password)


class SigninSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=_password)


class RefreshTokenSchema(Schema):
    """Body carrying a refresh token (refresh and logout)."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, validate=_password)
    new_password = fields.String(required=True, validate=_password)
    refresh_token = fields.String(load_default=None)


class EmailSchema(Schema):
    """Body of forgot-password and resend-verification."""

    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=_password)


class VerifyEmailSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=128))


class TokenPairSchema(Schema):
    """Response payload with an access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    expires_in = fields.Integer(required=True)
    token_type = fields.Constant("Bearer")


class SessionSchema(Schema):
    """Active refresh session as listed to its owner."""

    session_id = fields.String(required=True)
    device_info = fields.String(allow_none=True)
    created_at = fields.DateTime(required=True)
    last_active_at = fields.DateTime(required=True)
    expires_at = fields.DateTime(required=True)
