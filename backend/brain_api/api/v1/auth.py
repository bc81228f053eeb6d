"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from brain_api.api.deps import (
    current_access_token,
    current_user_id,
    device_info,
    get_auth_service,
    json_body,
    json_response,
    require_auth,
    timing,
)
from brain_api.core.errors import NotFound
from brain_api.schemas import (
    ChangePasswordSchema,
    EmailSchema,
    RefreshTokenSchema,
    ResetPasswordSchema,
    SessionSchema,
    SigninSchema,
    SignupSchema,
    TokenPairSchema,
    UserSchema,
    VerifyEmailSchema,
)
from brain_api.services.auth.dto import (
    ChangePasswordIn,
    LogoutIn,
    RefreshIn,
    ResetPasswordIn,
    SigninIn,
    SignupIn,
)

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
signin_schema = SigninSchema()
refresh_token_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
email_schema = EmailSchema()
reset_password_schema = ResetPasswordSchema()
verify_email_schema = VerifyEmailSchema()
token_pair_schema = TokenPairSchema()
session_schema = SessionSchema(many=True)
user_schema = UserSchema()

FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a reset link has been sent."
RESEND_VERIFICATION_MESSAGE = (
    "If an unverified account exists with that email, a verification link has been sent."
)


@bp.post("/signup")
@timing
def signup():
    """Register a new account."""

    data = signup_schema.load(json_body())
    result = get_auth_service().signup(SignupIn(**data))
    body = {"message": "Signed up successfully.", "data": user_schema.dump(result.user)}
    return json_response(body, status=201)


@bp.post("/signin")
@timing
def signin():
    """Authenticate credentials and issue an access/refresh pair."""

    data = signin_schema.load(json_body())
    result = get_auth_service().signin(SigninIn(device_info=device_info(), **data))
    body = {
        "message": "Signed in successfully",
        "data": {
            "user": user_schema.dump(result.user),
            "tokens": token_pair_schema.dump(result.tokens),
        },
    }
    return json_response(body)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new pair."""

    data = refresh_token_schema.load(json_body())
    tokens = get_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": token_pair_schema.dump(tokens)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Close the session of the supplied refresh token and revoke the access token."""

    data = refresh_token_schema.load(json_body())
    jti, expires_at = current_access_token()
    get_auth_service().logout(
        LogoutIn(
            user_id=current_user_id(),
            refresh_token=data["refresh_token"],
            access_jti=jti,
            access_expires_at=expires_at,
        )
    )
    return json_response({"message": "Logged out successfully"})


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    """Close every session of the authenticated user."""

    jti, expires_at = current_access_token()
    removed = get_auth_service().logout_all(
        current_user_id(), access_jti=jti, access_expires_at=expires_at
    )
    return json_response(
        {"message": "Logged out from all devices successfully", "data": {"revoked": removed}}
    )


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Start a password reset; the response never reveals whether the account exists."""

    data = email_schema.load(json_body())
    get_auth_service().forgot_password(data["email"])
    return json_response({"message": FORGOT_PASSWORD_MESSAGE})


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(json_body())
    get_auth_service().reset_password(ResetPasswordIn(**data))
    return json_response({"message": "Password reset successfully"})


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Change the password, keeping only the caller's current session."""

    data = change_password_schema.load(json_body())
    get_auth_service().change_password(ChangePasswordIn(user_id=current_user_id(), **data))
    return json_response({"message": "Password changed successfully"})


@bp.post("/verify-email")
@timing
def verify_email():
    data = verify_email_schema.load(json_body())
    get_auth_service().verify_email(data["token"])
    return json_response({"message": "Email verified successfully"})


@bp.post("/resend-verification")
@timing
def resend_verification():
    data = email_schema.load(json_body())
    get_auth_service().resend_verification(data["email"])
    return json_response({"message": RESEND_VERIFICATION_MESSAGE})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user."""

    user = get_auth_service().get_current_user(current_user_id())
    return json_response({"data": user_schema.dump(user)})


@bp.get("/sessions")
@require_auth
@timing
def list_sessions():
    sessions = get_auth_service().list_sessions(current_user_id())
    return json_response({"data": session_schema.dump(sessions)})


@bp.delete("/sessions/<session_id>")
@require_auth
@timing
def revoke_session(session_id: str):
    """Sign out one device by session id."""

    if not get_auth_service().revoke_session(current_user_id(), session_id):
        raise NotFound("Session not found")
    return "", 204
