# brain_api/infra/jwt/jwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from brain_api.services._shared.ports.token_codec import (
    TokenClaims,
    TokenCodec,
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    TokenTypeError,
)

_REQUIRED_CLAIMS = ["exp", "iat", "sub", "jti"]


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    Tokens carry the claim layout Flask-JWT-Extended expects (``sub``,
    ``type``, ``jti``, ``fresh``), so access tokens minted here are accepted
    by ``jwt_required()`` without a server-side lookup.

    :param secret: Signing secret (process-wide configuration).
    :param algorithm: HMAC algorithm, ``HS256`` by default.
    """

    secret: str
    algorithm: str = "HS256"

    def sign(
        self,
        *,
        subject_id: int | str,
        token_type: TokenType,
        ttl: timedelta,
        device_info: str | None = None,
        session_id: str | None = None,
    ) -> str:
        # Whole seconds: a zero or negative ttl yields exp <= iat, so the
        # token is already expired when verified at or after issuance.
        issued_at = int(datetime.now(UTC).timestamp())
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "type": token_type.value,
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
            "jti": uuid4().hex,
            "fresh": False,
        }
        if token_type is TokenType.REFRESH:
            payload["device"] = device_info
            if session_id is not None:
                payload["sid"] = session_id
        return cast(str, jwt.encode(payload, self.secret, algorithm=self.algorithm))

    def verify(self, token: str, *, expected_type: TokenType | None = None) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError("Token is invalid.") from exc

        try:
            token_type = TokenType(payload.get("type"))
        except ValueError as exc:
            raise TokenInvalidError("Token type claim is missing or unknown.") from exc

        if expected_type is not None and token_type is not expected_type:
            raise TokenTypeError(expected_type, token_type)

        return TokenClaims(
            subject_id=str(payload["sub"]),
            token_type=token_type,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            jti=str(payload["jti"]),
            device_info=payload.get("device"),
            session_id=payload.get("sid"),
        )
