from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from brain_api.services._shared.errors import ServiceError


class TokenType(str, Enum):
    """Type tag embedded in every bearer token."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified token payload.

    :ivar subject_id: User identifier (string form of the primary key).
    :ivar token_type: Access or refresh.
    :ivar issued_at: Issuance time (UTC).
    :ivar expires_at: Expiry time (UTC).
    :ivar jti: Unique token identifier.
    :ivar device_info: Device descriptor captured at mint time (refresh only).
    :ivar session_id: Refresh session identifier (refresh only).
    """

    subject_id: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str
    device_info: str | None = None
    session_id: str | None = None


class TokenError(ServiceError):
    """Base class for codec verification failures."""


class TokenExpiredError(TokenError):
    """The token is past its ``exp`` claim."""


class TokenInvalidError(TokenError):
    """The token is malformed, tampered or was not produced by this codec."""


class TokenTypeError(TokenError):
    """The token carries a different type tag than the one required."""

    def __init__(self, expected: TokenType, actual: TokenType) -> None:
        super().__init__(f"Expected a {expected.value} token, got {actual.value}.")
        self.expected = expected
        self.actual = actual


class TokenCodec(Protocol):
    """Port for minting and verifying signed, expiring bearer tokens."""

    def sign(
        self,
        *,
        subject_id: int | str,
        token_type: TokenType,
        ttl: timedelta,
        device_info: str | None = None,
        session_id: str | None = None,
    ) -> str:
        """Mint a token for ``subject_id`` that expires after ``ttl``."""
        ...

    def verify(self, token: str, *, expected_type: TokenType | None = None) -> TokenClaims:
        """
        Verify signature, expiry and (optionally) type.

        :raises TokenExpiredError: When the token is past its expiry.
        :raises TokenInvalidError: When the token is malformed or tampered.
        :raises TokenTypeError: When ``expected_type`` does not match.
        """
        ...
