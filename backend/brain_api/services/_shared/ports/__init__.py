"""
brain_api.services._shared.ports
================================

Hexagonal ports for the authentication infrastructure.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, signing and verification of bearer tokens.
- :mod:`denylist_store`:
    :class:`~.TokenDenylistStore`, revocation of access tokens by ``jti``.
- :mod:`token_mailer`:
    :class:`~.TokenMailer`, delivery of one-time tokens.

Concrete adapters (PyJWT, Redis) live under ``brain_api.infra``.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .token_codec import (
    TokenClaims,
    TokenCodec,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    TokenTypeError,
)
from .token_mailer import LoggingTokenMailer, MailPurpose, RecordingTokenMailer, TokenMailer

__all__ = [
    "TokenCodec",
    "TokenClaims",
    "TokenType",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenTypeError",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "TokenMailer",
    "MailPurpose",
    "LoggingTokenMailer",
    "RecordingTokenMailer",
]
