"""Opaque token generation and one-way digests for stored token material."""

from __future__ import annotations

import hashlib
import secrets

OPAQUE_TOKEN_BYTES = 32


def new_opaque_token() -> str:
    """Return a high-entropy random token (32 bytes, hex encoded)."""
    return secrets.token_hex(OPAQUE_TOKEN_BYTES)


def token_digest(raw: str) -> str:
    """
    SHA-256 hex digest of a raw token.

    Only digests are persisted, so a leaked database row cannot be replayed.
    """
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
