from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of **access tokens** keyed by ``jti``.

    Entries only need to live until the token's own expiry; after that the
    codec rejects the token anyway. Methods are idempotent.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...


class InMemoryDenylistStore(TokenDenylistStore):
    """Process-local denylist used when Redis is not configured and in tests."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}

    def is_revoked(self, jti: str) -> bool:
        expires_at = self._revoked.get(jti)
        if expires_at is None:
            return False
        if expires_at <= datetime.now(UTC):
            del self._revoked[jti]
            return False
        return True

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        self._purge()
        self._revoked[jti] = expires_at

    def _purge(self) -> None:
        now = datetime.now(UTC)
        for jti in [k for k, exp in self._revoked.items() if exp <= now]:
            del self._revoked[jti]
