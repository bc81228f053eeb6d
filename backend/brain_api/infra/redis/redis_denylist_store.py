from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]


class RedisTokenDenylistStore:
    """
    Access-token denylist stored as Redis keys that expire with the token.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "brain:deny:at"):
        self.r = r
        self.prefix = prefix

    def _k(self, jti: str) -> str:
        return f"{self.prefix}:{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        now = datetime.now(UTC).timestamp()
        ttl = int(expires_at.timestamp() - now)
        if ttl <= 0:
            # Already expired; the codec rejects it without a denylist entry.
            return
        self.r.set(self._k(jti), "1", ex=ttl)
