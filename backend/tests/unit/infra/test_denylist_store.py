"""
Unit tests for the access-token denylist backends.

The Redis store runs against fakeredis.FakeRedis so tests stay in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from brain_api.infra.redis.redis_denylist_store import RedisTokenDenylistStore
from brain_api.services._shared.ports.denylist_store import InMemoryDenylistStore


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture(params=["memory", "redis"])
def store(request, fake_redis):
    if request.param == "redis":
        return RedisTokenDenylistStore(fake_redis)
    return InMemoryDenylistStore()


def test_revoke_then_is_revoked(store):
    assert store.is_revoked("jti-1") is False

    store.revoke_jti(jti="jti-1", expires_at=_now() + timedelta(minutes=15))

    assert store.is_revoked("jti-1") is True
    assert store.is_revoked("jti-2") is False


def test_revoke_is_idempotent(store):
    expires_at = _now() + timedelta(minutes=5)
    store.revoke_jti(jti="jti-1", expires_at=expires_at)
    store.revoke_jti(jti="jti-1", expires_at=expires_at)

    assert store.is_revoked("jti-1") is True


def test_already_expired_token_is_not_stored(store):
    store.revoke_jti(jti="old", expires_at=_now() - timedelta(seconds=10))

    assert store.is_revoked("old") is False


def test_redis_entry_expires_with_token(fake_redis):
    store = RedisTokenDenylistStore(fake_redis, prefix="test:deny")

    store.revoke_jti(jti="abc", expires_at=_now() + timedelta(minutes=15))

    ttl = fake_redis.ttl("test:deny:abc")
    assert 0 < ttl <= 15 * 60


def test_memory_entry_lapses_after_expiry(freeze_time):
    store = InMemoryDenylistStore()
    with freeze_time("2024-01-01 12:00:00") as frozen:
        store.revoke_jti(jti="abc", expires_at=_now() + timedelta(minutes=15))
        assert store.is_revoked("abc") is True

        frozen.tick(timedelta(minutes=15))
        assert store.is_revoked("abc") is False
