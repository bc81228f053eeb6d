"""Unit tests for auth settings and the application wiring of auth components."""

from __future__ import annotations

from datetime import timedelta

import pytest

from brain_api.core.auth import get_components
from brain_api.core.config import TestingConfig, env_bool, env_int
from brain_api.factory import create_app
from brain_api.infra.jwt.jwt_token_codec import JWTTokenCodec
from brain_api.services._shared.ports import InMemoryDenylistStore, RecordingTokenMailer
from brain_api.services.auth.settings import AuthSettings


def test_from_mapping_reads_auth_keys():
    settings = AuthSettings.from_mapping(
        {
            "JWT_SECRET_KEY": "s" * 40,
            "AUTH_ACCESS_TOKEN_MINUTES": 5,
            "AUTH_REFRESH_TOKEN_DAYS": 7,
            "AUTH_BCRYPT_ROUNDS": 4,
            "AUTH_MAX_SESSIONS": 3,
            "AUTH_LOCKOUT_THRESHOLD": 4,
            "AUTH_LOCKOUT_MINUTES": 10,
            "AUTH_RESET_TOKEN_MINUTES": 30,
            "AUTH_VERIFICATION_TOKEN_HOURS": 12,
            "AUTH_EMAIL_VERIFIED_BY_DEFAULT": False,
        }
    )

    assert settings.access_token_ttl == timedelta(minutes=5)
    assert settings.refresh_token_ttl == timedelta(days=7)
    assert settings.bcrypt_rounds == 4
    assert settings.max_sessions == 3
    assert settings.lockout_threshold == 4
    assert settings.lockout_duration == timedelta(minutes=10)
    assert settings.reset_token_ttl == timedelta(minutes=30)
    assert settings.verification_token_ttl == timedelta(hours=12)
    assert settings.email_verified_by_default is False


def test_defaults():
    settings = AuthSettings(jwt_secret="s" * 40)

    assert settings.access_token_ttl == timedelta(minutes=15)
    assert settings.refresh_token_ttl == timedelta(days=30)
    assert settings.bcrypt_rounds == 12
    assert settings.max_sessions == 5
    assert settings.lockout_threshold == 5
    assert settings.lockout_duration == timedelta(minutes=15)
    assert settings.reset_token_ttl == timedelta(hours=1)
    assert settings.verification_token_ttl == timedelta(hours=24)


@pytest.mark.parametrize("secret", [None, "", "   "])
def test_missing_secret_fails_fast(secret):
    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        AuthSettings.from_mapping({"JWT_SECRET_KEY": secret})


@pytest.mark.parametrize(
    "overrides",
    [{"bcrypt_rounds": 3}, {"max_sessions": 0}, {"lockout_threshold": 0}, {"jwt_algorithm": "RS256"}],
)
def test_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        AuthSettings(jwt_secret="s" * 40, **overrides)


def test_app_factory_refuses_to_start_without_secret():
    class NoSecretConfig(TestingConfig):
        JWT_SECRET_KEY = None

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        create_app(NoSecretConfig)


def test_app_components(app):
    components = get_components(app)

    assert isinstance(components.codec, JWTTokenCodec)
    assert isinstance(components.denylist, InMemoryDenylistStore)
    assert isinstance(components.mailer, RecordingTokenMailer)
    assert components.settings.bcrypt_rounds == 4
    assert components.hasher.rounds == 4


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("BRAIN_FLAG", "Yes")
    monkeypatch.setenv("BRAIN_NUMBER", " 42 ")
    monkeypatch.setenv("BRAIN_BAD_NUMBER", "forty")

    assert env_bool("BRAIN_FLAG") is True
    assert env_bool("BRAIN_UNSET_FLAG", default=True) is True
    assert env_int("BRAIN_NUMBER", 1) == 42
    assert env_int("BRAIN_UNSET_NUMBER", 7) == 7
    with pytest.raises(ValueError, match="BRAIN_BAD_NUMBER"):
        env_int("BRAIN_BAD_NUMBER", 1)
