"""Factory Boy definitions for :class:`brain_api.models.user.User` and its sessions."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import factory

from brain_api.models.base import utcnow
from brain_api.models.refresh_session import RefreshSession
from brain_api.models.user import User
from brain_api.services.auth.passwords import PasswordHasher
from brain_api.services.auth.tokens import new_opaque_token, token_digest
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"

# Minimum cost: hashing stays cheap and matches the test settings
_HASHER = PasswordHasher(rounds=4)


class UserFactory(BaseFactory):
    """
    Build persisted :class:`brain_api.models.user.User` instances.

    Notes
    -----
    - Pass ``password=...`` to hash a specific plaintext; the plaintext itself
      never reaches the model.
    - Accounts are verified and unlocked by default.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"user_{n}")
    password_hash = factory.LazyAttribute(lambda o: _HASHER.hash(o.password))
    login_attempts = 0
    lock_until = None
    is_email_verified = True


class RefreshSessionFactory(BaseFactory):
    """Build a stored refresh session with an opaque (non-JWT) token digest."""

    class Meta:
        model = RefreshSession

    id = None
    user = factory.SubFactory(UserFactory)
    session_id = factory.LazyFunction(lambda: uuid4().hex)
    token_hash = factory.LazyFunction(lambda: token_digest(new_opaque_token()))
    device_info = factory.Faker("user_agent")
    created_at = factory.LazyFunction(utcnow)
    last_active_at = factory.LazyAttribute(lambda o: o.created_at)
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(days=30))
