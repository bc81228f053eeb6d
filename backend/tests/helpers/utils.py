"""Tiny helpers shared across test modules."""

from __future__ import annotations

from datetime import timedelta

from brain_api.models.base import utcnow
from brain_api.models.user import User


def expire_all_sessions(session, user: User, *, ago: timedelta = timedelta(seconds=1)) -> None:
    """Move every stored session expiry of ``user`` into the past and commit.

    The embedded JWT expiry is left untouched, so only the stored check fires.
    """
    session.refresh(user)
    for entry in user.sessions:
        entry.expires_at = utcnow() - ago
    session.commit()


def reload_user(session, user_id: int) -> User:
    """Fetch a fresh copy of a user, bypassing the identity map."""
    session.expire_all()
    user = session.get(User, user_id)
    assert user is not None
    return user
