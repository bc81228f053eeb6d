"""User repository: credential lookups for the authentication core."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import or_, select

from brain_api.models.user import User
from brain_api.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    """Case-fold and trim an e-mail address the way :class:`User` stores it."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User` and its refresh sessions.

    It never hashes passwords or mints tokens. Callers pass digests and
    timestamps already computed by the service layer.
    """

    model = User

    def _filterable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str, *, for_update: bool = False) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :param for_update: Lock the row for a read-modify-write use case.
        :type for_update: bool
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one(email=normalize_email(email), for_update=for_update)

    def exists_by_email_or_username(self, email: str, username: str) -> bool:
        """Return ``True`` when either identifier is already registered."""
        stmt = select(User.id).where(
            or_(User.email == normalize_email(email), User.username == username.strip())
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def get_by_reset_token_hash(self, token_hash: str, *, now: datetime) -> User | None:
        """Return the user holding an unexpired password-reset digest.

        :param token_hash: SHA-256 hex digest of the presented token.
        :param now: Reference time; tokens expiring at or before it never match.
        """
        stmt = (
            select(User)
            .where(
                User.password_reset_token_hash == token_hash,
                User.password_reset_expires > now,
            )
            .with_for_update()
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_verification_token_hash(self, token_hash: str, *, now: datetime) -> User | None:
        """Return the user holding an unexpired e-mail verification digest."""
        stmt = (
            select(User)
            .where(
                User.email_verification_token_hash == token_hash,
                User.email_verification_expires > now,
            )
            .with_for_update()
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())
