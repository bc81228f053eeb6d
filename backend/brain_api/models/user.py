"""User model: the credential record behind every Second Brain account."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from brain_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from .refresh_session import RefreshSession


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity and credential record.

    Fields
    ------
    username : str
        Public handle, 3-30 characters, unique.
    email : str
        Login email. Stored normalized (lowercase, trimmed), unique.
    password_hash : str
        bcrypt hash. The plaintext is never stored.
    sessions : list[RefreshSession]
        Active refresh sessions in insertion order (oldest first).
    login_attempts : int
        Consecutive failed sign-in attempts.
    lock_until : datetime | None
        End of the current lockout window.
    is_email_verified : bool
        Whether the e-mail address was confirmed.
    email_verification_token_hash / email_verification_expires
        SHA-256 digest of the outstanding verification token and its expiry.
    password_reset_token_hash / password_reset_expires
        SHA-256 digest of the outstanding reset token and its expiry.
    """

    __tablename__ = "users"

    # Identity
    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    # Lockout
    login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lock_until: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # E-mail verification
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verification_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email_verification_expires: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    # Password reset
    password_reset_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    password_reset_expires: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    sessions: Mapped[list[RefreshSession]] = relationship(
        "RefreshSession",
        back_populates="user",
        order_by="RefreshSession.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_password_reset_token_hash", "password_reset_token_hash"),
        Index("ix_users_email_verification_token_hash", "email_verification_token_hash"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate username.

        :param key: Field name (``username``).
        :type key: str
        :param value: Username to normalize.
        :type value: str
        :returns: Trimmed username.
        :rtype: str
        :raises ValueError: If username is missing or outside 3-30 characters.
        """
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not USERNAME_MIN_LENGTH <= len(v) <= USERNAME_MAX_LENGTH:
            raise ValueError(
                f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters."
            )
        return v

    # -------------------- Password reset / verification --------------------
    def clear_password_reset(self) -> None:
        """Drop the outstanding password reset token."""
        self.password_reset_token_hash = None
        self.password_reset_expires = None

    def clear_email_verification(self) -> None:
        """Drop the outstanding e-mail verification token."""
        self.email_verification_token_hash = None
        self.email_verification_expires = None
