"""Refresh session model: one row per logged-in device."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brain_api.core.extensions import db

from .base import PKMixin, ReprMixin, UTCDateTime, utcnow

if TYPE_CHECKING:
    from .user import User


class RefreshSession(PKMixin, ReprMixin, db.Model):
    """
    Server-side state for a refresh token.

    The surrogate ``id`` doubles as the insertion order used for FIFO
    eviction. Rotation rewrites ``token_hash``/``expires_at`` in place, so a
    session keeps its ``session_id`` and its position for its whole life.

    Fields
    ------
    session_id : str
        Random identifier, stable across rotations.
    token_hash : str
        SHA-256 hex digest of the current refresh token.
    device_info : str | None
        Truncated client descriptor (user agent + address).
    created_at : datetime
        Sign-in time.
    last_active_at : datetime
        Time of the last rotation.
    expires_at : datetime
        Absolute expiry of the current refresh token.
    """

    __tablename__ = "refresh_sessions"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    session_id: Mapped[str] = mapped_column(String(32), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    device_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    last_active_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    user: Mapped[User] = relationship("User", back_populates="sessions")

    __table_args__ = (
        UniqueConstraint("session_id", name="uq_refresh_sessions_session_id"),
        Index("ix_refresh_sessions_user_id", "user_id"),
        Index("ix_refresh_sessions_token_hash", "token_hash"),
    )

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when the stored expiry is at or before ``now``."""
        return self.expires_at <= now
