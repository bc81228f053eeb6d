"""Repository package exposing persistence-layer access for the auth core."""

from __future__ import annotations

from brain_api.repositories.base import BaseRepository
from brain_api.repositories.user import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "UserRepository",
    "normalize_email",
]
