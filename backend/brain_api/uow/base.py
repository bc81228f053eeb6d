"""
Unit of Work contract shared by the read-write and read-only implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from brain_api.repositories.user import UserRepository


class UnitOfWork(ABC):
    """
    One transactional boundary around an auth use case.

    ``users`` is bound to the same session as the transaction, so a row read
    ``FOR UPDATE`` stays locked until :meth:`commit` or :meth:`rollback`.
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
