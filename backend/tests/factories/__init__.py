"""Factory Boy base wired to the per-test SQLAlchemy session."""

from __future__ import annotations

from factory.alchemy import SQLAlchemyModelFactory


class SQLAlchemySession:
    """Holder for the session installed by the ``_factories_session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session) -> None:
        cls._session = session

    @classmethod
    def get(cls):
        """Return the current test session.

        :raises RuntimeError: When a factory runs outside the ``session`` fixture.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(SQLAlchemyModelFactory):
    """Persist built objects through the test session."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        # Commit ends only the per-test savepoint; the outer transaction is
        # rolled back after each test, and fixtures survive service rollbacks.
        sqlalchemy_session_persistence = "commit"
