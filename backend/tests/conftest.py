"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Services commit and
roll back their own units of work; those operations act on nested savepoints
and the outer transaction is discarded after every test.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from brain_api.core.auth import get_components
from brain_api.core.config import TestingConfig
from brain_api.core.extensions import db as _db  # Flask-SQLAlchemy instance
from brain_api.factory import create_app  # application factory under test
from brain_api.infra.jwt.jwt_token_codec import JWTTokenCodec
from brain_api.services._shared.ports import InMemoryDenylistStore, RecordingTokenMailer
from brain_api.services.auth.passwords import PasswordHasher
from brain_api.services.auth.service import AuthService
from brain_api.services.auth.settings import AuthSettings

TEST_SECRET = "unit-test-secret-with-enough-entropy-123"

class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Disables the Redis denylist and uses the minimum bcrypt cost.
    - Verified-by-default signups, so sign-in works right after signup.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = TEST_SECRET
    AUTH_BCRYPT_ROUNDS = 4
    AUTH_EMAIL_VERIFIED_BY_DEFAULT = True
    REDIS_URL = None
    LOG_LEVEL = "WARNING"

@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    The token mailer is a :class:`RecordingTokenMailer` so tests can read the
    one-time tokens that would have been e-mailed.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestConfig, overrides={"AUTH_TOKEN_MAILER": RecordingTokenMailer()})
    app.logger.setLevel("WARNING")
    return app

@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()

@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()

@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()

@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk

# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield

# -- Auth collaborators ---------------------------------------------------------
@pytest.fixture()
def settings() -> AuthSettings:
    """Auth settings with the minimum bcrypt cost and default lifetimes."""
    return AuthSettings(jwt_secret=TEST_SECRET, bcrypt_rounds=4)

@pytest.fixture()
def codec(settings) -> JWTTokenCodec:
    return JWTTokenCodec(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)

@pytest.fixture()
def denylist() -> InMemoryDenylistStore:
    return InMemoryDenylistStore()

@pytest.fixture()
def recording_mailer() -> RecordingTokenMailer:
    return RecordingTokenMailer()

@pytest.fixture()
def hasher(settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)

@pytest.fixture()
def make_service(codec, denylist, recording_mailer, hasher):
    """Return a builder for :class:`AuthService` accepting settings overrides.

    Examples
    --------
    >>> def test_verification(make_service):
    ...     service = make_service(email_verified_by_default=False)
    """

    def _build(**overrides) -> AuthService:
        settings = AuthSettings(jwt_secret=TEST_SECRET, bcrypt_rounds=4, **overrides)
        return AuthService(
            settings=settings,
            codec=codec,
            denylist=denylist,
            mailer=recording_mailer,
            hasher=hasher,
        )

    return _build

@pytest.fixture()
def service(make_service) -> AuthService:
    """AuthService wired to in-memory doubles and the transactional session."""
    return make_service()

# -- HTTP ---------------------------------------------------------------------
@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()

@pytest.fixture()
def app_mailer(app) -> RecordingTokenMailer:
    """The application's recording mailer, emptied for the current test."""
    mailer = get_components(app).mailer
    mailer.sent.clear()
    return mailer

@pytest.fixture()
def freeze_time():
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01") as frozen:
    ...         frozen.tick(timedelta(minutes=5))
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None, **kwargs):
        return _freeze_time(target or "2024-01-01 12:00:00", **kwargs)

    return _factory

