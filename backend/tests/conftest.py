"""Pytest fixtures building an isolated application per test.

Each test gets a fresh app bound to its own in-memory SQLite database, a
``fakeredis`` refresh store and a recording mailer, so no state leaks between
cases and nothing talks to real infrastructure.
"""

from __future__ import annotations

import logging
import os

import fakeredis
import pytest
from sessionauth.core.config import TestingConfig
from sessionauth.core.extensions import db as _db
from sessionauth.core.logger import QUIET_LOGGERS, JSONFormatter
from sessionauth.factory import create_app
from sessionauth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sessionauth.services._shared.ports import RecordingMailer


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo ``configure_logging`` (called by every app and some tests) after each test."""
    watched = [logging.getLogger(), *(logging.getLogger(n) for n in QUIET_LOGGERS)]
    levels = [(lg, lg.level) for lg in watched]
    yield
    for lg, level in levels:
        lg.setLevel(level)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JSONFormatter):
            root.removeHandler(handler)


@pytest.fixture
def redis_server():
    """Provide a private fake Redis server (toggle ``connected`` to simulate outages)."""
    return fakeredis.FakeServer()


@pytest.fixture
def refresh_store(redis_server):
    """Redis refresh store backed by the fake server."""
    return RedisRefreshTokenStore(r=fakeredis.FakeRedis(server=redis_server))


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(refresh_store, mailer):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application with :class:`TestingConfig`, tables created and the fake
        collaborators injected. No app context stays pushed, so every test
        client request gets its own ``g``.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, refresh_store=refresh_store, mailer=mailer)
    app.logger.setLevel("WARNING")
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def app_ctx(app):
    """Push an application context for tests that call services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Test client without a cookie jar; tests pass credentials explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture
def session(app_ctx):
    """Return the Flask-SQLAlchemy scoped session of the pushed context."""
    return _db.session


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture
def user_factory(session):
    """Return :class:`UserFactory` wired to the current session."""
    from tests.factories import SQLAlchemySession
    from tests.factories.user import UserFactory

    SQLAlchemySession.set(session)
    yield UserFactory
    SQLAlchemySession.set(None)
