"""Pytest fixtures configuring an isolated database layer.

Each test gets a fresh schema on an in-memory SQLite database. Factories
commit, matching the Unit of Work semantics of the code under test, so the
schema is dropped after every case instead of rolling back a SAVEPOINT.
"""

from __future__ import annotations

import os

import pytest

from authsvc.core.config import TestingConfig
from authsvc.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authsvc.factory import create_app  # application factory under test

TEST_JWT_SECRET = "test-jwt-secret-with-enough-bytes-for-hs256"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Uses the SQL refresh-token backend and never touches Redis.
    - Uses a cheap PBKDF2 work factor for password hashing.
    """

    __test__ = False

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = TEST_JWT_SECRET
    JWT_AUDIENCE = "authsvc-tests"
    JWT_ISSUER = "authsvc-tests"
    REFRESH_TOKEN_BACKEND = "sql"
    REDIS_URL = None
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"
    PROPAGATE_EXCEPTIONS = False


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application instance with :class:`TestConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig)
    application.logger.setLevel("WARNING")
    yield application


@pytest.fixture(scope="function")
def session(app):
    """Push a fresh app context, create the schema, then drop everything.

    Requests issued by the test client reuse this context, so ``g`` (and the
    request id cached on it) never leaks between tests.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        The Flask-SQLAlchemy session shared with the code under test.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db.session
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the per-test session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
