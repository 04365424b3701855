"""
Pytest configuration and shared fixtures.

Provides a test application, database session, and test clients that
all test modules can use. Uses the ``testing`` configuration which
points to an in-memory SQLite database, so every test gets a fresh,
empty schema.
"""

import pytest

from orgapi import create_app
from orgapi.extensions import db as _db
from orgapi.models.user import User
from orgapi.services.organization_manager import OrganizationManager


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    The schema is created up front and dropped afterwards.  No
    application context is left pushed, so each test-client request
    gets its own context (and its own Flask-Login ``g`` cache).
    """
    app = create_app("testing")
    with app.app_context():
        _db.create_all()

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name
    """
    Provide the SQLAlchemy session inside an application context.

    Use for tests that call services or models directly.
    """
    with app.app_context():
        yield _db.session
        _db.session.remove()


@pytest.fixture
def manager():
    """The SQLAlchemy-backed organization manager."""
    return OrganizationManager()


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def add_user(app):  # pylint: disable=redefined-outer-name
    """Factory fixture: ``add_user("bob")`` inserts an active user."""

    def _factory(user_id: str) -> None:
        with app.app_context():
            _db.session.add(
                User(
                    id=user_id,
                    email=f"{user_id}@localhost",
                    first_name=user_id.capitalize(),
                    last_name="Tester",
                )
            )
            _db.session.commit()

    return _factory


@pytest.fixture(scope="function")
def auth_client(client, add_user):  # pylint: disable=redefined-outer-name
    """
    A test client signed in as user ``alice`` via ``/auth/dev-login``.
    """
    add_user("alice")
    response = client.post("/auth/dev-login", json={"user_id": "alice"})
    assert response.status_code == 200
    return client
