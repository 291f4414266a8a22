"""Pytest configuration and fixtures."""

import os

# Keep the real OS keychain out of test runs; must happen before config is imported.
os.environ.setdefault("PYTHON_KEYRING_BACKEND", "keyring.backends.null.Keyring")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from api.preferences import get_preference_service  # noqa: E402
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402
from services.preference_service import PreferenceService  # noqa: E402
from services.preference_store import PreferenceStore  # noqa: E402
from services.transaction import SessionTransactioner  # noqa: E402
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: E402, F401
    TEST_DEPLOYMENT_ID,
    auth_headers,
    preference_service,
    preference_store,
    stored_preferences,
)


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_preference_service():
        return PreferenceService(
            store=PreferenceStore(deployment_id=TEST_DEPLOYMENT_ID),
            transactioner=SessionTransactioner(),
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_preference_service] = override_get_preference_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
