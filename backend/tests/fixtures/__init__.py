"""Test fixtures and sample data."""
import pytest
from sqlalchemy.orm import Session

from services.preference_service import PreferenceService
from services.preference_store import PreferenceStore
from services.transaction import SessionTransactioner

TEST_USER_ID = "user-123"
OTHER_USER_ID = "user-456"
TEST_DEPLOYMENT_ID = "test-deployment"


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Headers identifying TEST_USER_ID to the API."""
    return {"X-User-ID": TEST_USER_ID}


@pytest.fixture
def preference_store() -> PreferenceStore:
    """Store scoped to the test deployment."""
    return PreferenceStore(deployment_id=TEST_DEPLOYMENT_ID)


@pytest.fixture
def preference_service(preference_store: PreferenceStore) -> PreferenceService:
    """Service wired to the real store and session transactioner."""
    return PreferenceService(preference_store, SessionTransactioner())


@pytest.fixture
def stored_preferences(db: Session, preference_service: PreferenceService) -> dict[str, str]:
    """Store a couple of preferences for TEST_USER_ID."""
    prefs = {"theme": "dark", "locale": "en"}
    preference_service.upsert_preferences(db, TEST_USER_ID, prefs)
    return prefs
