"""Preferences API endpoints for the authenticated user."""

from functools import lru_cache

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from config import settings
from database import get_db
from schemas.preference import (
    DeletePreferenceResponse,
    GetPreferenceResponse,
    GetPreferencesResponse,
    UpsertPreferencesRequest,
    UpsertPreferencesResponse,
)
from services.preference_errors import PreferenceErrorKind, PreferenceServiceError
from services.preference_service import PreferenceService
from services.preference_store import PreferenceStore
from services.transaction import SessionTransactioner

router = APIRouter(prefix="/users/me/preferences", tags=["preferences"])


@lru_cache
def get_preference_service() -> PreferenceService:
    """Dependency returning the process-wide preference service."""
    return PreferenceService(
        store=PreferenceStore(deployment_id=settings.DEPLOYMENT_ID),
        transactioner=SessionTransactioner(),
    )


def _require_path_key(key: str) -> str:
    if not key.strip():
        raise PreferenceServiceError(PreferenceErrorKind.INVALID_REQUEST)
    return key


@router.get("", response_model=GetPreferencesResponse)
def list_preferences(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PreferenceService = Depends(get_preference_service),
):
    """Get all preferences of the caller, ordered by key."""
    return GetPreferencesResponse(
        preferences=service.get_preferences_by_user_id(db, user_id)
    )


@router.get("/{key:path}", response_model=GetPreferenceResponse)
def get_preference(
    key: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PreferenceService = Depends(get_preference_service),
):
    """Get a single preference."""
    pref = service.get_preference_by_key(db, user_id, _require_path_key(key))
    return GetPreferenceResponse(key=pref.key, value=pref.value)


@router.put("", response_model=UpsertPreferencesResponse)
def upsert_preferences(
    body: UpsertPreferencesRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PreferenceService = Depends(get_preference_service),
):
    """Create or update a batch of preferences atomically."""
    if not body.preferences:
        raise PreferenceServiceError(PreferenceErrorKind.INVALID_REQUEST)
    updated_keys = service.upsert_preferences(db, user_id, body.preferences)
    return UpsertPreferencesResponse(updated_keys=updated_keys)


@router.delete("/{key:path}", response_model=DeletePreferenceResponse)
def delete_preference(
    key: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PreferenceService = Depends(get_preference_service),
):
    """Delete a single preference."""
    service.delete_preference(db, user_id, _require_path_key(key))
    return DeletePreferenceResponse(message="Preference deleted successfully")
