"""Preference service - validation and orchestration of preference CRUD."""

import logging
from collections.abc import Mapping

from sqlalchemy.orm import Session

from schemas.preference import Preference
from services.preference_errors import PreferenceErrorKind, PreferenceServiceError
from services.preference_store import PreferenceNotFoundError, PreferenceStoreProtocol
from services.transaction import Transactioner

logger = logging.getLogger(__name__)

MAX_PREFERENCE_KEY_LENGTH = 255
MAX_PREFERENCE_VALUE_LENGTH = 10000


def validate_preference_key(key: str) -> None:
    """Raise INVALID_KEY for blank keys or keys over the length limit."""
    if not key.strip() or len(key) > MAX_PREFERENCE_KEY_LENGTH:
        raise PreferenceServiceError(PreferenceErrorKind.INVALID_KEY)


def validate_preference_value(value: str) -> None:
    """Raise INVALID_VALUE for values over the length limit. Empty is allowed."""
    if len(value) > MAX_PREFERENCE_VALUE_LENGTH:
        raise PreferenceServiceError(PreferenceErrorKind.INVALID_VALUE)


class PreferenceService:
    """Per-user key/value preferences.

    Store failures other than "not found" are logged here with user and key
    context and reported to the caller only as INTERNAL_ERROR.
    """

    def __init__(self, store: PreferenceStoreProtocol, transactioner: Transactioner):
        self._store = store
        self._transactioner = transactioner

    def get_preference_by_key(self, db: Session, user_id: str, key: str) -> Preference:
        """Get a single preference.

        Raises:
            PreferenceServiceError: INVALID_KEY, NOT_FOUND or INTERNAL_ERROR.
        """
        validate_preference_key(key)

        try:
            return self._store.get_preference_by_key(db, user_id, key)
        except PreferenceNotFoundError:
            raise PreferenceServiceError(PreferenceErrorKind.NOT_FOUND) from None
        except Exception as exc:
            logger.error(
                "Failed to get preference (user_id=%s, key=%s)", user_id, key, exc_info=True
            )
            raise PreferenceServiceError(PreferenceErrorKind.INTERNAL_ERROR) from exc

    def get_preferences_by_user_id(self, db: Session, user_id: str) -> list[Preference]:
        """Get every preference of a user ordered by key; ``[]`` when none exist."""
        try:
            preferences = self._store.get_preferences_by_user_id(db, user_id)
        except Exception as exc:
            logger.error("Failed to get preferences (user_id=%s)", user_id, exc_info=True)
            raise PreferenceServiceError(PreferenceErrorKind.INTERNAL_ERROR) from exc
        return list(preferences or [])

    def upsert_preferences(
        self, db: Session, user_id: str, preferences: Mapping[str, str]
    ) -> list[str]:
        """Create or update a batch of preferences atomically.

        The whole batch is validated before anything is written. The writes
        then run in one unit of work: either every key is stored or none is.

        Returns:
            The keys that were written. Order is not significant.

        Raises:
            PreferenceServiceError: INVALID_KEY, INVALID_VALUE or INTERNAL_ERROR.
        """
        for key, value in preferences.items():
            validate_preference_key(key)
            validate_preference_value(value)

        def upsert_all(tx: Session) -> list[str]:
            updated_keys = []
            for key, value in preferences.items():
                self._store.upsert_preference(tx, user_id, key, value)
                updated_keys.append(key)
            return updated_keys

        try:
            updated_keys = self._transactioner.transact(db, upsert_all)
        except Exception as exc:
            logger.error(
                "Failed to upsert preferences (user_id=%s, keys=%d)",
                user_id,
                len(preferences),
                exc_info=True,
            )
            raise PreferenceServiceError(PreferenceErrorKind.INTERNAL_ERROR) from exc

        logger.info("Upserted %d preference(s) for user %s", len(updated_keys), user_id)
        return updated_keys

    def delete_preference(self, db: Session, user_id: str, key: str) -> None:
        """Delete a single preference.

        Raises:
            PreferenceServiceError: INVALID_KEY, NOT_FOUND or INTERNAL_ERROR.
        """
        validate_preference_key(key)

        try:
            self._transactioner.transact(
                db, lambda tx: self._store.delete_preference(tx, user_id, key)
            )
        except PreferenceNotFoundError:
            raise PreferenceServiceError(PreferenceErrorKind.NOT_FOUND) from None
        except Exception as exc:
            logger.error(
                "Failed to delete preference (user_id=%s, key=%s)", user_id, key, exc_info=True
            )
            raise PreferenceServiceError(PreferenceErrorKind.INTERNAL_ERROR) from exc

        logger.info("Deleted preference %s for user %s", key, user_id)
