"""Keyring-backed storage for deployment secrets.

The database URL of a production deployment usually embeds a password, so
it can be kept in the OS keychain instead of a ``.env`` file. Settings
consult the keychain first (see :class:`config.KeychainSettingsSource`).
"""

import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

SERVICE_NAME = "user-preferences"

CREDENTIAL_KEYS: frozenset[str] = frozenset({"DATABASE_URL"})


def get_credential(key: str) -> str | None:
    """Return the stored secret for ``key``, or ``None``.

    A keychain backend failure (for example a headless host without a
    secret service) is treated as "not stored" so settings fall through
    to the environment.
    """
    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("keyring lookup failed for %s", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Store a secret. Only keys in :data:`CREDENTIAL_KEYS` are accepted.

    Returns:
        ``True`` if stored, ``False`` otherwise.
    """
    if key not in CREDENTIAL_KEYS:
        logger.warning("Attempted to store non-credential key: %s", key)
        return False
    if not value or not value.strip():
        logger.warning("Attempted to store empty value for %s", key)
        return False

    try:
        keyring.set_password(SERVICE_NAME, key, value)
    except KeyringError:
        logger.warning("Failed to store %s in keychain", key, exc_info=True)
        return False
    logger.info("Stored %s in keychain", key)
    return True


def delete_credential(key: str) -> bool:
    """Remove a stored secret. Returns ``True`` if something was deleted."""
    if key not in CREDENTIAL_KEYS:
        logger.warning("Attempted to delete non-credential key: %s", key)
        return False

    try:
        keyring.delete_password(SERVICE_NAME, key)
    except PasswordDeleteError:
        logger.debug("No %s stored in keychain", key)
        return False
    logger.info("Deleted %s from keychain", key)
    return True
