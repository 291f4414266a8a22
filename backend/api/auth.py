"""Caller identity extraction.

Authentication itself happens upstream: the gateway verifies the caller's
token and forwards the user identifier in a trusted header
(``settings.USER_ID_HEADER``). This module only reads it.
"""

from fastapi import Request

from config import settings
from services.preference_errors import PreferenceErrorKind, PreferenceServiceError


def get_current_user_id(request: Request) -> str:
    """Dependency returning the authenticated user ID.

    Raises:
        PreferenceServiceError: AUTHENTICATION_FAILED if the header is
            missing or blank.
    """
    user_id = request.headers.get(settings.USER_ID_HEADER, "")
    if not user_id.strip():
        raise PreferenceServiceError(PreferenceErrorKind.AUTHENTICATION_FAILED)
    return user_id.strip()
