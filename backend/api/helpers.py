"""Shared API helpers for route handlers.

Maps service error kinds to HTTP status codes and response bodies.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schemas.preference import ErrorResponse
from services.preference_errors import PreferenceErrorKind, PreferenceServiceError

logger = logging.getLogger(__name__)


def status_code_for(kind: PreferenceErrorKind) -> int:
    """Return the HTTP status code for a service error kind.

    Client errors map to 400, except NOT_FOUND (404) and
    AUTHENTICATION_FAILED (401). Server errors map to 500.
    """
    if not kind.is_client_error:
        return 500
    if kind is PreferenceErrorKind.NOT_FOUND:
        return 404
    if kind is PreferenceErrorKind.AUTHENTICATION_FAILED:
        return 401
    return 400


def error_response(kind: PreferenceErrorKind) -> JSONResponse:
    """Build the JSON error response for a service error kind."""
    body = ErrorResponse(
        code=kind.value.code,
        message=kind.value.message,
        description=kind.value.description,
    )
    return JSONResponse(status_code=status_code_for(kind), content=body.model_dump())


async def preference_error_handler(request: Request, exc: PreferenceServiceError) -> JSONResponse:
    """Render a :class:`PreferenceServiceError` raised by a route or dependency."""
    return error_response(exc.kind)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies as INVALID_REQUEST."""
    logger.info(
        "Rejected malformed request to %s (%d validation errors)",
        request.url.path,
        len(exc.errors()),
    )
    return error_response(PreferenceErrorKind.INVALID_REQUEST)
