"""Typed error taxonomy for the preference service.

Each :class:`PreferenceErrorKind` member carries immutable metadata (code,
client/server type, message, description). The service raises
:class:`PreferenceServiceError` with one of these kinds; the HTTP layer
turns the kind into a status code and response body.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorType(str, Enum):
    """Whether the caller or the server is at fault."""

    CLIENT = "client"
    SERVER = "server"


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata describing one kind of service error."""

    code: str
    type: ErrorType
    message: str
    description: str


class PreferenceErrorKind(Enum):
    """Every error the preference service can report to a caller."""

    AUTHENTICATION_FAILED = ErrorInfo(
        code="PREF-4000",
        type=ErrorType.CLIENT,
        message="Authentication failed",
        description="User authentication is required",
    )
    NOT_FOUND = ErrorInfo(
        code="PREF-4001",
        type=ErrorType.CLIENT,
        message="Preference not found",
        description="The requested preference does not exist",
    )
    INVALID_KEY = ErrorInfo(
        code="PREF-4002",
        type=ErrorType.CLIENT,
        message="Invalid preference key",
        description="The preference key is invalid or exceeds maximum length",
    )
    INVALID_VALUE = ErrorInfo(
        code="PREF-4003",
        type=ErrorType.CLIENT,
        message="Invalid preference value",
        description="The preference value exceeds maximum length",
    )
    INVALID_REQUEST = ErrorInfo(
        code="PREF-4004",
        type=ErrorType.CLIENT,
        message="Invalid request",
        description="The request is invalid or missing required fields",
    )
    INTERNAL_ERROR = ErrorInfo(
        code="PREF-5000",
        type=ErrorType.SERVER,
        message="Internal server error",
        description="An unexpected error occurred while processing the request",
    )

    @property
    def code(self) -> str:
        return self.value.code

    @property
    def is_client_error(self) -> bool:
        return self.value.type is ErrorType.CLIENT


class PreferenceServiceError(Exception):
    """Raised by the service layer; carries the caller-visible error kind.

    The underlying store exception, if any, is chained as ``__cause__`` for
    logging only and never exposed to the caller.
    """

    def __init__(self, kind: PreferenceErrorKind):
        self.kind = kind
        super().__init__(f"{kind.code}: {kind.value.message}")
