"""API error definitions.

Every error the service reports is an ApiError subclass carrying a stable
code and the HTTP status it maps to. Handlers in responses.py turn them into
the JSON error envelope.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API."""

    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_CONFLICT = "E_CONFLICT"
    E_INTERNAL = "E_INTERNAL"
    E_ENHANCE_UNAVAILABLE = "E_ENHANCE_UNAVAILABLE"
    E_ENHANCE_NOT_CONFIGURED = "E_ENHANCE_NOT_CONFIGURED"
    E_ENHANCE_TIMEOUT = "E_ENHANCE_TIMEOUT"


ERROR_CODE_TO_STATUS: Dict[ApiErrorCode, int] = {
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_CONFLICT: 409,
    ApiErrorCode.E_INTERNAL: 500,
    ApiErrorCode.E_ENHANCE_UNAVAILABLE: 502,
    ApiErrorCode.E_ENHANCE_NOT_CONFIGURED: 503,
    ApiErrorCode.E_ENHANCE_TIMEOUT: 504,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class ValidationError(ApiError):
    """Malformed or missing input, with per-field detail."""

    def __init__(self, message: str = "Invalid request", fields: Optional[Dict[str, Any]] = None):
        super().__init__(ApiErrorCode.E_INVALID_REQUEST, message)
        self.fields = fields or {}


class UnauthenticatedError(ApiError):
    def __init__(self, message: str = "Missing auth token"):
        super().__init__(ApiErrorCode.E_UNAUTHENTICATED, message)


class InvalidTokenError(UnauthenticatedError):
    """Token signature, format or claims are wrong."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class ExpiredTokenError(UnauthenticatedError):
    """Token was valid once but is past its expiry."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource absent, or owned by someone else."""

    def __init__(self, message: str = "Not found"):
        super().__init__(ApiErrorCode.E_NOT_FOUND, message)


class ConflictError(ApiError):
    def __init__(self, message: str = "Conflict"):
        super().__init__(ApiErrorCode.E_CONFLICT, message)


class InternalError(ApiError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(ApiErrorCode.E_INTERNAL, message)


class EnhancementUnavailableError(ApiError):
    def __init__(self, message: str = "AI enhancement failed"):
        super().__init__(ApiErrorCode.E_ENHANCE_UNAVAILABLE, message)


class EnhancementNotConfiguredError(ApiError):
    def __init__(self, message: str = "AI enhancement is not configured"):
        super().__init__(ApiErrorCode.E_ENHANCE_NOT_CONFIGURED, message)


class EnhancementTimeoutError(ApiError):
    def __init__(self, message: str = "AI enhancement timed out"):
        super().__init__(ApiErrorCode.E_ENHANCE_TIMEOUT, message)
