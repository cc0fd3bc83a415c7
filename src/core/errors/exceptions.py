"""
Unified exception hierarchy for the ENOVIA client.

Provides typed exceptions with a category so callers can decide whether
to retry a call, log in again, or give up.
"""

from core.types import ErrorCategory


class PlatformError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    @property
    def should_refresh_auth(self) -> bool:
        return self.category == ErrorCategory.AUTH

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Base categories
# =============================================================================


class AuthError(PlatformError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class PermanentError(PlatformError):
    """Base class for errors that won't succeed on retry."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Error Classification Utilities
# =============================================================================

# Markers for string-based detection (fallback for non-PlatformError exceptions)
AUTH_ERROR_MARKERS = frozenset(
    {
        "401",
        "unauthorized",
        "authentication",
        "not authenticated",
        "castgc",
    }
)

TRANSIENT_ERROR_MARKERS = frozenset(
    {
        "429",
        "502",
        "503",
        "504",
        "timeout",
        "connection",
        "temporarily unavailable",
        "service unavailable",
    }
)


def is_auth_error(exc: Exception) -> bool:
    """
    Check if exception is authentication-related.

    Returns True if the caller should log in again before retrying.
    """
    if isinstance(exc, PlatformError):
        return exc.category == ErrorCategory.AUTH

    error_str = str(exc).lower()
    return any(marker in error_str for marker in AUTH_ERROR_MARKERS)


def is_transient_error(exc: Exception) -> bool:
    """
    Check if exception is transient.

    Returns True if the same call may succeed when issued again.
    """
    if isinstance(exc, PlatformError):
        return exc.category == ErrorCategory.TRANSIENT

    error_str = str(exc).lower()
    return any(marker in error_str for marker in TRANSIENT_ERROR_MARKERS)


def classify_http_status(status_code: int | None) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if status_code is None:
        return ErrorCategory.TRANSIENT  # No response at all: network failure

    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    # CAS redirects unauthenticated callers to the login page
    if status_code == 302:
        return ErrorCategory.AUTH

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    if isinstance(exc, PlatformError):
        return exc.category

    if is_transient_error(exc):
        return ErrorCategory.TRANSIENT

    if is_auth_error(exc):
        return ErrorCategory.AUTH

    return ErrorCategory.UNKNOWN
