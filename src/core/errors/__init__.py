"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PlatformError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from core.errors.exceptions import (
    AuthError,
    # Enums
    ErrorCategory,
    PermanentError,
    # Base classes
    PlatformError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    is_auth_error,
    is_transient_error,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PlatformError",
    "AuthError",
    "PermanentError",
    # Classification utilities
    "is_auth_error",
    "is_transient_error",
    "classify_http_status",
    "classify_exception",
]
