"""
Core types shared across modules.

This module provides base types and enums that are shared across the
client packages to ensure consistent error classification.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures a caller may retry
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Authentication failures requiring a new login
              (e.g., 401 errors, missing session cookie)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, malformed protocol responses, misuse)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = [
    "ErrorCategory",
]
