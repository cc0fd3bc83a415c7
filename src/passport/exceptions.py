"""Passport exceptions."""

from enum import Enum

from core.errors import (
    AuthError,
    ErrorCategory,
    PermanentError,
    PlatformError,
    classify_http_status,
)


class ProtocolFailure(Enum):
    """What was wrong with an authentication service response."""

    INVALID_TICKET_RESPONSE = "invalid_ticket_response"
    INVALID_TOKEN_TYPE = "invalid_token_type"
    INVALID_LOGIN_RESPONSE = "invalid_login_response"
    INVALID_CSRF_RESPONSE = "invalid_csrf_response"


class PassportError(PlatformError):
    """Base exception for passport and session operations."""

    pass


class ProtocolError(PassportError, PermanentError):
    """The authentication service answered with an unexpected shape or value."""

    def __init__(
        self,
        message: str,
        reason: ProtocolFailure,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.reason = reason


class TransportError(PassportError):
    """
    Non-200 status, or no response at all, from an authentication endpoint.

    Carries the upstream status and body for diagnostics. The category is
    derived from the status code; a missing status means a network failure.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code
        self.body = body
        self.category = classify_http_status(status_code)
        if self.category == ErrorCategory.UNKNOWN and status_code is not None:
            # 2xx other than 200, or 1xx/3xx we don't special-case
            self.category = ErrorCategory.PERMANENT


class AuthenticationFailed(PassportError, AuthError):
    """Well-formed response, but the session was not established."""

    pass


class UnsupportedOperation(PassportError, PermanentError):
    """Operation not offered by this passport variant."""

    pass


class NotAuthenticated(PassportError, AuthError):
    """Identity or request proof needed before a successful login."""

    pass


__all__ = [
    "ProtocolFailure",
    "PassportError",
    "ProtocolError",
    "TransportError",
    "AuthenticationFailed",
    "UnsupportedOperation",
    "NotAuthenticated",
]
