"""Tests for passport exception categories."""

import pytest

from core.errors import PlatformError, is_auth_error, is_transient_error
from core.types import ErrorCategory
from passport.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    PassportError,
    ProtocolError,
    ProtocolFailure,
    TransportError,
    UnsupportedOperation,
)


class TestTransportError:
    @pytest.mark.parametrize(
        "status,category",
        [
            (None, ErrorCategory.TRANSIENT),
            (201, ErrorCategory.PERMANENT),
            (302, ErrorCategory.AUTH),
            (401, ErrorCategory.AUTH),
            (404, ErrorCategory.PERMANENT),
            (429, ErrorCategory.TRANSIENT),
            (503, ErrorCategory.TRANSIENT),
        ],
    )
    def test_category_from_status(self, status, category):
        error = TransportError("failed", status_code=status)

        assert error.category == category

    def test_keeps_body(self):
        error = TransportError("failed", status_code=500, body="stack trace")

        assert error.body == "stack trace"
        assert isinstance(error, PassportError)
        assert isinstance(error, PlatformError)


class TestCategories:
    def test_protocol_error_is_permanent(self):
        error = ProtocolError("bad", reason=ProtocolFailure.INVALID_TOKEN_TYPE)

        assert error.category == ErrorCategory.PERMANENT
        assert not error.is_retryable
        assert error.reason is ProtocolFailure.INVALID_TOKEN_TYPE

    def test_auth_errors(self):
        assert is_auth_error(AuthenticationFailed("no cookie"))
        assert is_auth_error(NotAuthenticated("no login"))
        assert NotAuthenticated("no login").should_refresh_auth

    def test_unsupported_operation_is_permanent(self):
        assert UnsupportedOperation("nope").category == ErrorCategory.PERMANENT

    def test_network_failure_is_transient(self):
        assert is_transient_error(TransportError("refused"))

    def test_str_includes_cause(self):
        cause = ConnectionError("refused")
        error = TransportError("Login failed", cause=cause)

        assert str(error) == "Login failed | Caused by: refused"
