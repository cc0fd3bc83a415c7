"""
Passport contract.

A passport is the credential holder presented to every outgoing call. Each
variant offers exactly four capabilities:

    is_cookie_authentication()  - session proven by a cookie jar, or not
    authenticate_request()      - stamp an outgoing request (non-cookie only)
    get_identity()              - principal resolved by the last login
    is_valid()                  - is the session / proof usable right now

Callers dispatch on these capabilities and never look at a variant's
internal session state.
"""

from abc import ABC, abstractmethod

from aiohttp.abc import AbstractCookieJar
from yarl import URL

from passport.exceptions import UnsupportedOperation
from passport.models import AuthenticatableRequest, Identity
from passport.ticket import endpoint_url


class Passport(ABC):
    """
    Abstract base class for passports.

    Attributes:
        passport_url: Base URL of the authentication service, no trailing slash
        passport_uri: Parsed passport_url (on-premise cookie scope)
        host_url: scheme://host[:port] of passport_url (cloud cookie scope)
    """

    def __init__(self, passport_url: str):
        passport_url = (passport_url or "").rstrip("/")
        if not passport_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Passport URL must start with http:// or https://, got: {passport_url!r}"
            )

        self.passport_url = passport_url
        self.passport_uri = URL(passport_url)
        self.host_url = self.passport_uri.origin()

    def get_endpoint_url(self, endpoint: str) -> str:
        return endpoint_url(self.passport_url, endpoint)

    @abstractmethod
    def is_cookie_authentication(self) -> bool:
        """True when the session is proven by the cookie jar alone."""
        pass

    @abstractmethod
    async def authenticate_request(
        self, request: AuthenticatableRequest, refresh_automatically: bool = True
    ) -> bool:
        """
        Attach proof of identity to an outgoing request.

        Args:
            request: Request to stamp
            refresh_automatically: Refresh stale proof before stamping

        Returns:
            True if the request was stamped

        Raises:
            UnsupportedOperation: On cookie-based variants
        """
        pass

    @abstractmethod
    def get_identity(self) -> Identity:
        """
        Principal resolved by the last successful login.

        Raises:
            NotAuthenticated: If no login succeeded or the session is gone
        """
        pass

    @abstractmethod
    def is_valid(self) -> bool:
        pass

    @property
    def cookie_jar(self) -> AbstractCookieJar:
        raise UnsupportedOperation(
            f"{type(self).__name__} does not use cookie authentication"
        )

    async def close(self) -> None:
        """Release network resources held by the passport."""
        pass

    async def __aenter__(self) -> "Passport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = ["Passport"]
