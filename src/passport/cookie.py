"""Passport whose session is proven by the CAS ticket-granting cookie."""

import asyncio
import logging

import aiohttp

from passport.base import Passport
from passport.constants import CAS_TICKET_COOKIE, DEFAULT_TIMEOUT_SECONDS
from passport.exceptions import NotAuthenticated, UnsupportedOperation
from passport.models import AuthenticatableRequest, Identity
from passport.session import is_session_authenticated

logger = logging.getLogger(__name__)


class CASCookieBasedPassport(Passport):
    """
    Base for passports authenticated by a CAS session cookie.

    Owns the HTTP session used for the login handshake and its cookie jar.
    Services issuing calls with this passport share the same jar, so the
    session cookie set during login travels with every later request. Only
    the transport writes the jar.
    """

    def __init__(self, passport_url: str, timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS):
        super().__init__(passport_url)
        self.timeout_seconds = timeout_seconds

        self._session: aiohttp.ClientSession | None = None
        self._cookie_jar: aiohttp.CookieJar | None = None
        self._identity: Identity | None = None
        self._closed = False

    @property
    def cookie_jar(self) -> aiohttp.CookieJar:
        """
        Cookie jar holding the CAS session.

        Created on first access, which must happen inside a running event loop.
        Accepts cookies from IP-addressed hosts, since on-premise passports
        are often reached by address.
        """
        if self._cookie_jar is None:
            self._cookie_jar = aiohttp.CookieJar(unsafe=True)
        return self._cookie_jar

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError(f"{type(self).__name__} is closed, cannot create new session")
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                cookie_jar=self.cookie_jar,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    def _discard_session(self) -> None:
        """Forget the previous login so only a cookie set by the next one counts."""
        self._identity = None
        if self._cookie_jar is not None:
            self._cookie_jar.clear(lambda morsel: morsel.key == CAS_TICKET_COOKIE)

    @property
    def is_cookie_authenticated(self) -> bool:
        return is_session_authenticated(
            self._cookie_jar,
            self.passport_uri,
            self.host_url,
            CAS_TICKET_COOKIE,
        )

    # Passport contract

    def is_cookie_authentication(self) -> bool:
        return True

    async def authenticate_request(
        self, request: AuthenticatableRequest, refresh_automatically: bool = True
    ) -> bool:
        raise UnsupportedOperation(
            f"{type(self).__name__} authenticates through its cookie jar; "
            "requests are not stamped individually"
        )

    def get_identity(self) -> Identity:
        if self._identity is None or not self.is_valid():
            raise NotAuthenticated(f"{type(self).__name__} has no authenticated session")
        return self._identity

    def is_valid(self) -> bool:
        return self.is_cookie_authenticated


__all__ = ["CASCookieBasedPassport"]
