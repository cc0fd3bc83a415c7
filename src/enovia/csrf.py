"""
CSRF token cache with a fixed validity window.

The platform requires an ENO_CSRF_TOKEN header on mutating calls. A token
is fetched once and reused for 55 minutes. The cache is shared by every
call issued through one service, so the check-then-refresh sequence runs
under an asyncio lock with a double-check after acquisition: concurrent
callers that observe a stale entry trigger a single refresh, and a reader
always sees either the old or the new (token, timestamp) pair.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Awaitable, Callable

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from enovia.exceptions import TokenFetchFailed
from passport.exceptions import ProtocolError, ProtocolFailure, TransportError
from passport.ticket import raise_transport_error, read_json

logger = logging.getLogger(__name__)

CSRF_VALIDITY_MINUTES = 55
CSRF_TOKEN_HEADER = "ENO_CSRF_TOKEN"

SessionProvider = Callable[[], Awaitable[aiohttp.ClientSession]]


class CsrfField(BaseModel):
    name: str | None = None
    value: str = Field(..., min_length=1)


class CsrfEnvelope(BaseModel):
    """Body of the CSRF endpoint: ``{"success": true, "csrf": {"name": ..., "value": ...}}``."""

    success: bool | None = None
    csrf: CsrfField


@dataclass(frozen=True)
class CsrfToken:
    """
    CSRF token with acquisition timestamp.

    Attributes:
        name: Header name the platform expects the token under
        value: The token string
        acquired_at: UTC timestamp when the token was fetched
    """

    name: str
    value: str
    acquired_at: datetime

    @property
    def age(self) -> timedelta:
        return datetime.now(UTC) - self.acquired_at

    def is_valid(self, validity_minutes: int = CSRF_VALIDITY_MINUTES) -> bool:
        """True while the token is at most validity_minutes old."""
        return self.age <= timedelta(minutes=validity_minutes)


class CsrfTokenCache:
    """
    Cache for the platform's CSRF token.

    Usage:
        cache = CsrfTokenCache(service._ensure_session, csrf_url)
        token = await cache.get_token()                 # cached when fresh
        token = await cache.get_token(use_cache=False)  # always refetch
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        token_url: str,
        validity_minutes: int = CSRF_VALIDITY_MINUTES,
    ):
        """
        Args:
            session_provider: Coroutine returning the session to fetch with
            token_url: Absolute URL of the CSRF endpoint
            validity_minutes: How long a fetched token is reused
        """
        self._session_provider = session_provider
        self.token_url = token_url
        self.validity_minutes = validity_minutes
        self._entry: CsrfToken | None = None
        self._lock = asyncio.Lock()

    @property
    def entry(self) -> CsrfToken | None:
        return self._entry

    def _cached_value(self) -> str | None:
        entry = self._entry
        if entry is not None and entry.is_valid(self.validity_minutes):
            return entry.value
        return None

    async def get_token(self, use_cache: bool = True) -> str:
        """
        Get the CSRF token, fetching a new one when needed.

        Args:
            use_cache: Reuse a fresh cached token; False forces a fetch

        Returns:
            Token value

        Raises:
            TokenFetchFailed: Endpoint answered with a non-200 status
            TransportError: Network failure
            ProtocolError: Response did not carry a token
        """
        if use_cache:
            cached = self._cached_value()
            if cached is not None:
                return cached

        async with self._lock:
            if use_cache:
                cached = self._cached_value()
                if cached is not None:
                    logger.debug("CSRF token was refreshed by another task")
                    return cached

            entry = await self._fetch()
            self._entry = entry
            return entry.value

    def invalidate(self) -> None:
        """Drop the cached token; the next get_token() fetches."""
        self._entry = None

    async def _fetch(self) -> CsrfToken:
        session = await self._session_provider()

        try:
            async with session.get(self.token_url) as response:
                if response.status != 200:
                    await raise_transport_error(
                        response,
                        self.token_url,
                        "CSRF token request",
                        message=f"Error getting CSRF token ({response.status} : {response.reason})",
                        error_cls=TokenFetchFailed,
                    )
                data = await read_json(response)
        except aiohttp.ClientError as e:
            raise TransportError(f"CSRF token request failed: {e}", cause=e) from e

        try:
            envelope = CsrfEnvelope.model_validate(data)
        except ValidationError as e:
            raise ProtocolError(
                "CSRF token response carries no token",
                reason=ProtocolFailure.INVALID_CSRF_RESPONSE,
                cause=e,
                context={"url": self.token_url},
            ) from e

        entry = CsrfToken(
            name=envelope.csrf.name or CSRF_TOKEN_HEADER,
            value=envelope.csrf.value,
            acquired_at=datetime.now(UTC),
        )
        logger.debug(
            "CSRF token refreshed",
            extra={"http_url": self.token_url, "validity_minutes": self.validity_minutes},
        )
        return entry


__all__ = [
    "CsrfEnvelope",
    "CsrfToken",
    "CsrfTokenCache",
    "CSRF_VALIDITY_MINUTES",
    "CSRF_TOKEN_HEADER",
]
