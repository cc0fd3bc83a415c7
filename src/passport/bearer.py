"""Bearer-token passport: stamps each request instead of relying on cookies."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Awaitable, Callable

from passport.base import Passport
from passport.exceptions import NotAuthenticated
from passport.models import AuthenticatableRequest, BearerToken, Identity

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_MAX_AGE_MINUTES = 30

TokenRefresher = Callable[[], Awaitable[str]]


class TokenPassport(Passport):
    """
    Passport that proves identity with a bearer token on every request.

    The token is considered stale once older than max_age_minutes. When a
    refresher is given, stale tokens are replaced before stamping; the
    refresh runs under a lock so concurrent requests trigger one refresh.
    """

    def __init__(
        self,
        passport_url: str,
        user_id: str,
        token: str | None = None,
        max_age_minutes: int = DEFAULT_TOKEN_MAX_AGE_MINUTES,
        refresher: TokenRefresher | None = None,
    ):
        super().__init__(passport_url)
        self.user_id = user_id
        self.max_age_minutes = max_age_minutes
        self._refresher = refresher
        self._token: BearerToken | None = (
            BearerToken(value=token, acquired_at=datetime.now(UTC)) if token else None
        )
        self._refresh_lock = asyncio.Lock()

    async def refresh(self) -> None:
        """Replace the token using the refresher."""
        if self._refresher is None:
            raise NotAuthenticated("TokenPassport has no refresher to renew its token")
        value = await self._refresher()
        if not value:
            raise NotAuthenticated("Token refresher returned an empty token")
        self._token = BearerToken(value=value, acquired_at=datetime.now(UTC))
        logger.debug(
            "Bearer token refreshed",
            extra={"passport_url": self.passport_url, "auth_type": "token"},
        )

    # Passport contract

    def is_cookie_authentication(self) -> bool:
        return False

    async def authenticate_request(
        self, request: AuthenticatableRequest, refresh_automatically: bool = True
    ) -> bool:
        if not self.is_valid():
            if not refresh_automatically or self._refresher is None:
                return False
            async with self._refresh_lock:
                # Another request may have refreshed while we waited
                if not self.is_valid():
                    await self.refresh()

        request.headers["Authorization"] = f"Bearer {self._token.value}"
        return True

    def get_identity(self) -> Identity:
        if not self.is_valid():
            raise NotAuthenticated("TokenPassport has no valid token")
        return Identity(user_id=self.user_id, authentication_type="token")

    def is_valid(self) -> bool:
        return self._token is not None and self._token.is_valid(self.max_age_minutes)


__all__ = ["TokenPassport", "TokenRefresher", "DEFAULT_TOKEN_MAX_AGE_MINUTES"]
