"""Service-to-service (batch) CAS passport acting on behalf of a user."""

import logging
from typing import Any

import aiohttp

from passport.constants import AUTHENTICATED_MESSAGE, TGT_PARAM, TRANSIENT_LOGIN_ENDPOINT
from passport.cookie import CASCookieBasedPassport
from passport.exceptions import TransportError
from passport.models import Identity
from passport.ticket import read_json, request_transient_token

logger = logging.getLogger(__name__)


class BatchServicePassport(CASCookieBasedPassport):
    """
    Passport for a registered service logging in on behalf of a user.

    The service trades its name/secret for a transient token bound to the
    target user, then redeems the token for a CAS session. A rejected
    identity is an expected outcome and is reported as False, while
    protocol violations during the token exchange raise.
    """

    def __init__(self, passport_url: str, **kwargs):
        super().__init__(passport_url, **kwargs)
        self._authentication_identity: dict[str, Any] | None = None

    @property
    def authentication_identity(self) -> dict[str, Any] | None:
        """Payload returned by the last successful transient login, if any."""
        return self._authentication_identity

    async def login(
        self, service_name: str, service_secret: str, on_behalf_of_user_id: str
    ) -> bool:
        """
        Log in as a service on behalf of a user.

        Returns:
            True if the login answered "authenticated" and the session cookie is set

        Raises:
            TransportError: Token request failed or the network is down
            ProtocolError: Token response was malformed or of the wrong type
        """
        self._discard_session()
        self._authentication_identity = None
        session = await self._ensure_session()
        token = await request_transient_token(
            session, self.passport_url, service_name, service_secret, on_behalf_of_user_id
        )

        url = self.get_endpoint_url(TRANSIENT_LOGIN_ENDPOINT)
        try:
            async with session.get(url, params={TGT_PARAM: token.access_token}) as response:
                status = response.status
                data = await read_json(response) if status == 200 else None
        except aiohttp.ClientError as e:
            raise TransportError(f"Transient login failed: {e}", cause=e) from e

        log_extra = {
            "passport_url": self.passport_url,
            "on_behalf_of": on_behalf_of_user_id,
            "auth_type": "batch",
            "http_status": status,
        }

        if not isinstance(data, dict):
            logger.warning("Transient login rejected", extra=log_extra)
            return False

        message = str(data.get("message") or "")
        authenticated = (
            message.lower() == AUTHENTICATED_MESSAGE and self.is_cookie_authenticated
        )
        if authenticated:
            self._authentication_identity = data
            self._identity = Identity(
                user_id=on_behalf_of_user_id,
                authentication_type="batch",
                details=data,
            )

        logger.info(
            "Batch login completed",
            extra={**log_extra, "authenticated": authenticated},
        )
        return authenticated


__all__ = ["BatchServicePassport"]
