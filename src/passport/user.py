"""Interactive (username/password) CAS passport."""

import dataclasses
import logging
from typing import Any, Callable, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from passport.constants import LOGIN_ENDPOINT, SERVICE_PARAM
from passport.cookie import CASCookieBasedPassport
from passport.exceptions import (
    AuthenticationFailed,
    ProtocolError,
    ProtocolFailure,
    TransportError,
)
from passport.models import Identity, LoginTicket, ServiceRedirection
from passport.ticket import raise_transport_error, read_json, request_login_ticket

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _convert_payload(data: Any, response_type: Callable[..., T] | type[T]) -> T:
    """Build the caller's type from a decoded JSON payload."""
    if response_type is dict or response_type is Any:
        return data
    if isinstance(response_type, type) and issubclass(response_type, BaseModel):
        return response_type.model_validate(data)
    if dataclasses.is_dataclass(response_type) and isinstance(data, dict):
        names = {f.name for f in dataclasses.fields(response_type)}
        return response_type(**{k: v for k, v in data.items() if k in names})
    return response_type(data)


class UserPassport(CASCookieBasedPassport):
    """
    Passport for an interactive user login.

    Two-step handshake: request a login ticket, then POST it together with
    the credentials. The POST response says nothing about success; the
    CASTGC cookie in the jar is the only proof.

    Usage:
        async with UserPassport("https://plm.example.com/3dpassport") as passport:
            if await passport.login("jdoe", password):
                identity = passport.get_identity()
    """

    def _login_form(
        self, ticket: LoginTicket, username: str, password: str, remember_me: bool
    ) -> dict[str, str]:
        return {
            "lt": ticket.lt,
            "username": username,
            "password": password,
            "rememberMe": "true" if remember_me else "false",
        }

    async def login(self, username: str, password: str, remember_me: bool = False) -> bool:
        """
        Log in with username and password.

        Returns:
            True if the login POST answered 200 and the session cookie is set

        Raises:
            TransportError: Ticket request failed or the network is down
            ProtocolError: Ticket response was malformed
        """
        self._discard_session()
        session = await self._ensure_session()
        ticket = await request_login_ticket(session, self.passport_url)

        url = self.get_endpoint_url(LOGIN_ENDPOINT)
        try:
            async with session.post(
                url, data=self._login_form(ticket, username, password, remember_me)
            ) as response:
                status = response.status
        except aiohttp.ClientError as e:
            raise TransportError(f"Login request failed: {e}", cause=e) from e

        if status != 200:
            logger.warning(
                "Login rejected",
                extra={"passport_url": self.passport_url, "username": username, "http_status": status},
            )
            return False

        authenticated = self.is_cookie_authenticated
        if authenticated:
            self._identity = Identity(user_id=username, authentication_type="user")

        logger.info(
            "User login completed",
            extra={
                "passport_url": self.passport_url,
                "username": username,
                "auth_type": "user",
                "authenticated": authenticated,
            },
        )
        return authenticated

    async def login_with_redirection(
        self,
        username: str,
        password: str,
        remember_me: bool,
        redirection: ServiceRedirection,
        response_type: Callable[..., T] | type[T] = dict,
    ) -> T:
        """
        Log in and let CAS redirect to a target service.

        Used when the target answers with a typed payload, e.g. a service
        ticket for a downstream system.

        Args:
            username: Login name
            password: Password
            remember_me: Ask CAS for a long-lived session
            redirection: Supplies the ``service`` URL CAS redirects to
            response_type: dict, a dataclass, or any callable taking the decoded body

        Returns:
            The decoded response body converted to response_type

        Raises:
            TransportError: Non-200 status or network failure
            AuthenticationFailed: Login answered but no session cookie was set
            ProtocolError: Ticket or login response was malformed
        """
        self._discard_session()
        session = await self._ensure_session()
        ticket = await request_login_ticket(session, self.passport_url)

        url = self.get_endpoint_url(LOGIN_ENDPOINT)
        try:
            async with session.post(
                url,
                params={SERVICE_PARAM: redirection.get_service_url()},
                data=self._login_form(ticket, username, password, remember_me),
            ) as response:
                if response.status != 200:
                    await raise_transport_error(response, url, "Login with redirection")
                data = await read_json(response)
        except aiohttp.ClientError as e:
            raise TransportError(f"Login with redirection failed: {e}", cause=e) from e

        if not self.is_cookie_authenticated:
            raise AuthenticationFailed(
                "Login with redirection answered but no CAS session cookie was set",
                context={"passport_url": self.passport_url},
            )

        if data is None:
            raise ProtocolError(
                "Login with redirection returned a non-JSON body",
                reason=ProtocolFailure.INVALID_LOGIN_RESPONSE,
                context={"passport_url": self.passport_url},
            )

        self._identity = Identity(
            user_id=username,
            authentication_type="user",
            details=data if isinstance(data, dict) else {},
        )
        logger.info(
            "User login with redirection completed",
            extra={"passport_url": self.passport_url, "username": username, "auth_type": "user"},
        )
        try:
            return _convert_payload(data, response_type)
        except ValidationError as e:
            raise ProtocolError(
                f"Login with redirection returned an unexpected payload for {response_type!r}",
                reason=ProtocolFailure.INVALID_LOGIN_RESPONSE,
                cause=e,
                context={"passport_url": self.passport_url},
            ) from e


__all__ = ["UserPassport"]
