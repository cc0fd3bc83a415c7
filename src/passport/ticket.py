"""
CAS ticket exchange protocol.

Stateless request/redeem helpers against the authentication service:

    Interactive:  GET /login?action=get_auth_params  -> {"response": "login", "lt": ...}
    Service:      GET /api/v2/batch/ticket?identifier=<user>
                  (DS-Service-Name / DS-Service-Secret headers)
                  -> {"access_token": ..., "token_type": "CAS_TRANSIENT"}

Each helper runs against a caller-owned aiohttp session so any Set-Cookie
headers land in that session's cookie jar.
"""

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from passport.constants import (
    IDENTIFIER_PARAM,
    LOGIN_ENDPOINT,
    LOGIN_TICKET_ACTION,
    LOGIN_TICKET_RESPONSE,
    SERVICE_NAME_HEADER,
    SERVICE_SECRET_HEADER,
    TRANSIENT_TICKET_ENDPOINT,
    TRANSIENT_TOKEN_TYPE,
)
from passport.exceptions import ProtocolError, ProtocolFailure, TransportError
from passport.models import LoginTicket, TransientToken

logger = logging.getLogger(__name__)


def endpoint_url(base_url: str, endpoint: str) -> str:
    """Append an endpoint path to a passport URL."""
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


async def read_json(response: aiohttp.ClientResponse) -> Any:
    """Decode a JSON body regardless of Content-Type; None if it isn't JSON."""
    try:
        return await response.json(content_type=None)
    except ValueError:
        return None


async def raise_transport_error(
    response: aiohttp.ClientResponse,
    url: str,
    operation: str,
    message: str | None = None,
    error_cls: type[TransportError] = TransportError,
) -> None:
    """Read the error body, log it and raise error_cls (TransportError by default)."""
    try:
        body = await response.text()
    except (aiohttp.ClientError, UnicodeDecodeError):
        body = "<unable to read response body>"

    logger.warning(
        f"{operation} failed",
        extra={
            "operation": operation,
            "http_url": url,
            "http_status": response.status,
            "response_body": body[:500],
        },
    )
    raise error_cls(
        message or f"{operation} failed: HTTP {response.status}",
        status_code=response.status,
        body=body,
        context={"url": url},
    )


async def request_login_ticket(
    session: aiohttp.ClientSession, passport_url: str
) -> LoginTicket:
    """
    Request a login ticket for an interactive login.

    Args:
        session: HTTP session whose cookie jar carries the CAS session
        passport_url: Base URL of the authentication service

    Returns:
        LoginTicket carrying the raw ``lt`` value

    Raises:
        TransportError: Non-200 status or network failure
        ProtocolError: Body is not JSON or ``response`` is not "login"
    """
    url = endpoint_url(passport_url, LOGIN_ENDPOINT)

    try:
        async with session.get(url, params={"action": LOGIN_TICKET_ACTION}) as response:
            if response.status != 200:
                await raise_transport_error(response, url, "Login ticket request")
            data = await read_json(response)
    except aiohttp.ClientError as e:
        raise TransportError(f"Login ticket request failed: {e}", cause=e) from e

    try:
        ticket = LoginTicket.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(
            "Malformed login ticket response",
            reason=ProtocolFailure.INVALID_TICKET_RESPONSE,
            cause=e,
            context={"url": url},
        ) from e

    if ticket.response != LOGIN_TICKET_RESPONSE:
        raise ProtocolError(
            f"Unexpected login ticket response: {ticket.response!r}",
            reason=ProtocolFailure.INVALID_TICKET_RESPONSE,
            context={"url": url},
        )
    if not ticket.lt:
        raise ProtocolError(
            "Login ticket response carries no ticket",
            reason=ProtocolFailure.INVALID_TICKET_RESPONSE,
            context={"url": url},
        )

    logger.debug("Login ticket acquired", extra={"passport_url": passport_url})
    return ticket


async def request_transient_token(
    session: aiohttp.ClientSession,
    passport_url: str,
    service_name: str,
    service_secret: str,
    identity_user_id: str,
) -> TransientToken:
    """
    Request a transient token for a service acting on behalf of a user.

    Args:
        session: HTTP session whose cookie jar carries the CAS session
        passport_url: Base URL of the authentication service
        service_name: Registered service name
        service_secret: Registered service secret
        identity_user_id: User the service acts on behalf of

    Returns:
        TransientToken of type CAS_TRANSIENT

    Raises:
        TransportError: Non-200 status or network failure
        ProtocolError: Body is not JSON or ``token_type`` is not CAS_TRANSIENT
    """
    url = endpoint_url(passport_url, TRANSIENT_TICKET_ENDPOINT)
    headers = {
        SERVICE_NAME_HEADER: service_name,
        SERVICE_SECRET_HEADER: service_secret,
    }

    try:
        async with session.get(
            url, params={IDENTIFIER_PARAM: identity_user_id}, headers=headers
        ) as response:
            if response.status != 200:
                await raise_transport_error(response, url, "Transient token request")
            data = await read_json(response)
    except aiohttp.ClientError as e:
        raise TransportError(f"Transient token request failed: {e}", cause=e) from e

    try:
        token = TransientToken.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(
            "Malformed transient token response",
            reason=ProtocolFailure.INVALID_TOKEN_TYPE,
            cause=e,
            context={"url": url},
        ) from e

    if token.token_type != TRANSIENT_TOKEN_TYPE:
        raise ProtocolError(
            f"Unexpected transient token type: {token.token_type!r}",
            reason=ProtocolFailure.INVALID_TOKEN_TYPE,
            context={"url": url},
        )

    logger.debug(
        "Transient token acquired",
        extra={"passport_url": passport_url, "on_behalf_of": identity_user_id},
    )
    return token


__all__ = [
    "endpoint_url",
    "read_json",
    "raise_transport_error",
    "request_login_ticket",
    "request_transient_token",
]
