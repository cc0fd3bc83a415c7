"""ENOVIA service exceptions."""

import aiohttp

from core.errors import PlatformError, classify_http_status
from passport.exceptions import TransportError


class TokenFetchFailed(TransportError):
    """The CSRF token endpoint answered with a non-200 status."""

    pass


class ResponseError(PlatformError):
    """
    A service call returned an unexpected status.

    Raised by service layers built on the dispatcher, which itself hands
    every response back unchecked. The message is the response body when
    there is one, otherwise the HTTP reason.
    """

    def __init__(
        self,
        response: aiohttp.ClientResponse,
        body: str | None = None,
        context: dict | None = None,
    ):
        self.response = response
        self.status_code = response.status
        self.body = body
        self.category = classify_http_status(response.status)
        message = body or f"HTTP {response.status} {response.reason or ''}".strip()
        super().__init__(message, context=context)


async def raise_for_response(
    response: aiohttp.ClientResponse, expected: tuple[int, ...] = (200,)
) -> aiohttp.ClientResponse:
    """
    Raise ResponseError unless the status is one of ``expected``.

    Returns:
        The response, for chaining
    """
    if response.status in expected:
        return response
    try:
        body = await response.text()
    except (aiohttp.ClientError, UnicodeDecodeError):
        body = None
    raise ResponseError(response, body, context={"url": str(response.url)})


__all__ = ["TokenFetchFailed", "ResponseError", "raise_for_response"]
