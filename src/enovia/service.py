"""
Base request dispatcher for ENOVIA services.

Every service call goes through EnoviaBaseService:

    1. join the service path and the endpoint
    2. fetch (or reuse) the CSRF token when the call needs one and attach
       it with the tenant query parameter and the security context header
    3. let a non-cookie passport stamp the request
    4. merge caller parameters, headers and body, then execute the verb
    5. hand the raw response back; status interpretation is left to the caller

Cookie passports share their cookie jar with the service session so the
CAS session cookie travels with every call.
"""

import asyncio
import logging
from typing import Any, Mapping

import aiohttp
from yarl import URL

from enovia.csrf import CSRF_VALIDITY_MINUTES, CsrfTokenCache
from enovia.request import EnoviaRequest
from passport.base import Passport
from passport.constants import DEFAULT_TIMEOUT_SECONDS
from passport.exceptions import NotAuthenticated, TransportError

logger = logging.getLogger(__name__)

CSRF_TOKEN_ENDPOINT = "/resources/v1/application/CSRF"


class EnoviaBaseService:
    """
    Dispatcher shared by all ENOVIA service clients.

    Usage:
        async with EnoviaBaseService(
            "https://plm.example.com/enovia", passport, security_context="VPLMProjectLeader.Company Name.Default"
        ) as service:
            response = await service.get("/resources/v1/modeler/documents/ABC")
            response = await service.post("/resources/v1/modeler/documents", body=payload)
    """

    def __init__(
        self,
        service_url: str,
        passport: Passport,
        tenant: str | None = None,
        security_context: str | None = None,
        csrf_validity_minutes: int = CSRF_VALIDITY_MINUTES,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    ):
        if not (service_url or "").startswith(("http://", "https://")):
            raise ValueError(
                f"Service URL must start with http:// or https://, got: {service_url!r}"
            )

        uri = URL(service_url)
        self._host = str(uri.origin())
        self._service_path = uri.path
        self._passport = passport
        self.tenant = tenant
        self.security_context = security_context
        self.timeout_seconds = timeout_seconds

        self._session: aiohttp.ClientSession | None = None
        self._closed = False
        self._csrf_cache = CsrfTokenCache(
            self._ensure_session,
            self._absolute_url(self.get_endpoint_url(CSRF_TOKEN_ENDPOINT)),
            validity_minutes=csrf_validity_minutes,
        )

        logger.debug(
            "EnoviaBaseService initialized",
            extra={
                "service_url": self.service_url,
                "auth_type": "cookie" if passport.is_cookie_authentication() else "token",
            },
        )

    @property
    def passport(self) -> Passport:
        return self._passport

    @property
    def service_url(self) -> str:
        return f"{self._host}{self._service_path}"

    @property
    def include_tenant(self) -> bool:
        return self.tenant is not None

    @property
    def csrf_cache(self) -> CsrfTokenCache:
        return self._csrf_cache

    def get_endpoint_url(self, endpoint: str) -> str:
        """Join the service path and an endpoint without doubling the separator."""
        if self._service_path.endswith("/") and endpoint.startswith("/"):
            endpoint = endpoint[1:]
        return f"{self._service_path}{endpoint}"

    def _absolute_url(self, path: str) -> str:
        return f"{self._host}{path}"

    async def __aenter__(self) -> "EnoviaBaseService":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("EnoviaBaseService is closed, cannot create new session")
        if self._session is None or self._session.closed:
            if self._passport.is_cookie_authentication():
                cookie_jar = self._passport.cookie_jar
            else:
                cookie_jar = aiohttp.CookieJar(unsafe=True)
            self._session = aiohttp.ClientSession(
                cookie_jar=cookie_jar,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    async def get_csrf_token(self, use_cache: bool = True) -> str:
        return await self._csrf_cache.get_token(use_cache)

    async def _create_request(
        self,
        method: str,
        endpoint: str,
        requires_csrf_token: bool,
        use_csrf_cache: bool,
    ) -> EnoviaRequest:
        csrf_token = None
        if requires_csrf_token:
            csrf_token = await self.get_csrf_token(use_csrf_cache)

        request = EnoviaRequest(
            method=method,
            path=self.get_endpoint_url(endpoint),
            tenant=self.tenant,
            security_context=self.security_context,
            csrf_token=csrf_token,
            requires_csrf_token=requires_csrf_token,
            use_csrf_cache=use_csrf_cache,
        )

        if not self._passport.is_cookie_authentication():
            if not await self._passport.authenticate_request(request):
                raise NotAuthenticated(
                    f"{type(self._passport).__name__} could not authenticate the request"
                )

        return request

    async def _execute(
        self,
        method: str,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        body_is_json: bool = True,
        requires_csrf_token: bool = True,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        request = await self._create_request(method, endpoint, requires_csrf_token, use_csrf_cache)
        request.add_query_parameters(params)
        request.add_headers(headers)
        if body is not None:
            request.set_body(body, body_is_json)

        session = await self._ensure_session()
        url = self._absolute_url(request.path)
        start_time = asyncio.get_running_loop().time()

        try:
            async with session.request(
                request.method,
                url,
                params=request.params or None,
                headers=request.headers,
                data=request.body,
            ) as response:
                await response.read()
        except aiohttp.ClientError as e:
            logger.error(
                "API connection error",
                exc_info=True,
                extra={"api_endpoint": endpoint, "api_method": request.method, "http_url": url},
            )
            raise TransportError(f"Connection error: {e}", cause=e, context={"url": url}) from e

        duration = asyncio.get_running_loop().time() - start_time
        logger.debug(
            "API request completed",
            extra={
                "api_endpoint": endpoint,
                "api_method": request.method,
                "http_status": response.status,
                "duration_seconds": round(duration, 3),
            },
        )
        return response

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        requires_csrf_token: bool = False,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        return await self._execute(
            "GET",
            endpoint,
            params,
            headers,
            requires_csrf_token=requires_csrf_token,
            use_csrf_cache=use_csrf_cache,
        )

    async def post(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        body_is_json: bool = True,
        requires_csrf_token: bool = True,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        return await self._execute(
            "POST", endpoint, params, headers, body, body_is_json, requires_csrf_token, use_csrf_cache
        )

    async def patch(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        body_is_json: bool = True,
        requires_csrf_token: bool = True,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        return await self._execute(
            "PATCH", endpoint, params, headers, body, body_is_json, requires_csrf_token, use_csrf_cache
        )

    async def put(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        body_is_json: bool = True,
        requires_csrf_token: bool = True,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        return await self._execute(
            "PUT", endpoint, params, headers, body, body_is_json, requires_csrf_token, use_csrf_cache
        )

    async def delete(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        requires_csrf_token: bool = True,
        use_csrf_cache: bool = True,
    ) -> aiohttp.ClientResponse:
        return await self._execute(
            "DELETE",
            endpoint,
            params,
            headers,
            requires_csrf_token=requires_csrf_token,
            use_csrf_cache=use_csrf_cache,
        )


__all__ = ["EnoviaBaseService", "CSRF_TOKEN_ENDPOINT"]
