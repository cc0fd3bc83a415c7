"""
ENOVIA service dispatch: CSRF token cache and the base request dispatcher.

Domain services (documents, engineering items, ...) subclass or wrap
EnoviaBaseService and use its get/post/patch/put/delete verbs.
"""

from enovia.csrf import CSRF_TOKEN_HEADER, CSRF_VALIDITY_MINUTES, CsrfToken, CsrfTokenCache
from enovia.exceptions import ResponseError, TokenFetchFailed, raise_for_response
from enovia.request import SECURITY_CONTEXT_HEADER, TENANT_PARAM, EnoviaRequest
from enovia.service import CSRF_TOKEN_ENDPOINT, EnoviaBaseService

__all__ = [
    "EnoviaBaseService",
    "EnoviaRequest",
    "CsrfToken",
    "CsrfTokenCache",
    "CSRF_TOKEN_ENDPOINT",
    "CSRF_TOKEN_HEADER",
    "CSRF_VALIDITY_MINUTES",
    "SECURITY_CONTEXT_HEADER",
    "TENANT_PARAM",
    "ResponseError",
    "TokenFetchFailed",
    "raise_for_response",
]
