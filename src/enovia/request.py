"""Per-call request context for ENOVIA services."""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from enovia.csrf import CSRF_TOKEN_HEADER

SECURITY_CONTEXT_HEADER = "SecurityContext"
TENANT_PARAM = "tenant"

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"


@dataclass
class EnoviaRequest:
    """
    Everything needed to issue one service call.

    Built fresh per call and never retained. Tenant, security context and
    CSRF token are attached when given; caller parameters and headers are
    merged on top.
    """

    method: str
    path: str
    tenant: str | None = None
    security_context: str | None = None
    csrf_token: str | None = None
    requires_csrf_token: bool = False
    use_csrf_cache: bool = True
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    body_is_json: bool = True

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.security_context is not None:
            self.headers[SECURITY_CONTEXT_HEADER] = self.security_context
        if self.csrf_token is not None:
            self.headers[CSRF_TOKEN_HEADER] = self.csrf_token
        if self.tenant is not None:
            self.params[TENANT_PARAM] = self.tenant

    def add_query_parameters(self, params: Mapping[str, str] | None) -> None:
        if params:
            self.params.update({k: str(v) for k, v in params.items()})

    def add_headers(self, headers: Mapping[str, str] | None) -> None:
        if headers:
            self.headers.update(headers)

    def set_body(self, body: Any, is_json: bool = True) -> None:
        """
        Set a JSON or XML body.

        Non-string JSON bodies are serialized; XML bodies must already be
        str or bytes.

        Raises:
            TypeError: XML body that is not str or bytes
        """
        if not isinstance(body, (str, bytes)):
            if not is_json:
                raise TypeError(f"XML body must be str or bytes, got {type(body).__name__}")
            body = json.dumps(body)
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        self.body = body
        self.body_is_json = is_json
        self.headers.setdefault(
            "Content-Type", JSON_CONTENT_TYPE if is_json else XML_CONTENT_TYPE
        )


__all__ = [
    "EnoviaRequest",
    "SECURITY_CONTEXT_HEADER",
    "TENANT_PARAM",
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
]
