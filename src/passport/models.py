"""Passport data models.

Pydantic schemas for authentication service responses, dataclasses for
state the passports keep between calls.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class LoginTicket(BaseModel):
    """Login ticket returned by the interactive ticket request.

    Single use; the server enforces expiry.

    Attributes:
        response: Handshake discriminator, "login" when a ticket was issued
        lt: Raw login ticket value
    """

    model_config = ConfigDict(frozen=True)

    response: str = Field(..., description="Handshake discriminator")
    lt: str = Field(default="", description="Raw login ticket value")


class TransientToken(BaseModel):
    """Bearer artifact issued to a service identity for an on-behalf-of login.

    Attributes:
        access_token: Opaque token redeemed by the transient login
        token_type: Discriminator, must be "CAS_TRANSIENT"
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(default="", description="Opaque transient token")
    token_type: str = Field(default="", description="Token discriminator")


@dataclass(frozen=True)
class Identity:
    """
    Principal resolved by a successful login.

    Attributes:
        user_id: Login name, or the user a service acts on behalf of
        authentication_type: "user", "batch" or "token"
        details: Raw login payload when the service returned one
    """

    user_id: str
    authentication_type: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BearerToken:
    """Bearer token with acquisition timestamp for freshness checks."""

    value: str
    acquired_at: datetime

    def is_valid(self, max_age_minutes: int) -> bool:
        age = datetime.now(UTC) - self.acquired_at
        return age <= timedelta(minutes=max_age_minutes)


class ServiceRedirection(Protocol):
    """Target a CAS login redirects to once the session is established."""

    def get_service_url(self) -> str:
        ...


class AuthenticatableRequest(Protocol):
    """Outgoing request a non-cookie passport can stamp."""

    headers: dict[str, str]


__all__ = [
    "LoginTicket",
    "TransientToken",
    "Identity",
    "BearerToken",
    "ServiceRedirection",
    "AuthenticatableRequest",
]
