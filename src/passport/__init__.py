"""
CAS passports for the 3DEXPERIENCE authentication service.

Basic Usage:
    from passport import UserPassport

    async with UserPassport("https://plm.example.com/3dpassport") as passport:
        if not await passport.login("jdoe", os.getenv("ENOVIA_PASSWORD")):
            raise SystemExit("login failed")

Service on behalf of a user:
    from passport import BatchServicePassport

    passport = BatchServicePassport("https://plm.example.com/3dpassport")
    ok = await passport.login("my-service", os.getenv("SERVICE_SECRET"), "jdoe")

A passport is handed to an ``enovia.EnoviaBaseService`` which routes every
call through it.
"""

from passport.base import Passport
from passport.batch import BatchServicePassport
from passport.bearer import TokenPassport
from passport.constants import CAS_TICKET_COOKIE, TRANSIENT_TOKEN_TYPE
from passport.cookie import CASCookieBasedPassport
from passport.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    PassportError,
    ProtocolError,
    ProtocolFailure,
    TransportError,
    UnsupportedOperation,
)
from passport.models import (
    BearerToken,
    Identity,
    LoginTicket,
    ServiceRedirection,
    TransientToken,
)
from passport.session import is_session_authenticated
from passport.ticket import request_login_ticket, request_transient_token
from passport.user import UserPassport

__all__ = [
    # Passports
    "Passport",
    "CASCookieBasedPassport",
    "UserPassport",
    "BatchServicePassport",
    "TokenPassport",
    # Protocol
    "request_login_ticket",
    "request_transient_token",
    "is_session_authenticated",
    "CAS_TICKET_COOKIE",
    "TRANSIENT_TOKEN_TYPE",
    # Models
    "LoginTicket",
    "TransientToken",
    "Identity",
    "BearerToken",
    "ServiceRedirection",
    # Exceptions
    "PassportError",
    "ProtocolError",
    "ProtocolFailure",
    "TransportError",
    "AuthenticationFailed",
    "UnsupportedOperation",
    "NotAuthenticated",
]
