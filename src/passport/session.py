"""
Session proof: is the CAS ticket-granting cookie in the jar?

The platform's two deployment topologies scope the session cookie
differently inside one jar. On premise the passport lives under a path
(https://plm.example.com/3dpassport) and the cookie is scoped to it; in the
cloud the passport is the host root. Both scopes are checked, on-premise
first.
"""

import logging

from aiohttp.abc import AbstractCookieJar
from yarl import URL

from passport.constants import CAS_TICKET_COOKIE

logger = logging.getLogger(__name__)


def is_session_authenticated(
    cookie_jar: AbstractCookieJar | None,
    on_premise_uri: str | URL,
    cloud_base_uri: str | URL,
    cookie_name: str = CAS_TICKET_COOKIE,
) -> bool:
    """
    Report whether the named session cookie is present under either scope.

    Args:
        cookie_jar: Jar written by the HTTP transport; None means no session yet
        on_premise_uri: Full passport URI (path-based host)
        cloud_base_uri: Passport host root (tenant-based host)
        cookie_name: Session cookie to look for

    Returns:
        True if the cookie is found under at least one scope
    """
    if cookie_jar is None:
        return False

    # CAS scopes the cookie to "<context path>/"; looking up with the trailing
    # slash matches both "/3dpassport" and "/3dpassport/" cookie paths
    on_premise = URL(str(on_premise_uri))
    if not on_premise.path.endswith("/"):
        on_premise = on_premise.with_path(on_premise.path + "/")

    for scope, uri in (("on_premise", on_premise), ("cloud", URL(str(cloud_base_uri)))):
        cookies = cookie_jar.filter_cookies(uri)
        if cookie_name in cookies:
            logger.debug(
                "Session cookie found",
                extra={"cookie_scope": scope, "url": str(uri)},
            )
            return True

    return False


__all__ = ["is_session_authenticated"]
