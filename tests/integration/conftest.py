"""
Fixtures for end-to-end tests against an in-process platform.

FakePlatform serves a minimal CAS passport under /3dpassport and an ENOVIA
service under /enovia on one aiohttp application. Cookies are issued the
way an on-premise deployment scopes them:

- CASTGC with path "/3dpassport/" after a successful login
- JSESSIONID with path "/enovia" once a service ticket is redeemed

Nothing is mocked on the client side: Set-Cookie headers reach the real
aiohttp cookie jar, and later requests only succeed if the jar sends them
back.
"""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from yarl import URL

USERS = {"jdoe": "pw", "alice": "pw"}
SERVICES = {"batch-svc": "s3cret"}
LOGIN_TICKET = "LT-1"
SERVICE_TICKET = "ST-1"
CSRF_VALUE = "csrf-1"


class FakePlatform:
    """In-memory CAS passport and ENOVIA service."""

    def __init__(self):
        self.csrf_fetches = 0
        self.created: list[dict] = []
        self.app = web.Application()
        self.app.router.add_get("/3dpassport/login", self.login_form)
        self.app.router.add_post("/3dpassport/login", self.login)
        self.app.router.add_get("/3dpassport/api/v2/batch/ticket", self.batch_ticket)
        self.app.router.add_get("/3dpassport/api/login/cas/transient", self.transient_login)
        self.app.router.add_get("/enovia/resources/v1/application/CSRF", self.csrf)
        self.app.router.add_post("/enovia/resources/v1/modeler/documents", self.create_document)

    @staticmethod
    def _redirect(location) -> web.Response:
        return web.Response(status=302, headers={"Location": str(location)})

    @staticmethod
    def _grant_tgt(response: web.StreamResponse) -> None:
        response.set_cookie("CASTGC", "TGC-1", path="/3dpassport/")

    # CAS passport

    async def login_form(self, request: web.Request) -> web.Response:
        if request.query.get("action") == "get_auth_params":
            return web.json_response({"response": "login", "lt": LOGIN_TICKET})

        service = request.query.get("service")
        if service and "CASTGC" in request.cookies:
            return self._redirect(URL(service).update_query(ticket=SERVICE_TICKET))
        return web.Response(status=401, text="login required")

    async def login(self, request: web.Request) -> web.Response:
        form = await request.post()
        known = USERS.get(form.get("username"))
        if form.get("lt") != LOGIN_TICKET or known != form.get("password"):
            # CAS answers a bad password with the login page again
            return web.Response(
                text="<html>Invalid credentials</html>", content_type="text/html"
            )

        service = request.query.get("service")
        if service:
            response = web.json_response({"ticket": SERVICE_TICKET, "service": service})
        else:
            response = web.Response(text="<html>Logged in</html>", content_type="text/html")
        self._grant_tgt(response)
        return response

    async def batch_ticket(self, request: web.Request) -> web.Response:
        name = request.headers.get("DS-Service-Name")
        if name not in SERVICES or SERVICES[name] != request.headers.get("DS-Service-Secret"):
            return web.Response(status=403, text="unknown service")

        identifier = request.query["identifier"]
        return web.json_response(
            {"access_token": f"TT-{identifier}", "token_type": "CAS_TRANSIENT"}
        )

    async def transient_login(self, request: web.Request) -> web.Response:
        if request.query.get("tgt") != "TT-jdoe":
            return web.json_response({"message": "denied"})

        response = web.json_response({"message": "Authenticated", "user": "jdoe"})
        self._grant_tgt(response)
        return response

    # ENOVIA service

    def _enovia_session(self, request: web.Request) -> web.Response | None:
        """Redirect through CAS until the request carries an ENOVIA session."""
        if request.query.get("ticket") == SERVICE_TICKET:
            query = {k: v for k, v in request.query.items() if k != "ticket"}
            response = self._redirect(request.rel_url.with_query(query))
            response.set_cookie("JSESSIONID", "ENO-1", path="/enovia")
            return response
        if "JSESSIONID" not in request.cookies:
            login = request.url.with_path("/3dpassport/login")
            return self._redirect(login.with_query(service=str(request.url)))
        return None

    async def csrf(self, request: web.Request) -> web.Response:
        redirect = self._enovia_session(request)
        if redirect is not None:
            return redirect

        self.csrf_fetches += 1
        return web.json_response(
            {"success": True, "csrf": {"name": "ENO_CSRF_TOKEN", "value": CSRF_VALUE}}
        )

    async def create_document(self, request: web.Request) -> web.Response:
        if "JSESSIONID" not in request.cookies:
            return web.Response(status=401, text="no session")
        if request.headers.get("ENO_CSRF_TOKEN") != CSRF_VALUE:
            return web.Response(status=403, text="bad CSRF token")

        self.created.append(
            {
                "body": await request.json(),
                "tenant": request.query.get("tenant"),
                "security_context": request.headers.get("SecurityContext"),
            }
        )
        return web.json_response({"id": "DOC-1"}, status=201)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture(params=["127.0.0.1", "localhost"])
async def platform_server(request, platform):
    """Serve the platform on an IP address and on a hostname."""
    async with TestServer(platform.app, host=request.param) as server:
        yield server
