"""
pytest configuration for the ENOVIA client tests.

Adds src directory to Python path for imports and provides HTTP fakes:
mock aiohttp responses usable as async context managers and a helper that
drops a CAS session cookie into a real aiohttp.CookieJar, either directly or
when a mocked response is entered.
"""

import sys
from http.cookies import SimpleCookie
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from yarl import URL

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

PASSPORT_URL = "https://plm.example.com/3dpassport"
SERVICE_URL = "https://plm.example.com/enovia"


def mock_response(status=200, json_data=None, text="", url="https://plm.example.com/"):
    """Create a mock aiohttp response usable as an async context manager."""
    resp = AsyncMock()
    resp.status = status
    resp.reason = "OK" if status == 200 else "Error"
    resp.url = URL(url)
    if isinstance(json_data, Exception):
        resp.json = AsyncMock(side_effect=json_data)
    else:
        resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)
    resp.read = AsyncMock(return_value=text.encode())
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def mock_session(**verbs):
    """
    Create a mock session; each keyword is a verb (get/post/request) mapped
    to one response or a list of responses returned in order.
    """
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    for verb, responses in verbs.items():
        if isinstance(responses, list):
            setattr(session, verb, MagicMock(side_effect=responses))
        else:
            setattr(session, verb, MagicMock(return_value=responses))
    return session


def add_cookie(jar, response_url, name="CASTGC", value="TGC-1-abc", path=None):
    """Store a cookie in the jar as if it came with a response from response_url."""
    cookie = SimpleCookie()
    cookie[name] = value
    if path is not None:
        cookie[name]["path"] = path
    jar.update_cookies(cookie, response_url=URL(response_url))


def set_cookie_on_enter(response, jar, response_url, **cookie):
    """Make entering the response store a cookie, like aiohttp storing Set-Cookie."""

    async def enter():
        add_cookie(jar, response_url, **cookie)
        return response

    response.__aenter__ = AsyncMock(side_effect=enter)
    return response


@pytest.fixture
def make_response():
    return mock_response


@pytest.fixture
def make_session():
    return mock_session


@pytest.fixture
def set_cookie():
    return add_cookie


@pytest.fixture
def cookie_on_enter():
    return set_cookie_on_enter


@pytest.fixture
def passport_url():
    return PASSPORT_URL


@pytest.fixture
def service_url():
    return SERVICE_URL
