"""Tests for the CAS session cookie lookup across both deployment topologies."""

import aiohttp

from passport.session import is_session_authenticated

ON_PREMISE_URI = "https://plm.example.com/3dpassport"
CLOUD_BASE_URI = "https://r1132100000001-eu1.iam.3dexperience.example.com/"


class TestIsSessionAuthenticated:
    def test_no_jar_is_unauthenticated(self):
        assert not is_session_authenticated(None, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_empty_jar_is_unauthenticated(self):
        jar = aiohttp.CookieJar()
        assert not is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_cookie_under_on_premise_scope(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{ON_PREMISE_URI}/login", path="/3dpassport")

        assert is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_cookie_scoped_to_context_path_with_trailing_slash(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{ON_PREMISE_URI}/login", path="/3dpassport/")

        assert is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)
        assert is_session_authenticated(jar, ON_PREMISE_URI + "/", CLOUD_BASE_URI)

    async def test_cookie_under_cloud_scope(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{CLOUD_BASE_URI}login", path="/")

        assert is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_cookie_under_both_scopes(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{ON_PREMISE_URI}/login", path="/3dpassport")
        set_cookie(jar, f"{CLOUD_BASE_URI}login", path="/")

        assert is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_path_scoped_cookie_not_visible_at_host_root(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{ON_PREMISE_URI}/login", path="/3dpassport")

        # Looking only at the host root misses an on-premise session
        assert not is_session_authenticated(
            jar, "https://plm.example.com/", "https://plm.example.com/"
        )
        assert is_session_authenticated(jar, ON_PREMISE_URI, "https://plm.example.com/")

    async def test_other_cookie_names_do_not_count(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{ON_PREMISE_URI}/login", name="JSESSIONID", path="/3dpassport")
        set_cookie(jar, f"{CLOUD_BASE_URI}login", name="afs", path="/")

        assert not is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_cookie_on_unrelated_host(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, "https://elsewhere.example.org/login", path="/")

        assert not is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)

    async def test_custom_cookie_name(self, set_cookie):
        jar = aiohttp.CookieJar()
        set_cookie(jar, f"{CLOUD_BASE_URI}login", name="MYTGC", path="/")

        assert is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI, cookie_name="MYTGC")
        assert not is_session_authenticated(jar, ON_PREMISE_URI, CLOUD_BASE_URI)
