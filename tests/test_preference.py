import time

import httpx
import pytest
from starlette.requests import Request
from starlette.responses import Response

from ridefx.services.currency.preference import (
    COOKIE_NAME,
    ClientCookiePreferenceStore,
    CurrencyPreference,
    ServerCookiePreferenceStore,
    resolve_currency,
)


class TestResolveCurrency:
    """Tests for cookie > browser > default resolution."""

    def test_enabled_cookie_wins(self):
        assert resolve_currency("EUR", "ja-JP", ["EUR", "USD"]) == CurrencyPreference("EUR", "cookie")

    def test_cookie_outside_enabled_set_is_ignored(self):
        pref = resolve_currency("EUR", "en-US", ["USD", "AED"])
        assert pref == CurrencyPreference("USD", "browser")

    def test_unsupported_cookie_is_ignored(self):
        pref = resolve_currency("XYZ", "de-DE", ["XYZ", "EUR"])
        assert pref == CurrencyPreference("EUR", "browser")

    def test_cookie_is_case_sensitive(self):
        pref = resolve_currency("eur", None, ["EUR"])
        assert pref.source != "cookie"

    def test_detected_currency_not_enabled_falls_to_default(self):
        assert resolve_currency(None, "ja-JP", ["AED", "USD"]) == CurrencyPreference("AED", "default")

    def test_default_is_first_enabled_when_base_disabled(self):
        assert resolve_currency(None, "ja-JP", ["GBP", "USD"]) == CurrencyPreference("GBP", "default")

    def test_no_header_detects_base_currency(self):
        # The detector itself falls back to AED, which counts as a browser match when enabled
        assert resolve_currency(None, None, ["USD", "AED"]) == CurrencyPreference("AED", "browser")

    @pytest.mark.parametrize("enabled", [[], None])
    def test_empty_enabled_list(self, enabled):
        assert resolve_currency("EUR", "de-DE", enabled) == CurrencyPreference("AED", "default")


def make_request(scheme: str = "http", cookie: str = "") -> Request:
    headers = [(b"host", b"example.com")]
    if cookie:
        headers.append((b"cookie", cookie.encode()))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": scheme,
            "server": ("example.com", 443 if scheme == "https" else 80),
            "path": "/",
            "query_string": b"",
            "headers": headers,
        }
    )


def set_cookie_header(response: Response) -> str:
    return response.headers["set-cookie"].lower()


class TestServerCookiePreferenceStore:
    def test_get_reads_request_cookie(self):
        store = ServerCookiePreferenceStore(make_request(cookie=f"{COOKIE_NAME}=GBP"), Response())
        assert store.get() == "GBP"

    def test_get_without_cookie(self):
        assert ServerCookiePreferenceStore(make_request(), Response()).get() is None

    def test_set_writes_cookie_attributes(self):
        response = Response()
        ServerCookiePreferenceStore(make_request(), response).set("EUR")

        header = set_cookie_header(response)
        assert header.startswith(f"{COOKIE_NAME}=eur")
        assert "max-age=31536000" in header
        assert "path=/" in header
        assert "samesite=lax" in header
        assert "secure" not in header
        assert "httponly" not in header

    def test_secure_only_over_https(self):
        response = Response()
        ServerCookiePreferenceStore(make_request("https"), response).set("EUR")
        assert "secure" in set_cookie_header(response)

    def test_clear_expires_cookie(self):
        response = Response()
        ServerCookiePreferenceStore(make_request(), response).clear()

        header = set_cookie_header(response)
        assert header.startswith(f'{COOKIE_NAME}="";') or header.startswith(f"{COOKIE_NAME}=;")
        assert "max-age=0" in header

    def test_no_validation_at_store_level(self):
        response = Response()
        ServerCookiePreferenceStore(make_request(), response).set("NOT-A-CODE")
        assert set_cookie_header(response).startswith(f"{COOKIE_NAME}=not-a-code")


class TestClientCookiePreferenceStore:
    def _cookie(self, cookies: httpx.Cookies):
        return next(c for c in cookies.jar if c.name == COOKIE_NAME)

    def test_set_then_get(self):
        store = ClientCookiePreferenceStore(httpx.Cookies(), "http://example.com")
        assert store.get() is None

        store.set("USD")
        assert store.get() == "USD"

    def test_overwrite(self):
        store = ClientCookiePreferenceStore(httpx.Cookies(), "http://example.com")
        store.set("USD")
        store.set("EUR")
        assert store.get() == "EUR"

    def test_cookie_attributes(self):
        cookies = httpx.Cookies()
        ClientCookiePreferenceStore(cookies, "http://example.com").set("USD")

        cookie = self._cookie(cookies)
        assert cookie.path == "/"
        assert cookie.domain == "example.com"
        assert cookie.secure is False
        assert cookie.get_nonstandard_attr("SameSite") == "Lax"
        assert abs(cookie.expires - (time.time() + 31536000)) < 60

    def test_secure_for_https(self):
        cookies = httpx.Cookies()
        ClientCookiePreferenceStore(cookies, "https://example.com").set("USD")
        assert self._cookie(cookies).secure is True

    def test_clear(self):
        store = ClientCookiePreferenceStore(httpx.Cookies(), "http://example.com")
        store.clear()  # nothing stored yet
        store.set("USD")
        store.clear()
        assert store.get() is None

    def test_expired_cookie_is_ignored(self):
        cookies = httpx.Cookies()
        store = ClientCookiePreferenceStore(cookies, "http://example.com", max_age=-10)
        store.set("USD")
        assert store.get() is None

    def test_cookie_is_sent_with_requests(self):
        cookies = httpx.Cookies()
        ClientCookiePreferenceStore(cookies, "http://example.com").set("GBP")

        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["cookie"] = request.headers.get("cookie")
            return httpx.Response(200)

        with httpx.Client(transport=httpx.MockTransport(handler), cookies=cookies) as client:
            client.get("http://example.com/currency/preference")
        assert seen["cookie"] == f"{COOKIE_NAME}=GBP"
