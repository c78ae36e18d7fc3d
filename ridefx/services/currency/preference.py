"""Display-currency preference: resolution and cookie persistence.

Resolution order is explicit cookie, then the browser's Accept-Language, then
the default. Persistence uses one cookie (``preferred-currency`` by default)
holding the bare code, written by either adapter:

* `ServerCookiePreferenceStore` for request handlers (reads the request,
  writes ``Set-Cookie`` on the outgoing response);
* `ClientCookiePreferenceStore` for code holding an ``httpx.Cookies`` jar,
  e.g. a platform front-end talking to this service.

Stores do not validate codes; callers check support/enablement first.
"""

from __future__ import annotations

from dataclasses import dataclass
from http.cookiejar import Cookie
import time
from typing import Optional, Protocol, Sequence

import httpx
from starlette.requests import Request
from starlette.responses import Response

from ridefx.models.constants import (
    DEFAULT_CURRENCY_CODE,
    SOURCE_BROWSER,
    SOURCE_COOKIE,
    SOURCE_DEFAULT,
)
from .detect import detect_currency_from_accept_language
from .metadata import is_valid_currency_code

COOKIE_NAME = "preferred-currency"
COOKIE_MAX_AGE = 31536000  # 1 year


@dataclass(frozen=True)
class CurrencyPreference:
    code: str
    source: str  # 'cookie' | 'browser' | 'default'


def resolve_currency(
    cookie_value: Optional[str],
    accept_language: Optional[str],
    enabled_codes: Sequence[str],
) -> CurrencyPreference:
    """Pick the display currency for a request. Never raises."""
    enabled = list(enabled_codes or ())
    if cookie_value and is_valid_currency_code(cookie_value) and cookie_value in enabled:
        return CurrencyPreference(cookie_value, SOURCE_COOKIE)

    detected = detect_currency_from_accept_language(accept_language)
    if detected in enabled:
        return CurrencyPreference(detected, SOURCE_BROWSER)

    if DEFAULT_CURRENCY_CODE in enabled:
        code = DEFAULT_CURRENCY_CODE
    else:
        code = enabled[0] if enabled else DEFAULT_CURRENCY_CODE
    return CurrencyPreference(code, SOURCE_DEFAULT)


class PreferenceStore(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, code: str) -> None: ...

    def clear(self) -> None: ...


class ServerCookiePreferenceStore:
    def __init__(
        self,
        request: Request,
        response: Response,
        cookie_name: str = COOKIE_NAME,
        max_age: int = COOKIE_MAX_AGE,
    ):
        self._request = request
        self._response = response
        self._name = cookie_name
        self._max_age = max_age

    @property
    def _secure(self) -> bool:
        return self._request.url.scheme == "https"

    def get(self) -> Optional[str]:
        return self._request.cookies.get(self._name)

    def set(self, code: str) -> None:
        self._response.set_cookie(
            key=self._name,
            value=code,
            max_age=self._max_age,
            path="/",
            samesite="lax",
            secure=self._secure,
            httponly=False,  # readable by the browser-side selector
        )

    def clear(self) -> None:
        self._response.delete_cookie(
            key=self._name, path="/", samesite="lax", secure=self._secure
        )


class ClientCookiePreferenceStore:
    """Preference cookie kept in an ``httpx.Cookies`` jar for ``base_url``."""

    def __init__(
        self,
        cookies: httpx.Cookies,
        base_url: str,
        cookie_name: str = COOKIE_NAME,
        max_age: int = COOKIE_MAX_AGE,
    ):
        url = httpx.URL(base_url)
        self._cookies = cookies
        self._domain = url.host
        self._secure = url.scheme == "https"
        self._name = cookie_name
        self._max_age = max_age

    def get(self) -> Optional[str]:
        self._cookies.jar.clear_expired_cookies()
        return self._cookies.get(self._name, domain=self._domain)

    def set(self, code: str) -> None:
        self.clear()
        cookie = Cookie(
            version=0,
            name=self._name,
            value=code,
            port=None,
            port_specified=False,
            domain=self._domain,
            domain_specified=False,
            domain_initial_dot=False,
            path="/",
            path_specified=True,
            secure=self._secure,
            expires=int(time.time()) + self._max_age,
            discard=False,
            comment=None,
            comment_url=None,
            rest={"SameSite": "Lax"},
            rfc2109=False,
        )
        self._cookies.jar.set_cookie(cookie)

    def clear(self) -> None:
        # httpx raises KeyError for (domain, path) deletes of a missing cookie
        self._cookies.delete(self._name, domain=self._domain)
