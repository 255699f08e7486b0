# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Shared cookie state: outgoing cookie selection and `Set-Cookie` ingest.

The jar is an `httpx.Cookies` (backed by `http.cookiejar.CookieJar`) owned by an
`AgentState`. Every read and write goes through `AgentState.locked()`, which is
held only while the jar is touched and never across network I/O.
"""

from __future__ import annotations

import email.message
import logging
import threading
import urllib.request
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from http.cookiejar import Cookie, CookieJar
from urllib.parse import quote, unquote

import httpx

from ..errors import InvalidCookie, InvalidHeader
from .headers import Header

logger = logging.getLogger(__name__)

# Everything outside these (and ASCII alphanumerics, "_.-~") is percent-encoded in a
# rendered `name=value`.
_COOKIE_SAFE = "!$&'()*+,"


class AgentState:
    """Cookie jar shared by every request issued through one agent."""

    def __init__(self, jar: httpx.Cookies | None = None):
        self.jar = jar if jar is not None else httpx.Cookies()
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[httpx.Cookies]:
        with self._lock:
            yield self.jar


# TODO: reject Domain attributes naming a public suffix (".com"); substring matching
# currently lets such cookies reach every host under that suffix.
def match_cookies(jar: httpx.Cookies, hostname: str, path: str, is_secure: bool) -> list[Header]:
    """Select cookies for a request and render each as a `Cookie: name=value` header."""
    headers: list[Header] = []
    for cookie in jar.jar:
        # no domain, no match
        domain = (cookie.domain or "").lstrip(".")
        domain_ok = bool(domain) and domain in hostname
        # an unspecified path matches every request path
        path_ok = not cookie.path_specified or path.startswith(cookie.path)
        secure_ok = not cookie.secure or is_secure
        if not (domain_ok and path_ok and secure_ok):
            continue
        nameval = f"{quote(cookie.name, safe=_COOKIE_SAFE)}={quote(cookie.value or '', safe=_COOKIE_SAFE)}"
        try:
            headers.append(Header.parse(f"Cookie: {nameval}"))
        except InvalidHeader:
            continue
    return headers


class _SetCookieResponse:
    """The `info()` view `CookieJar.make_cookies` reads `Set-Cookie` values from."""

    def __init__(self, raw: str):
        self._headers = email.message.Message()
        self._headers["Set-Cookie"] = raw

    def info(self) -> email.message.Message:
        return self._headers


def parse_set_cookie(
    raw: str,
    url: str | httpx.URL = "http://localhost/",
    jar: CookieJar | None = None,
) -> Cookie | None:
    """
    Parse one `Set-Cookie` value with the cookiejar's Netscape parser.

    `url` is the response URL; it supplies the default path (and the domain when the
    value carries none). Unknown attributes such as `Priority` or `Partitioned` are kept
    in `Cookie.rest`. Name and value are percent-decoded.

    Returns None when the cookie is already expired; if `jar` is given, an expired
    cookie also removes its stored counterpart. Raises InvalidCookie when the value has
    no `name=value` pair.
    """
    name, sep, _ = raw.split(";", 1)[0].partition("=")
    if not sep or not name.strip():
        raise InvalidCookie(f"Unparseable cookie: {raw!r}")
    cookiejar = jar if jar is not None else CookieJar()
    cookies = cookiejar.make_cookies(_SetCookieResponse(raw), urllib.request.Request(str(url)))
    if not cookies:
        return None
    cookie = cookies[0]
    cookie.name = unquote(cookie.name)
    if cookie.value is not None:
        cookie.value = unquote(cookie.value)
    return cookie


def ingest_cookies(
    state: AgentState,
    hostname: str,
    raw_cookies: Iterable[str],
    url: str | httpx.URL | None = None,
) -> int:
    """Merge `Set-Cookie` values into the shared jar. Returns how many were stored."""
    request_url = url if url is not None else f"http://{hostname}/"
    stored = 0
    with state.locked() as jar:
        for raw_cookie in raw_cookies:
            to_parse = raw_cookie if "domain=" in raw_cookie.lower() else f"{raw_cookie}; Domain={hostname}"
            try:
                cookie = parse_set_cookie(to_parse, request_url, jar.jar)
            except InvalidCookie as exc:
                logger.debug("Ignoring unparseable cookie from %s: %s", hostname, exc)
                continue
            if cookie is None:
                logger.debug("Dropped expired cookie from %s: %r", hostname, raw_cookie)
                continue
            jar.jar.set_cookie(cookie)
            stored += 1
    return stored


__all__ = ["AgentState", "ingest_cookies", "match_cookies", "parse_set_cookie"]
