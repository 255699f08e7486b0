# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by unit construction and the redirect engine."""

from __future__ import annotations

from typing import Any
from urllib.parse import uses_relative

import httpx

from ..errors import BadUrl


def parse_url(raw: str | httpx.URL) -> httpx.URL:
    if isinstance(raw, httpx.URL):
        return raw
    try:
        return httpx.URL(raw)
    except httpx.InvalidURL as exc:
        raise BadUrl(f"Bad URL: {raw}: {exc}") from exc


def join_url(base: httpx.URL, location: str) -> httpx.URL:
    """Resolve a redirect `Location` (absolute or relative) against the current URL."""
    try:
        if base.scheme in uses_relative:
            return base.join(location)
        # urljoin leaves relative references alone for schemes it does not know
        target = httpx.URL(location)
        if target.is_absolute_url:
            return target
        return base.copy_with(scheme="http").join(location).copy_with(scheme=base.scheme)
    except (httpx.InvalidURL, ValueError) as exc:
        raise BadUrl(f"Bad redirection: {location}") from exc


def request_path(url: httpx.URL) -> str:
    """Percent-encoded path without the query; `/` when the URL has none."""
    path, _, _ = url.raw_path.partition(b"?")
    return path.decode("ascii") or "/"


def host_header(url: httpx.URL) -> str:
    """Host header value: the host, plus the port when it is not the scheme default."""
    return url.netloc.decode("ascii")


def url_query(url: httpx.URL) -> str:
    return url.query.decode("ascii")


def combine_query(url: httpx.URL, query: Any = None) -> str:
    """
    Merge the URL's own query with a caller-supplied query object.

    `query` is anything `httpx.QueryParams` accepts (mapping, list of pairs, string).

      http://h/p?a=1 + {"b": "2"} -> "?a=1&b=2"
      http://h/p     + {"b": "2"} -> "?b=2"
      http://h/p?a=1 + None       -> "?a=1"
      http://h/p     + None       -> ""
    """
    urlq = url_query(url)
    params = httpx.QueryParams(query) if query else httpx.QueryParams()
    callerq = str(params)
    if urlq and callerq:
        return f"?{urlq}&{callerq}"
    if urlq:
        return f"?{urlq}"
    if callerq:
        return f"?{callerq}"
    return ""


__all__ = [
    "combine_query",
    "host_header",
    "join_url",
    "parse_url",
    "request_path",
    "url_query",
]
