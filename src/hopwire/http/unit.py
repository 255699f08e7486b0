# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-hop request context: hostname, query string, framing flag and final headers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from .body import SizedBody
from .cookies import AgentState, match_cookies
from .headers import Header, get_all_headers, get_header, has_header
from .models import Timeouts
from .url import combine_query, request_path


@dataclass(frozen=True)
class Unit:
    """
    Everything a hop needs to write its request head.

    A Unit is never mutated: a followed redirect gets a fresh Unit for the new target
    (see `for_redirect`).
    """

    agent: AgentState | None
    url: httpx.URL
    is_chunked: bool
    is_head: bool
    hostname: str
    query_string: str
    headers: tuple[Header, ...]
    caller_headers: tuple[Header, ...]
    timeouts: Timeouts

    @property
    def is_secure(self) -> bool:
        return self.url.scheme.lower() == "https"

    def header(self, name: str) -> str | None:
        return get_header(self.headers, name)

    def has(self, name: str) -> bool:
        return has_header(self.headers, name)

    def all(self, name: str) -> list[str]:
        return get_all_headers(self.headers, name)

    def for_redirect(self, url: httpx.URL, method: str, body: SizedBody, *, body_dropped: bool = False) -> Unit:
        """
        Context for the next hop.

        Cookies are matched again for the new target (the jar may have just learned
        some) and `Content-Length` is derived from the body actually sent. When the
        redirect dropped the body, the caller's own `Content-Length` and
        `Transfer-Encoding` go with it. The caller query object is only merged into
        the first hop; a `Location` carries its own.
        """
        headers = self.caller_headers
        if body_dropped:
            headers = tuple(h for h in headers if not (h.is_name("content-length") or h.is_name("transfer-encoding")))
        return build_unit(method, headers, None, self.timeouts, self.agent, url, body)


def build_unit(
    method: str,
    headers: Sequence[Header],
    query: Any,
    timeouts: Timeouts,
    agent: AgentState | None,
    url: httpx.URL,
    body: SizedBody,
) -> Unit:
    """Assemble the context of one hop. Raises InvalidHeader for a header that fails to parse."""
    caller_headers = tuple(headers)

    # obey an explicit transfer-encoding, never infer chunking
    is_chunked = bool(get_header(caller_headers, "transfer-encoding"))
    is_secure = url.scheme.lower() == "https"
    is_head = method.lower() == "head"
    hostname = url.host or "localhost"
    query_string = combine_query(url, query)

    cookie_headers: list[Header] = []
    if agent is not None:
        with agent.locked() as jar:
            cookie_headers = match_cookies(jar, hostname, request_path(url), is_secure)

    # chunked framing and Content-Length are mutually exclusive
    extra_headers: list[Header] = []
    if not is_chunked and not has_header(caller_headers, "content-length") and body.size is not None:
        extra_headers.append(Header.parse(f"Content-Length: {body.size}"))

    return Unit(
        agent=agent,
        url=url,
        is_chunked=is_chunked,
        is_head=is_head,
        hostname=hostname,
        query_string=query_string,
        headers=caller_headers + tuple(cookie_headers) + tuple(extra_headers),
        caller_headers=caller_headers,
        timeouts=timeouts,
    )


__all__ = ["Unit", "build_unit"]
