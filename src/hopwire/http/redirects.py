# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Hop orchestration: connect, send, read the head, ingest cookies, then follow or finish.

Redirects are followed in a loop carrying (unit, method, body, remaining hops); each hop
reports a tagged outcome so the loop only branches on "finalize" versus "redirect".
Failures are raised and propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

import httpx

from ..errors import TooManyRedirects
from .body import SizedBody, send_body
from .cookies import ingest_cookies
from .response import Response
from .transport import Connection, ConnectionDispatcher
from .unit import Unit
from .url import host_header, join_url, request_path

logger = logging.getLogger(__name__)

# The body of these is dropped and the method rewritten to GET; any other 3xx replays both.
METHOD_REWRITE_STATUSES = frozenset({301, 302, 303})


@dataclass(frozen=True)
class Finalize:
    response: Response


@dataclass(frozen=True)
class Redirect:
    url: httpx.URL
    method: str
    body: SizedBody
    body_dropped: bool = False


HopOutcome = Union[Finalize, Redirect]


def build_prelude(unit: Unit, method: str) -> bytes:
    """Request line and header block, serialized as one buffer."""
    lines = [f"{method} {request_path(unit.url)}{unit.query_string} HTTP/1.1\r\n"]
    if not unit.has("host"):
        lines.append(f"Host: {host_header(unit.url)}\r\n")
    lines.extend(f"{header.name}: {header.value}\r\n" for header in unit.headers)
    lines.append("\r\n")
    return "".join(lines).encode("latin-1")


class RedirectEngine:
    """Runs a request through as many hops as its redirect budget allows."""

    def __init__(self, dispatcher: ConnectionDispatcher):
        self.dispatcher = dispatcher

    def run(self, unit: Unit, method: str, body: SizedBody, redirects: int) -> Response:
        while True:
            connection = self.dispatcher.connect(unit)
            try:
                outcome = self._hop(unit, connection, method, body, redirects)
            except BaseException:
                connection.close()
                raise
            if isinstance(outcome, Finalize):
                return outcome.response
            logger.debug("Redirecting %s %s -> %s %s", method, unit.url, outcome.method, outcome.url)
            method, body = outcome.method, outcome.body
            unit = unit.for_redirect(outcome.url, method, body, body_dropped=outcome.body_dropped)
            redirects -= 1

    def _hop(self, unit: Unit, connection: Connection, method: str, body: SizedBody, redirects: int) -> HopOutcome:
        connection.write_all(build_prelude(unit, method))

        response = Response.begin_read(connection, unit.url, method)
        logger.debug("%s %s -> %s", method, unit.url, response.status)

        if unit.agent is not None:
            ingest_cookies(unit.agent, unit.hostname, response.all("set-cookie"), unit.url)

        if response.redirect() and redirects == 0:
            raise TooManyRedirects()

        location = response.header("location") if response.redirect() else None
        if location is not None:
            new_url = join_url(unit.url, location)
            if response.status in METHOD_REWRITE_STATUSES:
                # the server still expects the announced body on this connection
                send_body(body, unit.is_chunked, connection)
                connection.close()
                return Redirect(new_url, "GET", SizedBody.empty(), body_dropped=True)
            connection.close()
            return Redirect(new_url, method, body)

        send_body(body, unit.is_chunked, connection)
        response.attach_stream(connection, unit.is_head)
        return Finalize(response)


__all__ = ["Finalize", "HopOutcome", "Redirect", "RedirectEngine", "build_prelude"]
