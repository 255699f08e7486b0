# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Response head parsing and lazy body reads over the attached stream.

Parsing and body framing (Content-Length, chunked, read-to-close, HEAD/204/304) are
left to an `h11` client connection fed with the bytes read from the hop's stream.
"""

from __future__ import annotations

from collections.abc import Iterator

import h11
import httpx

from ..errors import BadResponse, InvalidHeader
from .headers import Header, get_all_headers, get_header, has_header
from .transport import Connection

MAX_HEAD_BYTES = 100 * 1024


def _next_event(parser: h11.Connection, connection: Connection):
    """Pull the next h11 event, reading from the connection as needed; b"" signals EOF."""
    try:
        while True:
            event = parser.next_event()
            if event is not h11.NEED_DATA:
                return event
            parser.receive_data(connection.read())
    except h11.RemoteProtocolError as exc:
        raise BadResponse(f"Malformed response: {exc}") from exc


class Response:
    """
    Status line and headers of a response.

    `begin_read` consumes only the head. Until `attach_stream` hands over the connection
    (the final hop), the body stays unread.
    """

    def __init__(
        self,
        url: httpx.URL,
        http_version: str,
        status: int,
        reason: str,
        headers: list[Header],
        parser: h11.Connection | None = None,
    ):
        self.url = url
        self.http_version = http_version
        self.status = status
        self.reason = reason
        self.headers = headers
        self._parser = parser
        self._connection: Connection | None = None
        self._is_head = False
        self._done = False

    @classmethod
    def begin_read(cls, connection: Connection, url: httpx.URL, method: str = "GET") -> Response:
        parser = h11.Connection(h11.CLIENT, max_incomplete_event_size=MAX_HEAD_BYTES)
        # the request head is written by the caller; this only tells the parser what was
        # asked so HEAD responses are framed without a body
        parser.send(
            h11.Request(
                method=method.upper(),
                target=url.raw_path,
                headers=[("Host", url.netloc or b"localhost")],
            )
        )

        event = _next_event(parser, connection)
        while isinstance(event, h11.InformationalResponse):
            event = _next_event(parser, connection)
        if not isinstance(event, h11.Response):
            raise BadResponse("Connection closed before the response head was received")

        try:
            headers = [
                Header.from_pair(name.decode("latin-1"), value.decode("latin-1"))
                for name, value in event.headers.raw_items()
            ]
        except InvalidHeader as exc:
            raise BadResponse(f"Bad response header: {exc}") from exc
        return cls(
            url,
            f"HTTP/{event.http_version.decode('ascii')}",
            event.status_code,
            event.reason.decode("latin-1"),
            headers,
            parser,
        )

    def header(self, name: str) -> str | None:
        return get_header(self.headers, name)

    def has(self, name: str) -> bool:
        return has_header(self.headers, name)

    def all(self, name: str) -> list[str]:
        return get_all_headers(self.headers, name)

    def redirect(self) -> bool:
        return 300 <= self.status <= 399

    @property
    def content_type(self) -> str:
        value = self.header("content-type") or "text/plain"
        return value.split(";", 1)[0].strip().lower()

    @property
    def charset(self) -> str:
        for param in (self.header("content-type") or "").split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip('"')
        return "utf-8"

    def attach_stream(self, connection: Connection, is_head: bool) -> None:
        """Hand the live connection to this response for caller-driven body reads."""
        self._connection = connection
        self._is_head = is_head

    def iter_bytes(self) -> Iterator[bytes]:
        connection, parser = self._connection, self._parser
        if connection is None or parser is None or self._done:
            return
        try:
            while not self._is_head:
                event = _next_event(parser, connection)
                if isinstance(event, h11.Data):
                    yield bytes(event.data)
                elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)) or event is h11.PAUSED:
                    break
            self._done = True
        finally:
            if self._done:
                self.close()

    def read(self) -> bytes:
        return b"".join(self.iter_bytes())

    def text(self) -> str:
        data = self.read()
        try:
            return data.decode(self.charset, errors="replace")
        except LookupError:
            return data.decode("utf-8", errors="replace")

    def close(self) -> None:
        self._done = True
        if self._connection is not None:
            self._connection.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status} {self.reason}] {self.url}>"


__all__ = ["Response"]
