# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across hopwire."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..config import HttpSettings

Headers = dict[str, str]


@dataclass(frozen=True)
class Timeouts:
    """Per-hop socket timeouts in seconds; None disables a timeout."""

    connect: float | None = None
    read: float | None = None
    write: float | None = None

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> Timeouts:
        return cls(
            connect=settings.connect_timeout,
            read=settings.read_timeout,
            write=settings.write_timeout,
        )


@dataclass
class HttpRequest:
    """
    Caller-facing request.

    `headers` may be a mapping or a list of pairs (repeat a name by listing it twice).
    `query` is merged after the URL's own query string. `timeout` overrides every
    per-hop timeout (a Timeouts instance overrides them individually).
    """

    url: str
    method: str = "GET"
    headers: Headers | list[tuple[str, str]] | None = None
    body: Any = None
    query: Any = None
    timeout: float | Timeouts | None = None
    max_redirects: int | None = None


@dataclass
class HttpResponse:
    """Buffered HTTP response; transport and protocol failures are reported with `ok=False`."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)


__all__ = ["Headers", "HttpRequest", "HttpResponse", "Timeouts"]
