# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-request dispatch: unit construction, transports, cookies and redirects."""

from .body import SizedBody, send_body
from .client import HttpClient, create_default_http_client
from .cookies import AgentState, ingest_cookies, match_cookies, parse_set_cookie
from .headers import Header, build_headers, get_all_headers, get_header, has_header, normalize_headers
from .models import Headers, HttpRequest, HttpResponse, Timeouts
from .redirects import Finalize, Redirect, RedirectEngine, build_prelude
from .response import Response
from .transport import (
    TEST_SCHEME,
    Connection,
    ConnectionDispatcher,
    MemoryStream,
    MemoryTransport,
    TcpTransport,
    TlsTransport,
    Transport,
)
from .unit import Unit, build_unit
from .url import combine_query, join_url, parse_url

__all__ = [
    "TEST_SCHEME",
    "AgentState",
    "Connection",
    "ConnectionDispatcher",
    "Finalize",
    "Header",
    "Headers",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "MemoryStream",
    "MemoryTransport",
    "Redirect",
    "RedirectEngine",
    "Response",
    "SizedBody",
    "TcpTransport",
    "Timeouts",
    "TlsTransport",
    "Transport",
    "Unit",
    "build_headers",
    "build_prelude",
    "build_unit",
    "combine_query",
    "create_default_http_client",
    "get_all_headers",
    "get_header",
    "has_header",
    "ingest_cookies",
    "join_url",
    "match_cookies",
    "normalize_headers",
    "parse_set_cookie",
    "parse_url",
    "send_body",
]
