# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
hopwire package entrypoint.

hopwire is the per-request dispatch engine of a blocking HTTP/1.1 client. It builds
request heads, attaches cookies from a shared jar, opens a transport chosen by URL
scheme, reads response heads, stores `Set-Cookie` values and follows redirects with
the method/body rules of each 3xx status. Sockets and TLS come from httpcore; URLs,
query strings and the cookie jar come from httpx.
"""

from .agent import Agent
from .config import HttpSettings, load_http_settings
from .errors import (
    BadResponse,
    BadUrl,
    ErrorCategory,
    HopwireError,
    InvalidCookie,
    InvalidHeader,
    TooManyRedirects,
    UnknownScheme,
    categorize_exception,
)
from .http import (
    AgentState,
    ConnectionDispatcher,
    Header,
    HttpClient,
    HttpRequest,
    HttpResponse,
    MemoryTransport,
    RedirectEngine,
    Response,
    SizedBody,
    Timeouts,
    Unit,
    build_unit,
    create_default_http_client,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "Agent",
    "AgentState",
    "BadResponse",
    "BadUrl",
    "ConnectionDispatcher",
    "ErrorCategory",
    "Header",
    "HopwireError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "InvalidCookie",
    "InvalidHeader",
    "MemoryTransport",
    "RedirectEngine",
    "Response",
    "SizedBody",
    "Timeouts",
    "TooManyRedirects",
    "Unit",
    "UnknownScheme",
    "build_unit",
    "categorize_exception",
    "create_default_http_client",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
