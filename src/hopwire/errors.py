# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import h11
import httpcore


class HopwireError(Exception):
    """Base class for errors raised by the dispatch engine."""


class UnknownScheme(HopwireError):
    """No transport is registered for the URL scheme. Raised before any I/O."""

    def __init__(self, scheme: str):
        super().__init__(f"Unknown scheme: {scheme}")
        self.scheme = scheme


class BadUrl(HopwireError):
    """A URL (typically a redirect `Location`) could not be parsed or resolved."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class TooManyRedirects(HopwireError):
    def __init__(self) -> None:
        super().__init__("Too many redirects")


class InvalidHeader(HopwireError, ValueError):
    """Header text that is not a valid `Name: value` pair."""


class BadResponse(HopwireError):
    """The response status line, header block or body framing could not be read."""


class InvalidCookie(HopwireError, ValueError):
    """A `Set-Cookie` value without a `name=value` pair. Ingest skips these."""


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    INVALID_URL = "INVALID_URL"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map hopwire, httpcore and h11 exceptions to ErrorCategory.

    httpcore wraps socket-level failures (`raise ConnectError(...) from exc`), so the
    original cause is inspected for TLS and DNS failures first.
    """
    cause = exc.__cause__
    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)) or isinstance(cause, ssl.SSLError):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, socket.gaierror) or isinstance(cause, socket.gaierror):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpcore.TimeoutException, socket.timeout)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, TooManyRedirects):
        return ErrorCategory.TOO_MANY_REDIRECTS

    if isinstance(exc, (UnknownScheme, BadUrl)):
        return ErrorCategory.INVALID_URL

    if isinstance(exc, (InvalidHeader, BadResponse, httpcore.ProtocolError, h11.ProtocolError)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (httpcore.NetworkError, httpcore.ProxyError, ConnectionError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout during request",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.PROTOCOL_ERROR: "Malformed HTTP message",
        ErrorCategory.INVALID_URL: "Unsupported or malformed URL",
        ErrorCategory.TOO_MANY_REDIRECTS: "Redirect limit exceeded",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "BadResponse",
    "BadUrl",
    "ErrorCategory",
    "HopwireError",
    "InvalidCookie",
    "InvalidHeader",
    "TooManyRedirects",
    "UnknownScheme",
    "categorize_exception",
    "error_category_to_reason",
]
