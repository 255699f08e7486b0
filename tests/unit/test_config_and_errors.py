# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket
import ssl

import h11
import httpcore

from hopwire import config
from hopwire.config import DEFAULT_USER_AGENT
from hopwire.errors import (
    BadResponse,
    BadUrl,
    ErrorCategory,
    TooManyRedirects,
    UnknownScheme,
    categorize_exception,
    error_category_to_reason,
)
from hopwire.http.models import Timeouts


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("HOPWIRE_CONNECT_TIMEOUT", "5.5")
    monkeypatch.setenv("HOPWIRE_READ_TIMEOUT", "0")
    monkeypatch.setenv("HOPWIRE_WRITE_TIMEOUT", "12")
    monkeypatch.setenv("HOPWIRE_MAX_REDIRECTS", "2")
    monkeypatch.setenv("HOPWIRE_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("HOPWIRE_VERIFY_SSL", "0")
    monkeypatch.setenv("HOPWIRE_MAX_BODY_BYTES", "1024")

    settings = config.load_http_settings()

    assert settings.connect_timeout == 5.5
    assert settings.read_timeout is None
    assert settings.write_timeout == 12.0
    assert settings.max_redirects == 2
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.verify_ssl is False
    assert settings.max_body_bytes == 1024
    assert Timeouts.from_settings(settings) == Timeouts(5.5, None, 12.0)


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("HOPWIRE_CONNECT_TIMEOUT", "not-a-number")
    monkeypatch.setenv("HOPWIRE_MAX_REDIRECTS", "-3")
    monkeypatch.setenv("HOPWIRE_MAX_BODY_BYTES", "ten")

    settings = config.load_http_settings()

    assert settings.connect_timeout == config.HttpSettings.connect_timeout
    assert settings.max_redirects == config.HttpSettings.max_redirects
    assert settings.max_body_bytes == config.HttpSettings.max_body_bytes
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_load_http_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("HOPWIRE_READ_TIMEOUT", "7.7")
    assert config.load_http_settings().read_timeout == 7.7
    monkeypatch.setenv("HOPWIRE_READ_TIMEOUT", "8.8")
    assert config.load_http_settings().read_timeout == 8.8


def _wrapped(outer: Exception, cause: Exception) -> Exception:
    outer.__cause__ = cause
    return outer


def test_categorize_exception():
    assert categorize_exception(httpcore.ReadTimeout("slow")) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpcore.ConnectError("refused")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(_wrapped(httpcore.ConnectError("dns"), socket.gaierror("nope"))) is ErrorCategory.DNS_ERROR
    assert categorize_exception(_wrapped(httpcore.ConnectError("tls"), ssl.SSLError("bad cert"))) is ErrorCategory.SSL_ERROR
    assert categorize_exception(httpcore.RemoteProtocolError("eof")) is ErrorCategory.PROTOCOL_ERROR
    assert categorize_exception(BadResponse("bad")) is ErrorCategory.PROTOCOL_ERROR
    assert categorize_exception(h11.LocalProtocolError("bad method")) is ErrorCategory.PROTOCOL_ERROR
    assert categorize_exception(TooManyRedirects()) is ErrorCategory.TOO_MANY_REDIRECTS
    assert categorize_exception(UnknownScheme("ftp")) is ErrorCategory.INVALID_URL
    assert categorize_exception(BadUrl("Bad redirection: x")) is ErrorCategory.INVALID_URL
    assert categorize_exception(RuntimeError("?")) is ErrorCategory.UNKNOWN_ERROR


def test_error_category_to_reason():
    assert error_category_to_reason(ErrorCategory.TOO_MANY_REDIRECTS) == "Redirect limit exceeded"
    assert error_category_to_reason(ErrorCategory.NONE) == ""
    assert error_category_to_reason(None) == ""
