# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Scheme-to-transport dispatch and the byte stream a hop talks over.

Socket and TLS work is delegated to `httpcore` network backends; this module only
decides which transport serves a scheme and applies the hop's timeouts to every
connect, read and write.
"""

from __future__ import annotations

import logging
import ssl
import threading
from collections import deque
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

import certifi
import httpcore

from ..config import HttpSettings
from ..errors import UnknownScheme
from .models import Timeouts

if TYPE_CHECKING:
    from .unit import Unit

logger = logging.getLogger(__name__)

TEST_SCHEME = "test"
DEFAULT_PORTS = {"http": 80, "https": 443}
READ_SIZE = 64 * 1024


class Transport(Protocol):
    """Opens a connected byte stream for one hop."""

    def open(self, host: str, port: int | None, timeouts: Timeouts) -> httpcore.NetworkStream: ...


def create_ssl_context(verify: bool = True) -> ssl.SSLContext:
    if verify:
        context = ssl.create_default_context(cafile=certifi.where())
    else:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(["http/1.1"])
    return context


class TcpTransport:
    """Plaintext TCP via an httpcore network backend."""

    default_port = DEFAULT_PORTS["http"]

    def __init__(self, backend: httpcore.NetworkBackend | None = None):
        self._backend = backend or httpcore.SyncBackend()

    def open(self, host: str, port: int | None, timeouts: Timeouts) -> httpcore.NetworkStream:
        return self._backend.connect_tcp(host, port or self.default_port, timeout=timeouts.connect)


class TlsTransport(TcpTransport):
    """TCP followed by a TLS handshake; the handshake shares the connect timeout."""

    default_port = DEFAULT_PORTS["https"]

    def __init__(
        self,
        backend: httpcore.NetworkBackend | None = None,
        ssl_context: ssl.SSLContext | None = None,
        verify: bool = True,
    ):
        super().__init__(backend)
        self._ssl_context = ssl_context or create_ssl_context(verify)

    def open(self, host: str, port: int | None, timeouts: Timeouts) -> httpcore.NetworkStream:
        stream = super().open(host, port, timeouts)
        try:
            return stream.start_tls(self._ssl_context, server_hostname=host, timeout=timeouts.connect)
        except BaseException:
            stream.close()
            raise


class MemoryStream(httpcore.NetworkStream):
    """In-memory stream: serves scripted response bytes and records what was written."""

    def __init__(self, incoming: bytes, host: str = "", port: int | None = None, timeouts: Timeouts | None = None):
        self._incoming = memoryview(incoming)
        self.host = host
        self.port = port
        self.timeouts = timeouts or Timeouts()
        self.written = bytearray()
        self.closed = False

    def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        data = bytes(self._incoming[:max_bytes])
        self._incoming = self._incoming[len(data) :]
        return data

    def write(self, buffer: bytes, timeout: float | None = None) -> None:
        self.written.extend(buffer)

    def close(self) -> None:
        self.closed = True

    def get_extra_info(self, info: str) -> Any:
        return None


class MemoryTransport:
    """Transport for the `test` scheme; each open() consumes the next scripted response."""

    def __init__(self, responses: Iterable[bytes] = ()):
        self._responses: deque[bytes] = deque(responses)
        self._lock = threading.Lock()
        self.streams: list[MemoryStream] = []

    def add(self, response: bytes) -> None:
        with self._lock:
            self._responses.append(response)

    def open(self, host: str, port: int | None, timeouts: Timeouts) -> httpcore.NetworkStream:
        with self._lock:
            if not self._responses:
                raise httpcore.ConnectError(f"No scripted response for {host}")
            stream = MemoryStream(self._responses.popleft(), host, port, timeouts)
            self.streams.append(stream)
        return stream


class Connection:
    """A connected stream plus the timeouts of the hop that opened it."""

    def __init__(self, stream: httpcore.NetworkStream, timeouts: Timeouts):
        self._stream = stream
        self._timeouts = timeouts
        self.closed = False

    def write_all(self, data: bytes) -> None:
        if data:
            self._stream.write(data, timeout=self._timeouts.write)

    def read(self, max_bytes: int = READ_SIZE) -> bytes:
        """Return up to `max_bytes`; b"" at end of stream."""
        return self._stream.read(max_bytes, timeout=self._timeouts.read)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._stream.close()


class ConnectionDispatcher:
    """Maps a URL scheme to a transport and opens the hop's connection."""

    def __init__(
        self,
        transports: Mapping[str, Transport] | None = None,
        *,
        backend: httpcore.NetworkBackend | None = None,
        verify_ssl: bool = True,
        memory: MemoryTransport | None = None,
    ):
        self.memory = memory or MemoryTransport()
        self.transports: dict[str, Transport] = {
            "http": TcpTransport(backend),
            "https": TlsTransport(backend, verify=verify_ssl),
            TEST_SCHEME: self.memory,
        }
        if transports:
            self.transports.update(transports)

    @classmethod
    def from_settings(cls, settings: HttpSettings, **kwargs: Any) -> ConnectionDispatcher:
        return cls(verify_ssl=settings.verify_ssl, **kwargs)

    def connect(self, unit: Unit) -> Connection:
        scheme = unit.url.scheme
        transport = self.transports.get(scheme)
        if transport is None:
            raise UnknownScheme(scheme)
        port = unit.url.port
        logger.debug("Connecting %s://%s:%s", scheme, unit.hostname, port or DEFAULT_PORTS.get(scheme, ""))
        stream = transport.open(unit.hostname, port, unit.timeouts)
        return Connection(stream, unit.timeouts)


__all__ = [
    "Connection",
    "ConnectionDispatcher",
    "MemoryStream",
    "MemoryTransport",
    "TEST_SCHEME",
    "TcpTransport",
    "TlsTransport",
    "Transport",
    "create_ssl_context",
]
