# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request bodies and their wire framing (fixed length or chunked)."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol, Union

CHUNK_SIZE = 64 * 1024

BodySource = Union[bytes, BinaryIO, Iterable[bytes]]


class ByteSink(Protocol):
    def write_all(self, data: bytes) -> None: ...


@dataclass(frozen=True)
class SizedBody:
    """
    A request body plus its byte size when known up front.

    Byte payloads are re-readable: `chunks()` starts from the beginning on every call,
    so a 307/308 replay resends the same bytes. File objects and iterators are read
    from wherever they currently are; a stream consumed by an earlier hop is not rewound.
    """

    source: BodySource = b""
    size: int | None = None

    @classmethod
    def empty(cls) -> SizedBody:
        return cls(b"", None)

    @classmethod
    def from_payload(cls, payload: Any) -> SizedBody:
        if payload is None:
            return cls.empty()
        if isinstance(payload, SizedBody):
            return payload
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        if isinstance(payload, (bytes, bytearray, memoryview)):
            data = bytes(payload)
            return cls(data, len(data))
        # file objects and chunk iterators stream with unknown size
        return cls(payload, None)

    def chunks(self) -> Iterator[bytes]:
        source = self.source
        if isinstance(source, bytes):
            if source:
                yield source
            return
        read = getattr(source, "read", None)
        if callable(read):
            while True:
                chunk = read(CHUNK_SIZE)
                if not chunk:
                    return
                yield chunk
        else:
            for chunk in source:
                yield bytes(chunk)


def send_body(body: SizedBody, is_chunked: bool, sink: ByteSink) -> None:
    """Write the body verbatim, or as chunked transfer coding ending with a zero chunk."""
    if not is_chunked:
        for chunk in body.chunks():
            sink.write_all(chunk)
        return
    for chunk in body.chunks():
        if not chunk:
            # a zero-length chunk would end the body early
            continue
        sink.write_all(b"%x\r\n" % len(chunk) + chunk + b"\r\n")
    sink.write_all(b"0\r\n\r\n")


__all__ = ["CHUNK_SIZE", "SizedBody", "send_body"]
