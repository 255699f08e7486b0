# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Validated header pairs and header-list lookups.

HTTP header field names are case-insensitive (RFC 9110). Headers are kept as an
ordered list of `Header` pairs rather than a dict: the same name may legitimately
appear several times (`Cookie`, `Set-Cookie`) and order is preserved on the wire.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidHeader

# RFC 9110 token characters.
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Visible latin-1 text plus SP and HTAB.
_VALUE_RE = re.compile(r"^[\t\x20-\x7e\x80-\xff]*$")


@dataclass(frozen=True)
class Header:
    name: str
    value: str

    @classmethod
    def parse(cls, line: str) -> Header:
        """Parse a `Name: value` line; a trailing CRLF is tolerated."""
        text = line[:-2] if line.endswith("\r\n") else line
        name, sep, value = text.partition(":")
        if not sep:
            raise InvalidHeader(f"Header line has no colon: {line!r}")
        return cls.from_pair(name, value.strip(" \t"))

    @classmethod
    def from_pair(cls, name: str, value: str) -> Header:
        name = str(name)
        value = "" if value is None else str(value)
        if not _TOKEN_RE.match(name):
            raise InvalidHeader(f"Invalid header name: {name!r}")
        if not _VALUE_RE.match(value):
            raise InvalidHeader(f"Invalid header value for {name}: {value!r}")
        return cls(name, value)

    def is_name(self, other: str) -> bool:
        return self.name.lower() == other.lower()

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


def build_headers(headers: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None) -> list[Header]:
    """
    Validate caller headers into an ordered Header list.

    Accepts a mapping (dict, httpx.Headers) or an iterable of pairs. Raises InvalidHeader
    on the first bad entry.
    """
    if not headers:
        return []
    items: Iterable[tuple[Any, Any]]
    if isinstance(headers, Mapping):
        items = headers.items()
    else:
        items = headers
    return [Header.from_pair(name, value) for name, value in items]


def get_header(headers: Sequence[Header], name: str) -> str | None:
    for header in headers:
        if header.is_name(name):
            return header.value
    return None


def has_header(headers: Sequence[Header], name: str) -> bool:
    return get_header(headers, name) is not None


def get_all_headers(headers: Sequence[Header], name: str) -> list[str]:
    return [header.value for header in headers if header.is_name(name)]


def normalize_headers(headers: Sequence[Header]) -> dict[str, str]:
    """Return a lowercase-keyed dict; repeated names are joined with `, `."""
    out: dict[str, str] = {}
    for header in headers:
        key = header.name.lower()
        out[key] = f"{out[key]}, {header.value}" if key in out else header.value
    return out


__all__ = [
    "Header",
    "build_headers",
    "get_all_headers",
    "get_header",
    "has_header",
    "normalize_headers",
]
