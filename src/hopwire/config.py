# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for hopwire."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"hopwire/{__version__}"


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _timeout_env(name: str, default: float | None) -> float | None:
    """Read a timeout in seconds; zero or negative disables the timeout."""
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    connect_timeout: float | None = 10.0
    read_timeout: float | None = 30.0
    write_timeout: float | None = 30.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024
    # when set, agents route the hopwire logger to stderr at this level
    log_level: str | None = None

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_redirects = _int_env("HOPWIRE_MAX_REDIRECTS", cls.max_redirects)
        if max_redirects < 0:
            max_redirects = cls.max_redirects
        max_body_bytes = _int_env("HOPWIRE_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            connect_timeout=_timeout_env("HOPWIRE_CONNECT_TIMEOUT", cls.connect_timeout),
            read_timeout=_timeout_env("HOPWIRE_READ_TIMEOUT", cls.read_timeout),
            write_timeout=_timeout_env("HOPWIRE_WRITE_TIMEOUT", cls.write_timeout),
            max_redirects=max_redirects,
            user_agent=os.getenv("HOPWIRE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("HOPWIRE_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
            log_level=os.getenv("HOPWIRE_LOG_LEVEL") or None,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
