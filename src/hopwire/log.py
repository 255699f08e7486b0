# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Logging helpers for hopwire.

Hop, redirect and cookie events are logged at debug level under the `hopwire` logger.
`setup_logging` routes that logger to a stream without touching the root logger, so an
application's own logging configuration stays in charge of everything else.
"""

from __future__ import annotations

import logging
import os
from typing import IO

PACKAGE_LOGGER = "hopwire"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "hopwire-stream"


def resolve_level(level: str | int | None = None) -> int:
    """Numeric level from a name or number; falls back to `HOPWIRE_LOG_LEVEL`, then WARNING."""
    if isinstance(level, int):
        return level
    name = (level or os.getenv("HOPWIRE_LOG_LEVEL") or "WARNING").strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | int | None = None, stream: IO[str] | None = None) -> logging.Logger:
    """
    Attach a stream handler to the `hopwire` logger and set its level.

    Calling again only adjusts the level; the handler is added once.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolve_level(level))
    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


__all__ = ["LOG_FORMAT", "PACKAGE_LOGGER", "resolve_level", "setup_logging"]
