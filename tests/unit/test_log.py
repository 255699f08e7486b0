# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import logging

import pytest

from hopwire import Agent, HttpRequest
from hopwire.config import HttpSettings, load_http_settings
from hopwire.http.transport import ConnectionDispatcher, MemoryTransport
from hopwire.log import PACKAGE_LOGGER, resolve_level, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_resolve_level(monkeypatch):
    monkeypatch.delenv("HOPWIRE_LOG_LEVEL", raising=False)
    assert resolve_level() == logging.WARNING
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.INFO) == logging.INFO
    assert resolve_level("chatty") == logging.WARNING
    monkeypatch.setenv("HOPWIRE_LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR


def test_setup_logging_adds_one_handler_and_formats_records(package_logger):
    stream = io.StringIO()
    setup_logging("DEBUG", stream)
    setup_logging("INFO", io.StringIO())

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.INFO
    logging.getLogger("hopwire.http.redirects").info("hop done")
    assert stream.getvalue() == "INFO hopwire.http.redirects: hop done\n"


def test_log_level_setting_reads_env(monkeypatch):
    monkeypatch.delenv("HOPWIRE_LOG_LEVEL", raising=False)
    assert load_http_settings().log_level is None
    monkeypatch.setenv("HOPWIRE_LOG_LEVEL", "debug")
    assert load_http_settings().log_level == "debug"


def test_agent_with_log_level_reports_redirects(package_logger, capsys):
    memory = MemoryTransport(
        [
            b"HTTP/1.1 302 Found\r\nLocation: /b\r\n\r\n",
            b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n",
        ]
    )
    agent = Agent(HttpSettings(log_level="DEBUG"), dispatcher=ConnectionDispatcher({"http": memory}, memory=memory))

    assert agent.request(HttpRequest(url="http://h/a")).status_code == 200

    err = capsys.readouterr().err
    assert "DEBUG hopwire.http.redirects: Redirecting GET http://h/a -> GET http://h/b" in err


def test_agent_without_log_level_leaves_logging_alone(package_logger):
    Agent(HttpSettings())
    assert package_logger.handlers == []
