# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level hopwire facade sharing one cookie jar across requests."""

from __future__ import annotations

import logging

import httpx

from .config import HttpSettings, load_http_settings
from .errors import categorize_exception, error_category_to_reason
from .http.body import SizedBody
from .http.client import HttpClient
from .http.cookies import AgentState
from .http.headers import Header, build_headers, has_header, normalize_headers
from .http.models import HttpRequest, HttpResponse, Timeouts
from .http.redirects import RedirectEngine
from .http.response import Response
from .http.transport import ConnectionDispatcher
from .http.unit import Unit, build_unit
from .http.url import parse_url
from .log import setup_logging

logger = logging.getLogger(__name__)


class Agent(HttpClient):
    """
    Issues requests through the redirect engine with a shared, lock-guarded cookie jar.

    One Agent may be used from several threads at once; each request runs its hops
    sequentially on the calling thread.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        dispatcher: ConnectionDispatcher | None = None,
        state: AgentState | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.state = state or AgentState()
        self.dispatcher = dispatcher or ConnectionDispatcher.from_settings(self.settings)
        self.engine = RedirectEngine(self.dispatcher)
        if self.settings.log_level:
            setup_logging(self.settings.log_level)

    @property
    def cookies(self) -> httpx.Cookies:
        return self.state.jar

    def _timeouts(self, request: HttpRequest) -> Timeouts:
        if isinstance(request.timeout, Timeouts):
            return request.timeout
        if request.timeout is not None:
            return Timeouts(request.timeout, request.timeout, request.timeout)
        return Timeouts.from_settings(self.settings)

    def _redirect_budget(self, request: HttpRequest) -> int:
        if request.max_redirects is not None:
            return max(0, request.max_redirects)
        return self.settings.max_redirects

    def prepare(self, request: HttpRequest) -> tuple[Unit, SizedBody]:
        """Build the first hop's Unit. Header errors surface here, before any I/O."""
        url = parse_url(request.url)
        headers = build_headers(request.headers)
        if self.settings.user_agent and not has_header(headers, "user-agent"):
            headers.append(Header.from_pair("User-Agent", self.settings.user_agent))
        body = SizedBody.from_payload(request.body)
        unit = build_unit(request.method, headers, request.query, self._timeouts(request), self.state, url, body)
        return unit, body

    def send(self, request: HttpRequest) -> Response:
        """Run the request and return the final response with its body still on the wire."""
        unit, body = self.prepare(request)
        return self.engine.run(unit, request.method, body, self._redirect_budget(request))

    def request(self, request: HttpRequest) -> HttpResponse:
        try:
            response = self.send(request)
            max_body_bytes = self.settings.max_body_bytes
            if max_body_bytes <= 0:
                max_body_bytes = 16 * 1024 * 1024

            content = bytearray()
            truncated = False
            try:
                for chunk in response.iter_bytes():
                    remaining = max_body_bytes - len(content)
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)
            finally:
                response.close()

            try:
                text = bytes(content).decode(response.charset, errors="replace")
            except LookupError:
                text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=response.status,
                headers=normalize_headers(response.headers),
                text=text,
                content=bytes(content),
                url=str(response.url),
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                    "body_bytes_limit": max_body_bytes,
                },
            )
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("Request to %s failed: %s (%s)", request.url, exc, category.value)
            return HttpResponse(
                ok=False,
                error_message=str(exc),
                error_type=type(exc).__name__,
                url=request.url,
                meta={
                    "error_category": category.value,
                    "error_reason": error_category_to_reason(category),
                },
            )

    def close(self) -> None:
        # connections are never pooled; each response closes its own
        return None

    def __enter__(self) -> Agent:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
