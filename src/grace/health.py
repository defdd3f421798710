"""Health-check interception for aiohttp dispatch.

Probe paths are answered before the request reaches the wrapped
application. Every other path is forwarded untouched.

Usage:
    interceptor = HealthCheckInterceptor({"/healthz": check_db}, state)
    app.middlewares.insert(0, interceptor.middleware)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from functools import partial, wraps
from types import MappingProxyType
from typing import Any

from aiohttp import web

from grace.hooks import ErrorLogger, Probe, call_hook, noop_logger
from grace.state import OrchestratorState

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

SUCCESS_STATUS = 200
FAILURE_STATUS = 503

_dumps = partial(json.dumps, separators=(",", ":"))


def success_response(info: Any = None) -> web.Response:
    """Build a 200 probe response, with info unless the probe returned None."""
    body: dict[str, Any] = {"status": "ok"}
    if info is not None:
        body["info"] = info
    return web.json_response(body, status=SUCCESS_STATUS, dumps=_dumps)


def failure_response() -> web.Response:
    """Build the fixed 503 probe response."""
    return web.json_response(
        {"status": "error"}, status=FAILURE_STATUS, dumps=_dumps
    )


class HealthCheckInterceptor:
    """Answers probe routes from a fixed registry.

    The registry is copied at construction and cannot change afterwards.
    The state is shared with the shutdown sequencer; once it reports
    shutting down, every probe answers 503 without being called.
    """

    def __init__(
        self,
        health_checks: Mapping[str, Probe],
        state: OrchestratorState,
        error_logger: ErrorLogger = noop_logger,
    ) -> None:
        self._health_checks: Mapping[str, Probe] = MappingProxyType(
            dict(health_checks)
        )
        self._state = state
        self._error_logger = error_logger

    @property
    def health_checks(self) -> Mapping[str, Probe]:
        """Read-only view of the probe registry."""
        return self._health_checks

    def matches(self, request: web.BaseRequest) -> bool:
        """Return True if the request targets a probe route."""
        return request.path in self._health_checks

    async def respond(self, request: web.BaseRequest) -> web.Response:
        """Answer a probe request.

        Args:
            request: Request whose path is a registry key.

        Returns:
            200 with optional info, or 503.
        """
        if self._state.is_shutting_down:
            logger.debug(
                "Probe %s answered 503, shutting down",
                request.path,
                extra={"probe_path": request.path},
            )
            return failure_response()

        probe = self._health_checks[request.path]
        try:
            info = await call_hook(probe)
        except Exception as e:
            logger.debug(
                "Probe %s failed: %s",
                request.path,
                e,
                extra={"probe_path": request.path},
            )
            self._error_logger("healthcheck failed", e)
            return failure_response()

        return success_response(info)

    @web.middleware
    async def middleware(
        self, request: web.Request, handler: Handler
    ) -> web.StreamResponse:
        """aiohttp middleware answering probes ahead of the app."""
        if self.matches(request):
            return await self.respond(request)
        return await handler(request)

    def wrap(self, handler: Handler) -> Handler:
        """Decorate a low-level request handler (aiohttp.web.Server).

        Args:
            handler: Original dispatch function.

        Returns:
            Handler that answers probes and forwards everything else.
        """

        @wraps(handler)
        async def dispatch(request: web.BaseRequest) -> web.StreamResponse:
            if self.matches(request):
                return await self.respond(request)
            return await handler(request)

        return dispatch
