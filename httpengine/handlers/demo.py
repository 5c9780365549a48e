"""Handlers registered by the bundled server."""

import logging
import time

from httpengine.domain.connection_id import get_logger
from httpengine.domain.errors import RouteNotFound
from httpengine.domain.http_types import HandlerResult, Request
from httpengine.pipeline.router import Router

DEMO_LOGGER = get_logger("handlers.demo")

INDEX_LOCATION = "http://www.wabservar.enterprise.com/index.asp"
MAX_ECHO_DELAY_MS = 10_000


def handle_index(request: Request) -> HandlerResult:
    """Redirect the root path."""
    request.response_headers.add("Location", INDEX_LOCATION)
    return HandlerResult(None, 301)


def handle_ping(_request: Request) -> HandlerResult:
    return HandlerResult(None, 200)


def _echo_delay_ms(request: Request) -> int:
    value = request.headers.get("X-Delay-Ms")
    if value is None:
        return 0
    try:
        delay = int(value)
    except ValueError:
        return 0
    return max(0, min(delay, MAX_ECHO_DELAY_MS))


def handle_echo(request: Request) -> HandlerResult:
    """Return the request body, optionally after an ``X-Delay-Ms`` pause."""
    delay_ms = _echo_delay_ms(request)
    if delay_ms:
        time.sleep(delay_ms / 1000)
    if DEMO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        DEMO_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_in": len(request.body)},
        )
    return HandlerResult(request.body, 200)


def handle_not_found(_request: Request) -> HandlerResult:
    return HandlerResult(None, 404, RouteNotFound("well, path, not found"))


def build_router() -> Router:
    router = Router(not_found=handle_not_found)
    router.add_route("GET", "/", handle_index)
    router.add_route("POST", "/", handle_index)
    router.add_route("GET", "/ping", handle_ping)
    router.add_route("POST", "/echo", handle_echo)
    return router
