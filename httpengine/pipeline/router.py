"""Exact-match request routing."""

import logging
from typing import Optional

from httpengine.domain.connection_id import get_logger
from httpengine.domain.errors import RouteNotFound
from httpengine.domain.http_types import Handler, HandlerResult, Request

ROUTER_LOGGER = get_logger("pipeline.router")


def default_not_found(_request: Request) -> HandlerResult:
    """Fallback used when a router is built without a not-found handler."""
    return HandlerResult(None, 404, RouteNotFound("path not found"))


class Router:
    """Maps ``METHOD + path`` strings to handlers.

    Routes are registered before the listener starts and only read while
    serving, so the table carries no lock.
    """

    def __init__(self, not_found: Optional[Handler] = None) -> None:
        self._routes: dict[str, Handler] = {}
        self.not_found: Handler = not_found if not_found is not None else default_not_found

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        """Register ``handler``, replacing any handler for the same method and path."""
        self._routes[method.upper() + path] = handler

    def resolve(self, request: Request) -> Handler:
        """Return the handler for the request, or the not-found handler."""
        if request is None:
            raise TypeError("cannot resolve a None request")

        handler = self._routes.get(request.method + request.target)
        if handler is not None:
            if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ROUTER_LOGGER.debug(
                    "Route matched",
                    extra={
                        "event": "route_matched",
                        "method": request.method,
                        "target": request.target,
                    },
                )
            return handler

        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "method": request.method,
                "target": request.target,
                "path": request.path,
                "query": request.query,
            },
        )
        return self.not_found

    def __len__(self) -> int:
        return len(self._routes)
