"""Per-connection identifiers carried through logging via contextvars."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

ROOT_LOGGER_NAME = "httpengine"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def generate_connection_id() -> str:
    """Return a short random identifier for a newly accepted connection."""
    return uuid.uuid4().hex[:12]


def get_connection_id() -> Optional[str]:
    return _connection_id_var.get()


def set_connection_id(connection_id: str) -> None:
    _connection_id_var.set(connection_id)


def clear_connection_id() -> None:
    _connection_id_var.set(None)


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Stamp the active connection ID and the emitting component on each record."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})

        connection_id = get_connection_id()
        extra["connection_id"] = connection_id if connection_id is not None else "-"

        name = self.logger.name
        prefix = ROOT_LOGGER_NAME + "."
        extra["component"] = name[len(prefix) :] if name.startswith(prefix) else name

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(component: str) -> ConnectionLoggerAdapter:
    """Return an adapter for ``httpengine.<component>``."""
    return ConnectionLoggerAdapter(
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}"), {}
    )
