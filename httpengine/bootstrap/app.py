"""Process entry point."""

import signal
import sys
from typing import Optional

from httpengine.bootstrap.config import ServerConfig, parse_cli_args
from httpengine.bootstrap.logging_setup import configure_logging
from httpengine.domain.connection_id import get_logger
from httpengine.handlers.demo import build_router
from httpengine.transport.listener import Listener

SERVER_LOGGER = get_logger("server")


def main(argv: Optional[list[str]] = None) -> None:
    """Configure logging, register routes and serve until signalled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    config = ServerConfig.from_args(args)
    configure_logging(config.log_level, config.log_destination, config.log_format)

    router = build_router()
    listener = Listener(
        config.host, config.port, router, accept_poll_seconds=config.accept_poll_seconds
    )

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal", extra={"event": "shutdown", "signal": signum}
        )
        listener.close()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": listener.address[1],
            "log_destination": config.log_destination,
            "log_level": config.log_level,
            "log_format": config.log_format,
        },
    )
    listener.run()
