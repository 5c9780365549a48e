"""Listening socket creation."""

import socket

from httpengine.domain.connection_id import get_logger

SOCKET_LOGGER = get_logger("socket")

LISTEN_BACKLOG = 128


def create_server_socket(host: str, port: int, accept_poll_seconds: float) -> socket.socket:
    """Bind an IPv4 TCP listening socket.

    The accept timeout lets the accept loop notice that it has been closed.
    """
    server_socket = socket.create_server(
        (host, port), family=socket.AF_INET, backlog=LISTEN_BACKLOG, reuse_port=False
    )
    server_socket.settimeout(accept_poll_seconds)
    bound_host, bound_port = server_socket.getsockname()[:2]
    SOCKET_LOGGER.debug(
        "Listening socket bound",
        extra={"event": "socket_bound", "host": bound_host, "port": bound_port},
    )
    return server_socket
