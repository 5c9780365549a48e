"""Connection acceptance loop."""

import logging
import socket
import threading

from httpengine.bootstrap.config import DEFAULT_ACCEPT_POLL_SECONDS
from httpengine.bootstrap.socket_factory import create_server_socket
from httpengine.domain.connection_id import get_logger
from httpengine.pipeline.router import Router
from httpengine.transport.worker import handle_connection

ACCEPT_LOGGER = get_logger("transport.accept")


class Listener:
    """Accept TCP connections and serve each one on its own thread.

    The socket is bound on construction so ``address`` is known before
    ``run()`` starts. ``close()`` is ungraceful: connections already being
    served are neither waited for nor interrupted.
    """

    def __init__(
        self,
        host: str,
        port: int,
        router: Router,
        accept_poll_seconds: float = DEFAULT_ACCEPT_POLL_SECONDS,
    ) -> None:
        if router is None:
            raise ValueError("router is required")
        self._router = router
        self._stop_event = threading.Event()
        self._socket = create_server_socket(host, port, accept_poll_seconds)
        self.address: tuple[str, int] = self._socket.getsockname()[:2]

    @property
    def closed(self) -> bool:
        return self._stop_event.is_set()

    def _spawn(self, client_socket: socket.socket, client_address: tuple[str, int]) -> None:
        client_addr_str = f"{client_address[0]}:{client_address[1]}"
        if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
            ACCEPT_LOGGER.debug(
                "Client connection accepted",
                extra={"event": "client_accepted", "client": client_addr_str},
            )
        # Accepted sockets inherit the listener's timeout; connection I/O blocks.
        client_socket.settimeout(None)
        thread = threading.Thread(
            target=handle_connection,
            args=(client_socket, client_address, self._router),
            name=f"conn-{client_addr_str}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as error:
            ACCEPT_LOGGER.error(
                "Could not start connection thread",
                extra={
                    "event": "spawn_error",
                    "client": client_addr_str,
                    "error_type": type(error).__name__,
                },
            )
            client_socket.close()

    def run(self) -> None:
        """Accept connections until close() is called."""
        ACCEPT_LOGGER.info(
            "Server listening for connections",
            extra={
                "event": "server_listening",
                "host": self.address[0],
                "port": self.address[1],
                "routes": len(self._router),
            },
        )
        while not self._stop_event.is_set():
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if self._stop_event.is_set():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue
            self._spawn(client_socket, client_address)

        ACCEPT_LOGGER.info("Accept loop stopped", extra={"event": "server_stopped"})

    def close(self) -> None:
        """Stop accepting and close the listening socket."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._socket.close()
        ACCEPT_LOGGER.info(
            "Listening socket closed",
            extra={"event": "listener_closed", "port": self.address[1]},
        )
