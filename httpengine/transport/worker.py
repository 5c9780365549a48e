"""Per-connection request handling."""

import logging
import socket
from typing import Optional

from httpengine.domain.connection_id import (
    clear_connection_id,
    generate_connection_id,
    get_logger,
    set_connection_id,
)
from httpengine.domain.errors import BodyStreamError, RequestParseError
from httpengine.domain.http_types import Request
from httpengine.pipeline.io import response_from_result, send_response
from httpengine.pipeline.parser import read_request
from httpengine.pipeline.router import Router

WORKER_LOGGER = get_logger("transport.worker")


def _enable_keepalive(client_socket: socket.socket, client_addr_str: str) -> None:
    try:
        client_socket.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    except OSError as error:
        WORKER_LOGGER.debug(
            "Could not enable TCP keep-alive",
            extra={
                "event": "keepalive_failed",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )


def _read_request(reader, client_addr_str: str) -> Optional[Request]:
    """Parse one request, logging and swallowing malformed input."""
    try:
        request = read_request(reader)
    except RequestParseError as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        return None

    if request is None and WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug(
            "Client disconnected before sending a request",
            extra={"event": "client_disconnected", "client": client_addr_str},
        )
    return request


def materialize_body(request: Request) -> bytes:
    """Read the body stream into ``request.body`` and close the stream.

    Body errors are logged; whatever arrived before the error is kept.
    """
    stream = request.body_stream
    if stream is None:
        return request.body

    chunks = []
    try:
        while True:
            chunk = stream.read()
            if not chunk:
                break
            chunks.append(chunk)
    except BodyStreamError as error:
        WORKER_LOGGER.warning(
            "Error reading request body",
            extra={
                "event": "body_read_error",
                "error_type": type(error).__name__,
                "error": str(error),
                "bytes_in": sum(len(chunk) for chunk in chunks),
            },
        )

    try:
        stream.close()
    except BodyStreamError as error:
        WORKER_LOGGER.warning(
            "Error closing request body",
            extra={"event": "body_close_error", "error_type": type(error).__name__},
        )

    request.body = b"".join(chunks)
    return request.body


def dispatch(request: Request, router: Router):
    """Resolve the handler for ``request`` and build its response."""
    handler = router.resolve(request)
    return response_from_result(request, handler(request))


def handle_connection(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    router: Router,
) -> None:
    """Serve exactly one request on ``client_socket`` and close it.

    Nothing raised while serving escapes this function.
    """
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    set_connection_id(generate_connection_id())
    reader = None

    try:
        _enable_keepalive(client_socket, client_addr_str)
        reader = client_socket.makefile("rb")

        request = _read_request(reader, client_addr_str)
        if request is None:
            return

        WORKER_LOGGER.debug(
            "Request line parsed",
            extra={
                "event": "request_line_parsed",
                "client": client_addr_str,
                "method": request.method,
                "target": request.target,
                "proto": request.proto,
            },
        )

        materialize_body(request)
        response = dispatch(request, router)
        bytes_out = send_response(client_socket, response)

        WORKER_LOGGER.info(
            "Request complete",
            extra={
                "event": "request_complete",
                "client": client_addr_str,
                "method": request.method,
                "target": request.target,
                "status_code": response.status,
                "bytes_in": len(request.body),
                "bytes_out": bytes_out,
            },
        )
    except (ConnectionError, TimeoutError, OSError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_connection(client_socket, reader, client_addr_str)


def _close_connection(client_socket: socket.socket, reader, client_addr_str: str) -> None:
    if reader is not None:
        try:
            reader.close()
        except OSError:
            pass
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()

    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": client_addr_str},
    )
    clear_connection_id()
