"""Response construction and serialization."""

import socket
from email.utils import formatdate
from typing import Optional

from httpengine.domain.connection_id import get_logger
from httpengine.domain.headers import Headers
from httpengine.domain.http_types import HandlerResult, HttpResponse, Request
from httpengine.domain.status_codes import status_text

IO_LOGGER = get_logger("pipeline.io")

CRLF = "\r\n"


def http_date(timestamp: Optional[float] = None) -> str:
    """Format a timestamp as ``Mon, 02 Jan 2006 15:04:05 GMT``."""
    return formatdate(timestamp, usegmt=True)


def build_response(
    request: Request,
    body: Optional[bytes],
    status: int,
    error: Optional[BaseException] = None,
) -> HttpResponse:
    """Combine a handler result with the headers it accumulated on the request.

    Outgoing headers are ``request.response_headers`` followed by anything
    the handler added to ``request.headers`` after parsing. A handler error
    is rendered as the body and replaces any bytes the handler returned.
    """
    if error is not None:
        payload = str(error).encode()
    else:
        payload = bytes(body or b"")
    headers = Headers()
    for name, value in request.response_headers.items():
        headers.add(name, value)
    for name, value in request.headers.added():
        headers.add(name, value)
    return HttpResponse(status=status, headers=headers, body=payload)


def response_from_result(request: Request, result) -> HttpResponse:
    """Build a response from a ``HandlerResult`` or a plain 3-tuple."""
    body, status, error = HandlerResult(*result)
    return build_response(request, body, status, error)


def serialize_response(response: HttpResponse, timestamp: Optional[float] = None) -> bytes:
    """Render the status line, fixed headers, accumulated headers and body."""
    head = (
        f"{response.proto} {status_text(response.status)}{CRLF}"
        f"Date: {http_date(timestamp)}{CRLF}"
        f"content-length: {len(response.body)}{CRLF}"
        f"{response.headers.render()}"
        f"{CRLF}"
    )
    return head.encode("iso-8859-1") + response.body


def send_response(client_socket: socket.socket, response: HttpResponse) -> int:
    """Serialize and send the response; return the number of bytes written."""
    payload = serialize_response(response)
    client_socket.sendall(payload)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status_code": response.status,
            "bytes_out": len(payload),
        },
    )
    return len(payload)
