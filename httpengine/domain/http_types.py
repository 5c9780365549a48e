"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, NamedTuple, Optional, Union
from urllib.parse import SplitResult

from httpengine.domain.headers import Headers

if TYPE_CHECKING:
    from httpengine.pipeline.body import BodyStream

SERVER_SOFTWARE = "httpengine"
PROTOCOL = "HTTP/1.1"


def _default_response_headers() -> Headers:
    headers = Headers()
    headers.add("Server", SERVER_SOFTWARE)
    return headers


@dataclass
class Request:
    """A parsed HTTP request.

    Everything except ``body`` and ``response_headers`` is fixed once the
    parser returns. ``body`` is filled by the connection handler after the
    body stream has been read. Handlers add outgoing headers to
    ``response_headers`` or to ``headers``; values added to ``headers`` after
    parsing are echoed after ``response_headers`` in the response.
    """

    method: str
    target: str
    parsed_target: SplitResult
    proto: str
    headers: Headers
    host: str = ""
    content_length: int = 0
    body_stream: Optional["BodyStream"] = None
    body: bytes = b""
    close_after_response: bool = False
    response_headers: Headers = field(default_factory=_default_response_headers)

    @property
    def path(self) -> str:
        return self.parsed_target.path

    @property
    def query(self) -> str:
        return self.parsed_target.query


class HandlerResult(NamedTuple):
    """What a handler returns: body bytes, status code, optional error."""

    body: Optional[bytes]
    status: int
    error: Optional[BaseException] = None


Handler = Callable[[Request], Union[HandlerResult, tuple]]


@dataclass
class HttpResponse:
    """A fully buffered response ready for serialization."""

    status: int
    headers: Headers
    body: bytes
    proto: str = PROTOCOL
