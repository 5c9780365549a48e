"""Exception hierarchy for request parsing, body streaming and dispatch."""


class HttpEngineError(Exception):
    """Base class for every error raised by the engine."""


class RequestParseError(HttpEngineError, ValueError):
    """The bytes on the wire do not form an acceptable request head."""


class MalformedStartLine(RequestParseError):
    """The request line is not ``METHOD SP TARGET SP PROTOCOL``."""


class MalformedTarget(RequestParseError):
    """The request-target is neither ``*``, an absolute path nor an absolute URI."""


class MalformedHeaders(RequestParseError):
    """A header line cannot be split into a name and a value."""


class InvalidContentLength(RequestParseError):
    """The first Content-Length value is not a non-negative decimal integer."""


class InvalidHeaderValue(HttpEngineError, ValueError):
    """A header value cannot be written as a single ISO-8859-1 line."""


class BodyStreamError(HttpEngineError):
    """Raised while reading or closing a request body."""


class ReadAfterClose(BodyStreamError):
    """A body stream was read after it had been closed."""

    def __init__(self, message: str = "invalid read on closed body") -> None:
        super().__init__(message)


class UnexpectedEndOfBody(BodyStreamError):
    """The peer stopped sending before the declared Content-Length was reached."""

    def __init__(self, missing: int) -> None:
        super().__init__(f"unexpected end of body: {missing} bytes missing")
        self.missing = missing


class UnknownStatusCode(HttpEngineError, KeyError):
    """A handler returned a status code missing from the reason-phrase table."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"unknown status code: {self.code}"


class RouteNotFound(HttpEngineError):
    """Returned by the default not-found handler."""
