"""Status code to status-line text lookup."""

from types import MappingProxyType

from httpengine.domain.errors import UnknownStatusCode

STATUS_LINES = MappingProxyType(
    {
        200: "200 OK",
        201: "201 Created",
        202: "202 Accepted",
        204: "204 No Content",
        301: "301 Moved Permanently",
        307: "307 Temporary Redirect",
        308: "308 Permanent Redirect",
        400: "400 Bad Request",
        401: "401 Unauthorized",
        403: "403 Forbidden",
        404: "404 Not Found",
        405: "405 Method Not Allowed",
        408: "408 Request Timeout",
        418: "418 I'm a teapot",
        429: "429 Too Many Requests",
        500: "500 Internal Server Error",
        501: "501 Not Implemented",
        502: "502 Bad Gateway",
        503: "503 Service Unavailable",
        504: "504 Gateway Timeout",
    }
)


def status_text(code: int) -> str:
    """Return ``"<code> <reason>"`` or raise UnknownStatusCode."""
    try:
        return STATUS_LINES[code]
    except KeyError as exc:
        raise UnknownStatusCode(code) from exc
