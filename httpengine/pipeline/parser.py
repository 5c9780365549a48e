"""Parse an HTTP/1.1 request head from a buffered byte reader."""

import logging
import re
from typing import BinaryIO, Optional
from urllib.parse import SplitResult, urlsplit

from httpengine.domain.connection_id import get_logger
from httpengine.domain.errors import (
    InvalidContentLength,
    InvalidHeaderValue,
    MalformedHeaders,
    MalformedStartLine,
    MalformedTarget,
)
from httpengine.domain.headers import Headers, canonical_name
from httpengine.domain.http_types import Request
from httpengine.pipeline.body import BodyStream

PARSER_LOGGER = get_logger("pipeline.parser")

MAX_LINE_BYTES = 8 * 1024
MAX_HEADER_LINES = 100
MAX_CONTENT_LENGTH = 2**63 - 1

_SCHEME_RE = re.compile(r"\A[A-Za-z][A-Za-z0-9+.\-]*\Z")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTENT_LENGTH_RE = re.compile(r"\A[+-]?[0-9]+\Z")


def _strip_eol(raw: bytes) -> bytes:
    if raw.endswith(b"\r\n"):
        return raw[:-2]
    if raw.endswith(b"\n"):
        return raw[:-1]
    return raw


def parse_start_line(line: str) -> tuple[str, str, str]:
    """Split ``METHOD SP TARGET SP PROTOCOL`` into its three fields."""
    parts = line.split(" ")
    if len(parts) != 3 or not all(parts):
        raise MalformedStartLine(f"malformed request line: {line!r}")
    method, target, proto = parts
    return method, target, proto


def parse_target(target: str) -> SplitResult:
    """Parse a request-target in asterisk, origin or absolute form."""
    if any(ord(char) < 0x21 or ord(char) == 0x7F for char in target):
        raise MalformedTarget(f"invalid character in request target: {target!r}")
    if _BAD_PERCENT_RE.search(target):
        raise MalformedTarget(f"invalid escape in request target: {target!r}")

    if target == "*":
        return SplitResult("", "", "*", "", "")

    if target.startswith("/"):
        path, _, query = target.partition("?")
        return SplitResult("", "", path, query, "")

    scheme, sep, rest = target.partition(":")
    if not sep or not _SCHEME_RE.match(scheme):
        raise MalformedTarget(f"invalid request target: {target!r}")
    if not rest.startswith("/"):
        # scheme:opaque, e.g. mailto:someone@example.com
        opaque, _, query = rest.partition("?")
        return SplitResult(scheme.lower(), "", opaque, query, "")
    try:
        parsed = urlsplit(target)
        parsed.port  # pylint: disable=pointless-statement
    except ValueError as exc:
        raise MalformedTarget(f"invalid request target: {target!r}") from exc
    return parsed


def read_headers(reader: BinaryIO) -> Headers:
    """Read header lines up to and including the blank line ending the block."""
    headers = Headers()
    for _ in range(MAX_HEADER_LINES + 1):
        raw = reader.readline(MAX_LINE_BYTES + 1)
        if not raw.endswith(b"\n"):
            if len(raw) > MAX_LINE_BYTES:
                raise MalformedHeaders("header line too long")
            raise MalformedHeaders("unexpected end of header block")

        line = _strip_eol(raw).decode("iso-8859-1")
        if not line:
            return headers

        name, sep, value = line.partition(":")
        if not sep:
            raise MalformedHeaders(f"malformed header line: {line!r}")
        if not name or any(char.isspace() for char in name):
            raise MalformedHeaders(f"malformed header name: {name!r}")
        try:
            headers.add(canonical_name(name), value.strip())
        except InvalidHeaderValue as exc:
            raise MalformedHeaders(f"malformed header value: {line!r}") from exc
    raise MalformedHeaders("too many header lines")


def parse_content_length(value: Optional[str]) -> int:
    """Translate the first Content-Length value into a body length.

    Returns 0 when the header is absent and -1 when it is present but blank.
    """
    if value is None:
        return 0
    value = value.strip()
    if not value:
        return -1
    if not _CONTENT_LENGTH_RE.match(value):
        raise InvalidContentLength(f"bad Content-Length: {value!r}")
    length = int(value)
    if length < 0 or length > MAX_CONTENT_LENGTH:
        raise InvalidContentLength(f"bad Content-Length: {value!r}")
    return length


def _derive_host(parsed_target: SplitResult, headers: Headers) -> str:
    if parsed_target.netloc:
        return parsed_target.netloc.rpartition("@")[2]
    return headers.get("Host", "")


def read_request(reader: BinaryIO) -> Optional[Request]:
    """Read one request head from ``reader``.

    Returns None when the peer closed the connection before sending
    anything. A body stream bounded to Content-Length bytes of the same
    reader is attached when the declared length is positive.
    """
    raw = reader.readline(MAX_LINE_BYTES + 1)
    if not raw:
        return None
    if len(raw) > MAX_LINE_BYTES and not raw.endswith(b"\n"):
        raise MalformedStartLine("request line too long")

    method, target, proto = parse_start_line(_strip_eol(raw).decode("iso-8859-1"))
    parsed_target = parse_target(target)
    headers = read_headers(reader)
    headers.mark_received()
    content_length = parse_content_length(headers.get("Content-Length"))

    request = Request(
        method=method,
        target=target,
        parsed_target=parsed_target,
        proto=proto,
        headers=headers,
        host=_derive_host(parsed_target, headers),
        content_length=content_length,
    )
    if content_length > 0:
        request.body_stream = BodyStream(
            reader, content_length, closing=request.close_after_response
        )

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Request head parsed",
            extra={
                "event": "request_head_parsed",
                "method": method,
                "target": target,
                "content_length": content_length,
            },
        )
    return request
