"""Content-Length framed request bodies."""

import threading
from typing import BinaryIO

from httpengine.domain.connection_id import get_logger
from httpengine.domain.errors import ReadAfterClose, UnexpectedEndOfBody

BODY_LOGGER = get_logger("pipeline.body")

# Most bytes close() will discard looking for the end of a body.
MAX_DRAIN_BYTES = 256 << 10
DRAIN_CHUNK_BYTES = 32 << 10
DEFAULT_READ_BYTES = 64 << 10


class BoundedReader:
    """Read at most ``limit`` bytes from ``source``."""

    def __init__(self, source: BinaryIO, limit: int) -> None:
        self._source = source
        self.remaining = max(0, limit)

    def read(self, size: int = -1) -> bytes:
        if self.remaining <= 0:
            return b""
        if size < 0 or size > self.remaining:
            size = self.remaining
        data = self._source.read(size)
        self.remaining -= len(data)
        return data


class BodyStream:
    """Single-owner reader over the body bytes of one request.

    ``read`` and ``close`` share one lock, so a close can never interleave
    with a read and always observes the end-of-stream flag a read has set.
    """

    def __init__(self, source: BinaryIO, content_length: int, closing: bool = False):
        self._src = BoundedReader(source, content_length)
        self._closing = closing
        self._lock = threading.Lock()
        self._saw_eof = False
        self._closed = False
        self._early_closed = False

    @property
    def saw_eof(self) -> bool:
        with self._lock:
            return self._saw_eof

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def early_closed(self) -> bool:
        """True when close() gave up before reaching the end of the body."""
        with self._lock:
            return self._early_closed

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._src.remaining

    def read(self, size: int = DEFAULT_READ_BYTES) -> bytes:
        """Return up to ``size`` body bytes, or ``b""`` once the body is exhausted.

        Raises ReadAfterClose after close() and UnexpectedEndOfBody when the
        peer stops sending before the declared length arrives.
        """
        with self._lock:
            if self._closed:
                raise ReadAfterClose()
            return self._read_locked(size)

    def readall(self) -> bytes:
        chunks = []
        while True:
            chunk = self.read()
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def _read_locked(self, size: int) -> bytes:
        if self._saw_eof or size == 0:
            return b""
        data = self._src.read(size)
        if not data:
            self._saw_eof = True
            if self._src.remaining > 0:
                raise UnexpectedEndOfBody(self._src.remaining)
            return b""
        if self._src.remaining == 0:
            self._saw_eof = True
        return data

    def _discard_locked(self, limit: int) -> int:
        discarded = 0
        while discarded < limit:
            chunk = self._read_locked(min(DRAIN_CHUNK_BYTES, limit - discarded))
            if not chunk:
                break
            discarded += len(chunk)
        return discarded

    def close(self) -> None:
        """Mark the stream closed, draining a small remainder first.

        Calling close() again is a no-op. Errors hit while draining are
        raised after the stream has been marked closed.
        """
        with self._lock:
            if self._closed:
                return
            try:
                if self._saw_eof or self._closing:
                    return
                if self._src.remaining > MAX_DRAIN_BYTES:
                    self._early_closed = True
                elif self._discard_locked(MAX_DRAIN_BYTES) == MAX_DRAIN_BYTES:
                    self._early_closed = True
            finally:
                self._closed = True
                if self._early_closed:
                    BODY_LOGGER.debug(
                        "Body closed before end of stream",
                        extra={
                            "event": "body_early_close",
                            "remaining_bytes": self._src.remaining,
                        },
                    )

    def __enter__(self) -> "BodyStream":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()
