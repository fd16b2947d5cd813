from __future__ import annotations

import logging
from typing import BinaryIO

from .errors import ResponseEncodeError
from .messages import ProgressResponse, ResponseWriter

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Decorates a byte stream and reports every chunk that passes through.

    Each read or write that moves n > 0 bytes bumps the running total and sends
    one progress line for ``oid``. Errors from the wrapped stream propagate
    untouched and are not reported as progress.

    The tracker never claims to be seekable, so the storage layer has to
    stream through it in order.
    """

    def __init__(self, stream: BinaryIO, oid: str, writer: ResponseWriter):
        self.stream = stream
        self.oid = oid
        self.writer = writer
        self.bytes_so_far = 0

    def _advance(self, n: int) -> None:
        if n <= 0:
            return
        self.bytes_so_far += n
        try:
            self.writer.send(ProgressResponse(self.oid, self.bytes_so_far, n))
        except ResponseEncodeError as exc:
            logger.error("progress not sent; oid=%s err=%s", self.oid, exc)

    def read(self, size: int = -1) -> bytes:
        data = self.stream.read(size)
        self._advance(len(data))
        return data

    def write(self, data: bytes) -> int:
        n = self.stream.write(data)
        if n is None:  # non-blocking raw stream, nothing written
            n = 0
        self._advance(n)
        return n

    def readable(self) -> bool:
        return self.stream.readable()

    def writable(self) -> bool:
        return self.stream.writable()

    def seekable(self) -> bool:
        return False

    def flush(self) -> None:
        self.stream.flush()
