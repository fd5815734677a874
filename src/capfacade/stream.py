"""Buffered stream built from a handful of backend hooks.

BufferedStream gives File and Command the read/write/line/char surface
callers expect from a Python stream, while the resources only supply a
StreamHooks value: open, read-next-chunk and close, plus optional write,
seek and tell. Every hook receives the shared StreamCursor so it can see
the handle, the position, and the backend offset of the next chunk.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, AnyStr, Callable, Iterator

from capfacade.errors import EndOfStream, IOUnsupported

logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Lifecycle of a stream."""

    UNOPENED = "unopened"
    """Created; the open hook has not fired yet."""

    OPEN = "open"
    """The open hook returned a handle."""

    END_OF_STREAM = "end_of_stream"
    """The read hook signalled exhaustion."""

    CLOSED = "closed"
    """Closed explicitly; the next access reopens."""


@dataclass
class StreamCursor:
    """Position and end-of-stream bookkeeping shared with the hooks."""

    handle: Any = None
    """Backend handle returned by the open hook."""

    position: int = 0
    """Position of the next byte/char handed to the caller."""

    offset: int = 0
    """Backend offset of the next chunk (position plus buffered data)."""

    eof: bool = False
    """Set once the producer is exhausted. Hooks may set it with a final chunk."""


@dataclass(frozen=True)
class StreamHooks:
    """The backend operations a BufferedStream is built from."""

    open: Callable[[StreamCursor], Any]
    read: Callable[[StreamCursor], Any]
    close: Callable[[StreamCursor], None]
    write: Callable[[StreamCursor, Any], int] | None = None
    seek: Callable[[StreamCursor, int, int], None] | None = None
    tell: Callable[[StreamCursor], int] | None = None


class BufferedStream:
    """A lazily opened, buffered stream over StreamHooks.

    The open hook fires on the first read or write, never at construction.
    Reads are served from an internal buffer that is refilled one chunk at a
    time, only when a request cannot be satisfied from what is buffered.
    A read hook signals exhaustion by returning None or an empty chunk, or
    by raising EndOfStream; after that the hook is not called again until
    the stream is sought, rewound or closed.
    """

    def __init__(self, hooks: StreamHooks, empty: AnyStr = b"", duplex: bool = False):
        """Create an unopened stream.

        Args:
            hooks: The backend hooks.
            empty: The empty chunk of the stream's data type (b"" or "").
            duplex: Writes go to a separate channel (a command's input), so
                they neither drop buffered output nor move the position.
        """
        self._hooks = hooks
        self._duplex = duplex
        self._empty = empty
        self._newline = "\n" if isinstance(empty, str) else b"\n"
        self._buffer = empty
        self._opened = False
        self._closed = False
        self.cursor = StreamCursor()

    # ------------------------------------------------------------------
    # state

    @property
    def state(self) -> StreamState:
        if self._closed:
            return StreamState.CLOSED
        if not self._opened:
            return StreamState.UNOPENED
        if self.cursor.eof:
            return StreamState.END_OF_STREAM
        return StreamState.OPEN

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def eof(self) -> bool:
        """True when the producer is exhausted and nothing is left buffered."""
        return self.cursor.eof and not self._buffer

    @property
    def handle(self) -> Any:
        return self.cursor.handle

    def open(self) -> "BufferedStream":
        """Open the stream now if it is not open yet."""
        if self._opened:
            return self

        self.cursor.handle = self._hooks.open(self.cursor)
        self._opened = True
        self._closed = False
        logger.debug("stream opened handle=%r", self.cursor.handle)

        if self.cursor.position and self._hooks.seek is not None:
            # A seek issued before the lazy open only moved the logical position.
            self._hooks.seek(self.cursor, self.cursor.position, os.SEEK_SET)
        return self

    def close(self) -> None:
        """Close the stream. Closing twice does not call the close hook twice."""
        try:
            if self._opened:
                self._hooks.close(self.cursor)
                logger.debug("stream closed handle=%r", self.cursor.handle)
        finally:
            self._reset()
            self._closed = True

    def _reset(self) -> None:
        self._opened = False
        self._buffer = self._empty
        self.cursor = StreamCursor()

    def _ensure_open(self) -> None:
        if not self._opened:
            self.open()

    # ------------------------------------------------------------------
    # buffer

    def _fill(self) -> bool:
        """Pull one chunk into the buffer. Returns False once exhausted."""
        if self.cursor.eof:
            return False

        try:
            chunk = self._hooks.read(self.cursor)
        except EndOfStream:
            chunk = None

        if not chunk:
            self.cursor.eof = True
            logger.debug("stream end of stream offset=%s", self.cursor.offset)
            return False

        self._buffer += chunk
        self.cursor.offset += len(chunk)
        return True

    def _take(self, size: int) -> AnyStr:
        data = self._buffer[:size]
        self._buffer = self._buffer[size:]
        self.cursor.position += len(data)
        return data

    def _discard_buffer(self) -> None:
        self._buffer = self._empty
        self.cursor.offset = self.cursor.position

    # ------------------------------------------------------------------
    # reading

    def read(self, size: int | None = -1) -> AnyStr:
        """Read up to `size` bytes/chars, or everything when size is negative.

        Returns an empty value at end of stream.
        """
        self._ensure_open()

        if size is None or size < 0:
            while self._fill():
                pass
            return self._take(len(self._buffer))

        while len(self._buffer) < size and self._fill():
            pass
        return self._take(size)

    def readline(self, limit: int = -1) -> AnyStr:
        """Read one line, including its newline. Empty at end of stream."""
        self._ensure_open()

        start = 0
        while True:
            index = self._buffer.find(self._newline, start)
            if index >= 0:
                size = index + 1
                break
            if 0 <= limit <= len(self._buffer):
                size = limit
                break
            start = len(self._buffer)
            if not self._fill():
                size = len(self._buffer)
                break

        if limit >= 0:
            size = min(size, limit)
        return self._take(size)

    def readlines(self) -> list[AnyStr]:
        return list(self)

    def readchar(self) -> AnyStr:
        """Read a single byte/char.

        Raises:
            EndOfStream: If the stream is exhausted.
        """
        data = self.read(1)
        if not data:
            raise EndOfStream("end of stream reached")
        return data

    def chunks(self) -> Iterator[AnyStr]:
        """Yield buffered data, then each remaining chunk as the backend sends it."""
        self._ensure_open()
        while self._buffer or self._fill():
            yield self._take(len(self._buffer))

    def __iter__(self) -> Iterator[AnyStr]:
        return self

    def __next__(self) -> AnyStr:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    # ------------------------------------------------------------------
    # writing

    def write(self, data: AnyStr) -> int:
        """Write data at the current position.

        Returns:
            The number of bytes/chars the backend reports as written.

        Raises:
            IOUnsupported: If the stream has no write hook.
        """
        if self._hooks.write is None:
            raise IOUnsupported("stream does not support writing")

        self._ensure_open()
        if self._duplex:
            return self._hooks.write(self.cursor, data)

        self._discard_buffer()
        written = self._hooks.write(self.cursor, data)
        self.cursor.position += written
        self.cursor.offset = self.cursor.position
        return written

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    # ------------------------------------------------------------------
    # positioning

    def seek(self, position: int, whence: int = os.SEEK_SET) -> int:
        """Move to `position`.

        The buffer is cleared and the logical position set before the seek
        hook (if any) is called. SEEK_CUR is resolved against the logical
        position and forwarded as SEEK_SET. For SEEK_END the stream is opened
        and the offset returned by the seek hook (as os.lseek returns it)
        becomes the position; without a seek hook the value is taken as an
        absolute position.
        """
        if whence == os.SEEK_CUR:
            position += self.cursor.position
            whence = os.SEEK_SET

        relative = whence == os.SEEK_END and self._hooks.seek is not None
        if not relative:
            if whence != os.SEEK_SET:
                logger.debug("stream seek whence=%s without seek hook, treated as absolute", whence)
            if position < 0:
                raise ValueError(f"negative seek position {position}")
        else:
            self._ensure_open()

        self._buffer = self._empty
        self.cursor.position = position
        self.cursor.offset = position
        self.cursor.eof = False

        if self._hooks.seek is not None and self._opened:
            moved = self._hooks.seek(self.cursor, position, whence)
            if relative and type(moved) is int:
                self.cursor.position = moved
                self.cursor.offset = moved

        return self.cursor.position

    def tell(self) -> int:
        """Return the position, asking the tell hook when there is one."""
        if self._hooks.tell is None or not self._opened:
            return self.cursor.position

        reported = self._hooks.tell(self.cursor)
        if reported != self.cursor.position:
            self._buffer = self._empty
            self.cursor.position = reported
            self.cursor.offset = reported
        return reported

    def rewind(self) -> int:
        return self.seek(0)

    # ------------------------------------------------------------------

    def __enter__(self) -> "BufferedStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "BufferedStream",
    "StreamCursor",
    "StreamHooks",
    "StreamState",
]
