"""Common surface of the stream-backed resources (File, Command)."""

from __future__ import annotations

from typing import Any, AnyStr, Iterator

from capfacade.resources.base import Resource, requires
from capfacade.stream import BufferedStream, StreamHooks, StreamState


class StreamResource(Resource):
    """A Resource whose data flows through a BufferedStream.

    Subclasses build the StreamHooks from their own controller calls and
    pass them to _init_stream(); everything else here just forwards.
    """

    def _init_stream(self, hooks: StreamHooks, empty: AnyStr, duplex: bool = False) -> None:
        self._stream = BufferedStream(hooks, empty, duplex=duplex)

    @property
    def stream(self) -> BufferedStream:
        return self._stream

    @property
    def state(self) -> StreamState:
        return self._stream.state

    @property
    def eof(self) -> bool:
        return self._stream.eof

    @property
    def closed(self) -> bool:
        return self._stream.closed

    @property
    def pos(self) -> int:
        return self._stream.cursor.position

    def open(self) -> "StreamResource":
        """Open now instead of on first access."""
        self._stream.open()
        return self

    @requires()
    def close(self) -> None:
        self._stream.close()

    def read(self, size: int | None = -1) -> AnyStr:
        return self._stream.read(size)

    def readline(self, limit: int = -1) -> AnyStr:
        return self._stream.readline(limit)

    def readlines(self) -> list[AnyStr]:
        return self._stream.readlines()

    def readchar(self) -> AnyStr:
        return self._stream.readchar()

    def chunks(self) -> Iterator[AnyStr]:
        return self._stream.chunks()

    def write(self, data: AnyStr) -> int:
        return self._stream.write(data)

    def writelines(self, lines) -> None:
        self._stream.writelines(lines)

    def rewind(self) -> int:
        return self._stream.rewind()

    def __iter__(self) -> Iterator[AnyStr]:
        return iter(self._stream)

    def __enter__(self) -> Any:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["StreamResource"]
