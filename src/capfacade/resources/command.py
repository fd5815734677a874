"""Commands executed on a controlled system.

A Command wraps the controller's `shell_exec` primitive as a line-oriented
stream. Output is pulled one line at a time; the controller is not called
until the first read. Writing to the command's input needs the separate
`shell_write` primitive.
"""

from __future__ import annotations

import logging
from typing import Iterator

from capfacade.controller import has_primitive
from capfacade.errors import EndOfStream, IOUnsupported
from capfacade.logging_utils import payload_preview
from capfacade.resources.base import requires
from capfacade.resources.streaming import StreamResource
from capfacade.stream import StreamCursor, StreamHooks

logger = logging.getLogger(__name__)


class Command(StreamResource):
    """A program invocation on the system behind the controller."""

    name = "command"
    description = "Run a program through the controller and stream its output."

    def __init__(self, controller: object, program: str, *arguments: str, encoding: str = "utf-8"):
        """Create an unopened command.

        Args:
            controller: The object controlling command execution.
            program: The program to run.
            *arguments: The arguments to run it with.
            encoding: Used to decode output lines the controller sends as bytes.

        Raises:
            CapabilityMissing: The controller does not define shell_exec.
        """
        super().__init__(controller)
        self.require_capability("shell_exec")

        self._invocation = (str(program), tuple(str(arg) for arg in arguments))
        self.encoding = encoding

        hooks = StreamHooks(
            open=self._open_hook,
            read=self._read_hook,
            close=self._close_hook,
            write=self._write_hook,
        )
        self._init_stream(hooks, "", duplex=True)

    @property
    def program(self) -> str:
        return self._invocation[0]

    @property
    def arguments(self) -> tuple[str, ...]:
        return self._invocation[1]

    @requires("shell_exec")
    def reopen(self, program: str, *arguments: str) -> "Command":
        """Stop the current invocation and start `program` with `arguments`."""
        self.close()
        self._invocation = (str(program), tuple(str(arg) for arg in arguments))
        self._stream.open()
        return self

    def first(self) -> str | None:
        """Return the next line of output, or None if there is none."""
        return self.readline() or None

    # ------------------------------------------------------------------
    # stream hooks

    @requires("shell_exec")
    def _open_hook(self, cursor: StreamCursor) -> "LineProducer":
        self.require_capability("shell_exec")
        program, arguments = self._invocation
        return LineProducer(self.controller, program, arguments, self.encoding)

    @requires()
    def _read_hook(self, cursor: StreamCursor) -> str:
        return cursor.handle.next_line()

    @requires("shell_write")
    def _write_hook(self, cursor: StreamCursor, data: str | bytes) -> int:
        if not has_primitive(self.controller, "shell_write"):
            raise IOUnsupported(f"{self.controller!r} does not support writing to the shell")

        # Input goes to the running invocation, so make sure there is one.
        cursor.handle.start()
        logger.debug("shell_write %s", payload_preview(data))
        return self.controller.shell_write(data)

    def _close_hook(self, cursor: StreamCursor) -> None:
        cursor.handle.close()

    def __str__(self) -> str:
        return " ".join((self.program,) + self.arguments)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self}>"


class LineProducer:
    """Pulls output lines from one shell_exec invocation.

    shell_exec is not called when the producer is created, only on start(),
    which the first next_line() does implicitly.
    """

    def __init__(self, controller: object, program: str, arguments: tuple[str, ...], encoding: str):
        self._controller = controller
        self.program = program
        self.arguments = arguments
        self.encoding = encoding
        self._lines: Iterator[str | bytes] | None = None

    @property
    def started(self) -> bool:
        return self._lines is not None

    def start(self) -> "LineProducer":
        if self._lines is None:
            logger.debug("shell_exec program=%s arguments=%s", self.program, list(self.arguments))
            self._lines = iter(self._controller.shell_exec(self.program, *self.arguments))
        return self

    def next_line(self) -> str:
        """Return the next non-empty output line.

        Raises:
            EndOfStream: The invocation has no more output.
        """
        self.start()
        for line in self._lines:
            if isinstance(line, (bytes, bytearray)):
                line = bytes(line).decode(self.encoding)
            if line:
                return line
        raise EndOfStream(f"end of command output: {self.program}")

    def close(self) -> None:
        close = getattr(self._lines, "close", None)
        if close is not None:
            close()
        self._lines = iter(())


__all__ = ["Command", "LineProducer"]
