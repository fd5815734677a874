"""Shell resource: builds and runs Commands through the controller."""

from __future__ import annotations

import logging
from typing import Iterator

from capfacade.resources.base import Resource, requires
from capfacade.resources.command import Command

logger = logging.getLogger(__name__)


class Shell(Resource):
    """Run programs on the controlled system.

    Each helper runs exactly one Command; nothing is kept between calls.
    """

    name = "shell"
    description = "Run programs through the controller."

    @requires("shell_exec")
    def command(self, program: str, *arguments: str) -> Command:
        """Create an unopened Command for `program`."""
        return Command(self.controller, program, *arguments)

    @requires("shell_exec")
    def run(self, program: str, *arguments: str) -> str:
        """Run a program and return its whole output."""
        logger.debug("shell run program=%s arguments=%s", program, list(arguments))
        with self.command(program, *arguments) as cmd:
            return cmd.read()

    @requires("shell_exec")
    def lines(self, program: str, *arguments: str) -> Iterator[str]:
        """Yield each output line with trailing whitespace removed."""
        with self.command(program, *arguments) as cmd:
            for line in cmd:
                yield line.rstrip()

    def _first(self, program: str, *arguments: str) -> str | None:
        with self.command(program, *arguments) as cmd:
            line = cmd.first()
        return line.rstrip() if line is not None else None

    @requires("shell_exec")
    def pwd(self) -> str | None:
        return self._first("pwd")

    @requires("shell_exec")
    def whoami(self) -> str | None:
        return self._first("whoami")

    @requires("shell_exec")
    def which(self, program: str) -> str | None:
        return self._first("which", program)

    @requires("shell_exec")
    def cat(self, *paths: str) -> str:
        return self.run("cat", *paths)

    @requires("shell_exec")
    def ls(self, *arguments: str) -> list[str]:
        return list(self.lines("ls", *arguments))


__all__ = ["Shell"]
