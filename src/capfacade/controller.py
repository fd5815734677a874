"""The controller primitive contract.

A controller is any object. Resources never inspect its type; they only ask
whether it defines a given primitive method. The Protocol classes below
describe the signatures for type checkers and implementers. No controller
has to implement all of them.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

FILE_PRIMITIVES = (
    "fs_open",
    "fs_readfile",
    "fs_read",
    "fs_write",
    "fs_close",
    "fs_seek",
    "fs_tell",
    "fs_stat",
    "fs_ioctl",
    "fs_fcntl",
)

COMMAND_PRIMITIVES = (
    "shell_exec",
    "shell_write",
)


def has_primitive(controller: object, name: str) -> bool:
    """Return True if the controller defines a callable primitive `name`."""
    return callable(getattr(controller, name, None))


def primitives_of(controller: object) -> frozenset[str]:
    """Return the known primitives the controller defines."""
    return frozenset(
        name
        for name in FILE_PRIMITIVES + COMMAND_PRIMITIVES
        if has_primitive(controller, name)
    )


class FileController(Protocol):
    """Full set of file primitives."""

    def fs_open(self, path: str, mode: str) -> Any: ...

    def fs_readfile(self, path: str) -> bytes | str | None: ...

    def fs_read(self, handle: Any, position: int) -> bytes | str | None: ...

    def fs_write(self, handle: Any, position: int, data: bytes | str) -> int: ...

    def fs_close(self, handle: Any) -> None: ...

    def fs_seek(self, handle: Any, position: int, whence: int) -> None: ...

    def fs_tell(self, handle: Any) -> int: ...

    def fs_stat(self, path: str) -> Mapping[str, Any] | None: ...

    def fs_ioctl(self, command: Any, argument: Any) -> Any: ...

    def fs_fcntl(self, command: Any, argument: Any) -> Any: ...


class CommandController(Protocol):
    """Full set of command primitives."""

    def shell_exec(self, program: str, *arguments: str) -> Iterable[str]: ...

    def shell_write(self, data: bytes | str) -> int: ...


__all__ = [
    "FILE_PRIMITIVES",
    "COMMAND_PRIMITIVES",
    "has_primitive",
    "primitives_of",
    "FileController",
    "CommandController",
]
