"""Error kinds raised by resources.

Every error derives from ResourceError and from the builtin exception a
plain Python caller would already expect, so `except FileNotFoundError`
or `except EOFError` keep working against remote resources.
"""

from __future__ import annotations

import io


class ResourceError(Exception):
    """Base class for all resource errors."""


class CapabilityMissing(ResourceError, NotImplementedError):
    """The controller does not define a primitive the operation requires."""

    def __init__(self, primitive: str, resource: str, controller: object = None):
        self.primitive = primitive
        self.resource = resource
        self.controller = controller
        super().__init__(f"{controller!r} does not define {primitive} required by {resource}")


class NotFound(ResourceError, FileNotFoundError):
    """The primitive was invoked but the target does not exist."""


class IOUnsupported(ResourceError, io.UnsupportedOperation):
    """No backend primitive can carry out a stream read or write."""


class EndOfStream(ResourceError, EOFError):
    """The stream's producer is exhausted."""


class ConsoleUnavailable(ResourceError, NotImplementedError):
    """The resource does not provide an interactive console."""


class UnknownOperation(ResourceError, KeyError):
    """The operation name is not declared by the resource type."""

    def __init__(self, operation: str, resource: str):
        self.operation = operation
        self.resource = resource
        super().__init__(f"{resource} does not declare an operation named {operation!r}")

    def __str__(self) -> str:
        return self.args[0]


__all__ = [
    "ResourceError",
    "CapabilityMissing",
    "NotFound",
    "IOUnsupported",
    "EndOfStream",
    "ConsoleUnavailable",
    "UnknownOperation",
]
