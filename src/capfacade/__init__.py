"""capfacade: file and process resources over partially capable controllers.

A controller is any object that implements some of the primitive methods
(`fs_read`, `fs_write`, `shell_exec`, ...). Resources bound to it present
the usual Python stream API and degrade or fail predictably depending on
which primitives exist.

Key Components:
- Resource: Base class with a per-type capability table
- File / Stat: Buffered file access and file status
- Command: Program output as a line stream, with optional input
- Shell: Helpers that build and run Commands
- BufferedStream: The stream machinery shared by File and Command
- LocalController: Reference controller acting on the local host

Example:
    from capfacade import File, LocalController

    controller = LocalController(allowed_paths=["/tmp"])
    with File.open_file(controller, "/tmp/notes.txt") as f:
        for line in f:
            print(line, end="")
"""

from capfacade.config import Settings
from capfacade.controller import (
    COMMAND_PRIMITIVES,
    FILE_PRIMITIVES,
    has_primitive,
    primitives_of,
)
from capfacade.controllers import LocalController, PathGuard, WholeFileLocalController
from capfacade.errors import (
    CapabilityMissing,
    ConsoleUnavailable,
    EndOfStream,
    IOUnsupported,
    NotFound,
    ResourceError,
    UnknownOperation,
)
from capfacade.resources import (
    Command,
    File,
    Resource,
    Shell,
    Stat,
    StreamResource,
    capability_table,
    requires,
)
from capfacade.stream import BufferedStream, StreamCursor, StreamHooks, StreamState

__version__ = "0.1.0"

__all__ = [
    # Resources
    "Resource",
    "StreamResource",
    "File",
    "Stat",
    "Command",
    "Shell",
    "capability_table",
    "requires",
    # Stream
    "BufferedStream",
    "StreamCursor",
    "StreamHooks",
    "StreamState",
    # Controllers
    "COMMAND_PRIMITIVES",
    "FILE_PRIMITIVES",
    "has_primitive",
    "primitives_of",
    "LocalController",
    "WholeFileLocalController",
    "PathGuard",
    # Errors
    "ResourceError",
    "CapabilityMissing",
    "NotFound",
    "IOUnsupported",
    "EndOfStream",
    "ConsoleUnavailable",
    "UnknownOperation",
    # Config
    "Settings",
]
