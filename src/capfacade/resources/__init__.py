"""Resources bound to a controller.

Each resource type declares which controller primitives its operations
need, so callers can ask `supports(...)` before using it:
- Resource: Base class with the capability table and guards
- File / Stat: Buffered file access and file status
- Command: Line-oriented program output with optional input
- Shell: Helpers that build and run Commands
"""

from capfacade.resources.base import Resource, capability_table, requires
from capfacade.resources.command import Command
from capfacade.resources.file import File
from capfacade.resources.shell import Shell
from capfacade.resources.stat import Stat
from capfacade.resources.streaming import StreamResource

__all__ = [
    "Resource",
    "StreamResource",
    "capability_table",
    "requires",
    "Command",
    "File",
    "Shell",
    "Stat",
]
