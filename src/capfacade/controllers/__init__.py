"""Controllers shipped with capfacade."""

from capfacade.controllers.local import LocalController, ProcessOutput, WholeFileLocalController
from capfacade.controllers.path_guard import PathGuard

__all__ = [
    "LocalController",
    "ProcessOutput",
    "WholeFileLocalController",
    "PathGuard",
]
