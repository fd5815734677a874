"""Status information of a remote file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from capfacade.controller import has_primitive
from capfacade.errors import CapabilityMissing, NotFound

logger = logging.getLogger(__name__)

STAT_FIELDS = (
    "size",
    "blocks",
    "blocksize",
    "inode",
    "nlinks",
    "mode",
    "uid",
    "gid",
    "atime",
    "ctime",
    "mtime",
)


@dataclass(frozen=True)
class Stat:
    """Status information of a remote file, as reported by `fs_stat`.

    Values are copied verbatim from the controller's result; fields the
    controller does not report are None. Use Stat.fetch() to ask the
    controller, or File.stat().
    """

    path: str
    size: int | None = None
    blocks: int | None = None
    blocksize: int | None = None
    inode: int | None = None
    nlinks: int | None = None
    mode: int | None = None
    uid: int | None = None
    gid: int | None = None
    atime: Any = None
    ctime: Any = None
    mtime: Any = None

    @classmethod
    def fetch(cls, controller: object, path: str) -> "Stat":
        """Request the status of `path` from the controller.

        Raises:
            CapabilityMissing: The controller does not define fs_stat.
            NotFound: fs_stat reported that the file does not exist.
        """
        if not has_primitive(controller, "fs_stat"):
            raise CapabilityMissing("fs_stat", cls.__name__, controller)

        path = str(path)
        logger.debug("fs_stat path=%s", path)
        result = controller.fs_stat(path)
        if not result:
            raise NotFound(f"No such file or directory {path!r}")

        return cls(path=path, **{name: result.get(name) for name in STAT_FIELDS})

    @property
    def ino(self) -> int | None:
        return self.inode

    @property
    def blksize(self) -> int | None:
        return self.blocksize

    def zero(self) -> bool:
        """Return True if the file has zero size."""
        return self.size == 0


__all__ = ["Stat", "STAT_FIELDS"]
