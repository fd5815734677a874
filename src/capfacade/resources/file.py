"""Files on a controlled system.

File turns whatever file primitives the controller defines into a buffered
stream. Reading prefers `fs_readfile` (one call, whole contents) over the
positioned `fs_read`; `fs_open`, `fs_close`, `fs_seek` and `fs_tell` are
used when present and emulated or skipped when not.
"""

from __future__ import annotations

import codecs
import logging
import os
from typing import Any, AnyStr

from capfacade.controller import has_primitive
from capfacade.errors import IOUnsupported
from capfacade.logging_utils import payload_preview
from capfacade.resources.base import requires
from capfacade.resources.stat import Stat
from capfacade.resources.streaming import StreamResource
from capfacade.stream import StreamCursor, StreamHooks

logger = logging.getLogger(__name__)


class File(StreamResource):
    """A file on the system behind the controller."""

    name = "file"
    description = "Read, write and inspect a file through the controller."

    def __init__(self, controller: object, path: str, mode: str = "r", encoding: str = "utf-8"):
        """Create an unopened file.

        Args:
            controller: The object controlling remote files.
            path: Path of the remote file.
            mode: Open mode handed to fs_open. Binary modes ("rb", "wb", ...)
                return bytes; other modes return str.
            encoding: Used to convert between bytes and str when the
                controller's data does not match the mode. Text-mode
                positions count characters, which match byte offsets only
                for single-byte text; use a binary mode for exact offsets.
        """
        super().__init__(controller)
        self._path = str(path)
        self._mode = str(mode)
        self.encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)()

        hooks = StreamHooks(
            open=self._open_hook,
            read=self._read_hook,
            close=self._close_hook,
            write=self._write_hook if has_primitive(controller, "fs_write") else None,
            seek=self._seek_hook if has_primitive(controller, "fs_seek") else None,
            tell=self._tell_hook if has_primitive(controller, "fs_tell") else None,
        )
        self._init_stream(hooks, b"" if self.binary else "")

    @classmethod
    def open_file(cls, controller: object, path: str, mode: str = "r", **kwargs) -> "File":
        """Create a File; use it as a context manager to close it afterwards.

        Example:
            with File.open_file(controller, "/etc/hostname") as f:
                hostname = f.read().strip()
        """
        return cls(controller, path, mode, **kwargs)

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def binary(self) -> bool:
        return "b" in self._mode

    @property
    def fd(self) -> Any:
        """The handle returned by fs_open (or the path), once opened."""
        return self._stream.handle

    # ------------------------------------------------------------------
    # operations

    @requires()
    def seek(self, position: int, whence: int = os.SEEK_SET) -> int:
        """Set the position in the file.

        The buffer is cleared and, when the controller defines fs_seek, the
        call is forwarded to it. SEEK_CUR counts from the logical position
        and reaches fs_seek as SEEK_SET. SEEK_END needs an fs_seek that
        returns the resulting offset; without fs_seek the value is taken as
        an absolute position.
        """
        self._decoder.reset()
        return self._stream.seek(position, whence)

    @requires()
    def tell(self) -> int:
        """The current offset, from fs_tell when the controller defines it."""
        return self._stream.tell()

    @requires("fs_ioctl")
    def ioctl(self, command: Any, argument: Any) -> Any:
        """Execute a low-level command to control or query the IO stream.

        Raises:
            CapabilityMissing: The controller does not define fs_ioctl.
        """
        self.require_capability("fs_ioctl")
        return self.controller.fs_ioctl(command, argument)

    @requires("fs_fcntl")
    def fcntl(self, command: Any, argument: Any) -> Any:
        """Execute a low-level command to control or query the file stream.

        Raises:
            CapabilityMissing: The controller does not define fs_fcntl.
        """
        self.require_capability("fs_fcntl")
        return self.controller.fs_fcntl(command, argument)

    @requires()
    def reopen(self, path: str) -> "File":
        """Close the file, point it at `path` and open it again."""
        self.close()
        self._path = str(path)
        self._stream.open()
        return self

    @requires("fs_stat")
    def stat(self) -> Stat:
        """Fetch fresh status information for the file."""
        return Stat.fetch(self.controller, self._path)

    # ------------------------------------------------------------------
    # stream hooks

    @requires()
    def _open_hook(self, cursor: StreamCursor) -> Any:
        self._decoder.reset()
        if has_primitive(self.controller, "fs_open"):
            logger.debug("fs_open path=%s mode=%s", self._path, self._mode)
            return self.controller.fs_open(self._path, self._mode)
        return self._path

    @requires("fs_readfile", operation="readfile")
    @requires("fs_read")
    def _read_hook(self, cursor: StreamCursor) -> AnyStr | None:
        if has_primitive(self.controller, "fs_readfile"):
            logger.debug("fs_readfile path=%s", self._path)
            contents = self.controller.fs_readfile(self._path)
            data = self._coerce(contents, final=True)
            cursor.eof = True
            return data[cursor.offset:] if data and cursor.offset else data

        if has_primitive(self.controller, "fs_read"):
            start = offset = cursor.offset
            while True:
                logger.debug("fs_read handle=%r position=%s", cursor.handle, offset)
                raw = self.controller.fs_read(cursor.handle, offset)
                if not raw:
                    return self._coerce(b"", final=True)
                offset += len(raw)
                data = self._coerce(raw)
                if data:
                    # The stream adds len(data); keep the backend offset in raw units.
                    cursor.offset += (offset - start) - len(data)
                    return data
                # Only part of a multi-byte character so far.

        raise IOUnsupported(f"{self.controller!r} does not support reading files")

    @requires("fs_write")
    def _write_hook(self, cursor: StreamCursor, data: AnyStr) -> int:
        logger.debug(
            "fs_write handle=%r position=%s %s",
            cursor.handle,
            cursor.position,
            payload_preview(data),
        )
        return self.controller.fs_write(cursor.handle, cursor.position, data)

    def _close_hook(self, cursor: StreamCursor) -> None:
        if has_primitive(self.controller, "fs_close"):
            logger.debug("fs_close handle=%r", cursor.handle)
            self.controller.fs_close(cursor.handle)

    def _seek_hook(self, cursor: StreamCursor, position: int, whence: int) -> Any:
        logger.debug("fs_seek handle=%r position=%s whence=%s", cursor.handle, position, whence)
        return self.controller.fs_seek(cursor.handle, position, whence)

    def _tell_hook(self, cursor: StreamCursor) -> int:
        return self.controller.fs_tell(cursor.handle)

    def _coerce(self, data: Any, final: bool = False) -> AnyStr | None:
        if self.binary and isinstance(data, str):
            return data.encode(self.encoding)
        if not self.binary and isinstance(data, (bytes, bytearray)):
            return self._decoder.decode(bytes(data), final=final)
        return data or None

    def __repr__(self) -> str:
        return f"<{type(self).__name__}:{self._path}>"


__all__ = ["File"]
