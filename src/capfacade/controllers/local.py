"""Controllers that act on the local host.

LocalController implements the file and command primitives with OS file
descriptors and subprocess. It is useful on its own (resources work the
same against the local machine as against a remote one) and as a reference
for writing remote controllers.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator

from capfacade.controllers.path_guard import PathGuard

if TYPE_CHECKING:
    from capfacade.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096

_WRITE_MODE_CHARS = set("wax+")


def _open_flags(mode: str) -> int:
    """Translate a Python open mode into os.open flags."""
    kind = mode.replace("b", "").replace("t", "")
    if "+" in kind:
        flags = os.O_RDWR
    elif kind.startswith("r") or not kind:
        flags = os.O_RDONLY
    else:
        flags = os.O_WRONLY

    if kind.startswith("w"):
        flags |= os.O_CREAT | os.O_TRUNC
    elif kind.startswith("a"):
        flags |= os.O_CREAT | os.O_APPEND
    elif kind.startswith("x"):
        flags |= os.O_CREAT | os.O_EXCL
    return flags


class LocalController:
    """File and command primitives backed by the local host.

    Reads and writes are positioned (`pread`/`pwrite`), so the descriptor's
    own offset never tracks the caller's position. That is why this
    controller defines `fs_seek` but not `fs_tell`. It also defines no
    `fs_readfile`, `fs_ioctl` or `fs_fcntl`; see WholeFileLocalController
    for whole-file reads.
    """

    def __init__(
        self,
        allowed_paths: list[Path | str] | None = None,
        read_only: bool = False,
        allowed_commands: list[str] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float | None = 30,
        encoding: str = "utf-8",
    ):
        """Initialize the controller.

        Args:
            allowed_paths: Directories files and command path arguments must be
                below. If None, all paths are allowed.
            read_only: If True, opening for writing and writing are refused.
            allowed_commands: Program names that may be executed. If None,
                all programs are allowed.
            chunk_size: Bytes returned per fs_read call.
            timeout: Seconds to wait for a command to exit once its output ends.
            encoding: Encoding of command output and input.
        """
        self.guard = PathGuard(allowed_paths)
        self.read_only = read_only
        self.allowed_commands = allowed_commands
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.encoding = encoding
        self.last_exit_code: int | None = None
        self._process: subprocess.Popen | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LocalController":
        return cls(
            allowed_paths=settings.allowed_paths or None,
            read_only=settings.read_only,
            allowed_commands=settings.allowed_commands or None,
            chunk_size=settings.chunk_size,
            timeout=settings.timeout,
            encoding=settings.encoding,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(read_only={self.read_only})>"

    # ------------------------------------------------------------------
    # file primitives

    def _check_writable(self) -> None:
        if self.read_only:
            raise PermissionError("This controller is read-only")

    def fs_open(self, path: str, mode: str) -> int:
        resolved = self.guard.check(path)
        if _WRITE_MODE_CHARS & set(mode):
            self._check_writable()
        fd = os.open(resolved, _open_flags(mode), 0o666)
        logger.debug("local open path=%s mode=%s fd=%s", resolved, mode, fd)
        return fd

    def fs_read(self, fd: int, position: int) -> bytes:
        return os.pread(fd, self.chunk_size, position)

    def fs_write(self, fd: int, position: int, data: bytes | str) -> int:
        self._check_writable()
        if isinstance(data, str):
            data = data.encode(self.encoding)
        return os.pwrite(fd, data, position)

    def fs_seek(self, fd: int, position: int, whence: int) -> int:
        return os.lseek(fd, position, whence)

    def fs_close(self, fd: int) -> None:
        logger.debug("local close fd=%s", fd)
        os.close(fd)

    def fs_stat(self, path: str) -> dict[str, Any] | bool:
        resolved = self.guard.check(path)
        try:
            st = os.stat(resolved)
        except FileNotFoundError:
            return False

        return {
            "size": st.st_size,
            "blocks": getattr(st, "st_blocks", None),
            "blocksize": getattr(st, "st_blksize", None),
            "inode": st.st_ino,
            "nlinks": st.st_nlink,
            "mode": st.st_mode,
            "uid": st.st_uid,
            "gid": st.st_gid,
            "atime": st.st_atime,
            "ctime": st.st_ctime,
            "mtime": st.st_mtime,
        }

    # ------------------------------------------------------------------
    # command primitives

    def _check_command(self, program: str, arguments: tuple[str, ...]) -> None:
        if self.allowed_commands is not None:
            if Path(program).name not in self.allowed_commands:
                allowed_str = ", ".join(self.allowed_commands)
                raise PermissionError(
                    f"Command not allowed. Allowed commands: {allowed_str}"
                )
        self.guard.check_arguments(arguments)

    def shell_exec(self, program: str, *arguments: str) -> "ProcessOutput":
        """Start `program` and return an iterator over its output lines.

        stdout and stderr are merged. The process keeps running until its
        output is exhausted or the iterator is closed.
        """
        self._check_command(program, arguments)

        command = [program, *arguments]
        logger.debug("local exec command=%s", shlex.join(command))
        process = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding=self.encoding,
        )
        self._process = process
        return ProcessOutput(self, process)

    def shell_write(self, data: bytes | str) -> int:
        """Send `data` to the input of the running command."""
        process = self._process
        if process is None or process.stdin is None or process.stdin.closed:
            raise ProcessLookupError("no command is running")
        if isinstance(data, bytes):
            data = data.decode(self.encoding)
        written = process.stdin.write(data)
        process.stdin.flush()
        return written

    def _process_finished(self, process: subprocess.Popen) -> None:
        self.last_exit_code = process.returncode
        logger.debug("local exec exit_code=%s", process.returncode)
        if self._process is process:
            self._process = None


class ProcessOutput:
    """Output lines of a process started by LocalController.shell_exec."""

    def __init__(self, controller: LocalController, process: subprocess.Popen):
        self._controller = controller
        self._process = process
        self._exhausted = False
        self._closed = False

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._closed:
            raise StopIteration
        line = self._process.stdout.readline()
        if not line:
            self._exhausted = True
            self.close()
            raise StopIteration
        return line

    def close(self) -> None:
        """Stop reading; terminate the process if it has not finished."""
        if self._closed:
            return
        self._closed = True

        process = self._process
        if process.stdin and not process.stdin.closed:
            try:
                process.stdin.close()
            except BrokenPipeError:
                pass

        if process.poll() is None:
            if not self._exhausted:
                process.terminate()
            try:
                process.wait(timeout=self._controller.timeout)
            except subprocess.TimeoutExpired:
                logger.debug("local exec timeout seconds=%s", self._controller.timeout)
                process.kill()
                process.wait()

        process.stdout.close()
        self._controller._process_finished(process)


class WholeFileLocalController(LocalController):
    """LocalController that also transfers files whole with fs_readfile."""

    def fs_readfile(self, path: str) -> bytes:
        resolved = self.guard.check(path)
        logger.debug("local readfile path=%s", resolved)
        return resolved.read_bytes()


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "LocalController",
    "WholeFileLocalController",
]
