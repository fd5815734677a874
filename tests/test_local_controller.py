"""Tests for LocalController against the real filesystem and processes."""

import os
import sys

import pytest

from capfacade.config import Settings
from capfacade.controllers import LocalController, WholeFileLocalController
from capfacade.controllers.local import _open_flags
from capfacade.errors import NotFound
from capfacade.resources import Command, File, Shell, Stat


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_bytes(b"line one\nline two\nline three\n")
    return path


class TestOpenFlags:
    """Tests for mode translation."""

    def test_read_modes(self):
        assert _open_flags("r") == os.O_RDONLY
        assert _open_flags("rb") == os.O_RDONLY

    def test_write_modes(self):
        assert _open_flags("w") == os.O_WRONLY | os.O_CREAT | os.O_TRUNC
        assert _open_flags("ab") == os.O_WRONLY | os.O_CREAT | os.O_APPEND
        assert _open_flags("x") == os.O_WRONLY | os.O_CREAT | os.O_EXCL

    def test_update_modes(self):
        assert _open_flags("r+") == os.O_RDWR
        assert _open_flags("w+b") == os.O_RDWR | os.O_CREAT | os.O_TRUNC


class TestLocalFiles:
    """Tests for File over LocalController."""

    def test_chunked_read(self, sample):
        """Test reading a file in small chunks."""
        controller = LocalController(chunk_size=4)

        with File.open_file(controller, sample, "rb") as f:
            assert f.read() == sample.read_bytes()

    def test_readlines(self, sample):
        """Test line iteration in text mode."""
        with File.open_file(LocalController(chunk_size=5), sample) as f:
            assert list(f) == ["line one\n", "line two\n", "line three\n"]

    def test_write_then_read(self, tmp_path):
        """Test writing a new file and reading it back."""
        path = tmp_path / "out.bin"
        controller = LocalController()

        with File.open_file(controller, path, "wb") as f:
            f.write(b"hello ")
            f.write(b"world")

        assert path.read_bytes() == b"hello world"

    def test_seek_from_end(self, sample):
        """Test that SEEK_END is resolved through lseek."""
        controller = LocalController(chunk_size=4)
        data = sample.read_bytes()

        with File.open_file(controller, sample, "rb") as f:
            f.read(1)
            assert f.seek(-6, os.SEEK_END) == len(data) - 6
            assert f.read() == b"three\n"

    def test_seek_from_current(self, tmp_path):
        """Test that SEEK_CUR counts from the read position, not the descriptor offset."""
        path = tmp_path / "digits"
        path.write_bytes(b"0123456789")

        with File.open_file(LocalController(chunk_size=4), path, "rb") as f:
            assert f.read(5) == b"01234"
            assert f.seek(2, os.SEEK_CUR) == 7
            assert f.read(1) == b"7"
            assert f.seek(-3, os.SEEK_CUR) == 5
            assert f.read() == b"56789"

    def test_seek_then_tell(self, sample):
        """Test tell() after an absolute seek."""
        with File.open_file(LocalController(), sample, "rb") as f:
            f.seek(5)
            assert f.tell() == 5
            assert f.read(3) == b"one"

    def test_missing_file(self, tmp_path):
        """Test that opening a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            File(LocalController(), tmp_path / "missing").read()

    def test_supported_operations(self, sample):
        """Test which File operations LocalController supports."""
        f = File(LocalController(), sample)

        assert f.supports("open", "read", "write", "seek", "tell", "stat", "close")
        assert not f.supports("readfile")
        assert not f.supports("ioctl")
        assert not f.supports("fcntl")

    def test_whole_file_controller(self, sample):
        """Test that WholeFileLocalController reads with fs_readfile."""
        controller = WholeFileLocalController()
        f = File(controller, sample, "rb")

        assert f.supports("readfile")
        assert f.read() == sample.read_bytes()
        f.close()


class TestLocalRestrictions:
    """Tests for read-only mode and allowed paths."""

    def test_read_only_refuses_write_mode(self, tmp_path):
        """Test that opening for writing is refused."""
        controller = LocalController(read_only=True)

        with pytest.raises(PermissionError):
            File(controller, tmp_path / "out", "w").write("x")

        assert not (tmp_path / "out").exists()

    def test_read_only_allows_reading(self, sample):
        """Test that reads still work when read-only."""
        with File.open_file(LocalController(read_only=True), sample, "rb") as f:
            assert f.readline() == b"line one\n"

    def test_outside_allowed_paths(self, tmp_path, sample):
        """Test that files outside the allowed directories are refused."""
        allowed = tmp_path / "allowed"
        allowed.mkdir()
        controller = LocalController(allowed_paths=[allowed])

        with pytest.raises(PermissionError):
            File(controller, sample).read()

    def test_inside_allowed_paths(self, tmp_path):
        """Test that files below an allowed directory can be read."""
        path = tmp_path / "ok.txt"
        path.write_text("fine")
        controller = LocalController(allowed_paths=[tmp_path])

        with File.open_file(controller, path) as f:
            assert f.read() == "fine"

    def test_stat_outside_allowed_paths(self, tmp_path, sample):
        """Test that stat is guarded too."""
        allowed = tmp_path / "allowed"
        allowed.mkdir()

        with pytest.raises(PermissionError):
            Stat.fetch(LocalController(allowed_paths=[allowed]), sample)


class TestLocalStat:
    """Tests for fs_stat."""

    def test_stat(self, sample):
        """Test status fields from os.stat."""
        st = Stat.fetch(LocalController(), sample)

        assert st.size == len(sample.read_bytes())
        assert st.inode == os.stat(sample).st_ino
        assert st.nlinks >= 1
        assert not st.zero()

    def test_stat_missing(self, tmp_path):
        """Test that a missing file raises NotFound."""
        with pytest.raises(NotFound):
            Stat.fetch(LocalController(), tmp_path / "missing")


class TestLocalCommands:
    """Tests for Command over LocalController."""

    def test_output_lines(self):
        """Test reading a process's output."""
        controller = LocalController()
        cmd = Command(controller, sys.executable, "-c", "print('a'); print('b')")

        assert cmd.readlines() == ["a\n", "b\n"]
        assert controller.last_exit_code == 0

    def test_stderr_merged(self):
        """Test that stderr is part of the output."""
        script = "import sys; sys.stderr.write('oops\\n')"

        with Command(LocalController(), sys.executable, "-c", script) as cmd:
            assert cmd.read() == "oops\n"

    def test_exit_code_recorded(self):
        """Test that the exit status is kept after the output ends."""
        controller = LocalController()

        with Command(controller, sys.executable, "-c", "raise SystemExit(3)") as cmd:
            assert cmd.read() == ""

        assert controller.last_exit_code == 3

    def test_write_to_input(self):
        """Test sending input to a running process."""
        script = "import sys; print(sys.stdin.readline().strip().upper())"
        cmd = Command(LocalController(), sys.executable, "-u", "-c", script)

        cmd.write("hello\n")

        assert cmd.readline() == "HELLO\n"
        cmd.close()

    def test_close_terminates_process(self):
        """Test that closing before the output ends stops the process."""
        script = "import time; print('ready', flush=True); time.sleep(30)"
        controller = LocalController()
        cmd = Command(controller, sys.executable, "-c", script)

        assert cmd.readline() == "ready\n"
        cmd.close()

        assert controller.last_exit_code is not None
        assert controller.last_exit_code != 0

    def test_shell_write_without_process(self):
        """Test that shell_write needs a running command."""
        with pytest.raises(ProcessLookupError):
            LocalController().shell_write("x")

    def test_allowed_commands(self):
        """Test that unlisted programs are refused."""
        controller = LocalController(allowed_commands=["echo"])

        with pytest.raises(PermissionError) as exc:
            Command(controller, sys.executable, "-c", "pass").read()

        assert "echo" in str(exc.value)

    def test_path_arguments_checked(self, tmp_path):
        """Test that path arguments outside the allowed directories are refused."""
        controller = LocalController(allowed_paths=[tmp_path])

        with pytest.raises(PermissionError):
            controller.shell_exec("cat", "/etc/passwd")

    def test_shell_run(self):
        """Test the Shell helpers over a local process."""
        shell = Shell(LocalController())

        assert shell.run(sys.executable, "-c", "print('x')") == "x\n"


class TestFromSettings:
    """Tests for building a controller from Settings."""

    def test_from_settings(self, tmp_path):
        settings = Settings(
            allowed_paths=[str(tmp_path)],
            read_only=True,
            allowed_commands=["ls"],
            chunk_size=16,
            timeout=5,
        )

        controller = LocalController.from_settings(settings)

        assert controller.read_only is True
        assert controller.allowed_commands == ["ls"]
        assert controller.chunk_size == 16
        assert controller.timeout == 5
        assert controller.guard.allowed_paths == [tmp_path.resolve()]

    def test_empty_lists_mean_unrestricted(self):
        controller = LocalController.from_settings(Settings())

        assert controller.allowed_commands is None
        assert not controller.guard
