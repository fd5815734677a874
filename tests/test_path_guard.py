"""Tests for PathGuard and path argument detection."""

from pathlib import Path

import pytest

from capfacade.controllers.path_guard import PathGuard, looks_like_path, path_arguments


class TestPathArguments:
    """Tests for picking path-like command arguments."""

    def test_plain_paths(self):
        assert path_arguments(["/etc/passwd", "file.txt", "dir/file"]) == ["/etc/passwd", "dir/file"]

    def test_long_flag_values(self):
        assert path_arguments(["--output=/tmp/out", "--verbose"]) == ["/tmp/out"]

    def test_short_flag_suffix(self):
        assert path_arguments(["-I/usr/include", "-v"]) == ["/usr/include"]

    def test_short_flag_relative(self):
        assert path_arguments(["-L../lib/x"]) == ["../lib/x"]

    def test_looks_like_path(self):
        assert looks_like_path("~")
        assert looks_like_path("./x")
        assert looks_like_path("a/b")
        assert not looks_like_path("plain")


class TestPathGuard:
    """Tests for allow/deny checks."""

    def test_empty_guard_allows_everything(self):
        guard = PathGuard()

        assert not guard
        assert guard.allows("/etc/passwd")
        guard.check_arguments(["/etc/passwd"])

    def test_allows_below_directory(self, tmp_path):
        guard = PathGuard([tmp_path])

        assert guard.allows(tmp_path)
        assert guard.allows(tmp_path / "a" / "b.txt")
        assert not guard.allows(tmp_path.parent)

    def test_relative_paths_use_cwd(self, tmp_path):
        guard = PathGuard([tmp_path])

        assert guard.allows("x.txt", cwd=tmp_path)
        assert not guard.allows("../x.txt", cwd=tmp_path)

    def test_check_returns_resolved_path(self, tmp_path):
        guard = PathGuard([tmp_path])

        assert guard.check(tmp_path / "sub" / ".." / "f") == (tmp_path / "f").resolve()

    def test_check_denied(self, tmp_path):
        guard = PathGuard([tmp_path / "allowed"])

        with pytest.raises(PermissionError) as exc:
            guard.check("/etc/passwd")

        assert "Access denied" in str(exc.value)

    def test_check_arguments_denied(self, tmp_path):
        guard = PathGuard([tmp_path])

        with pytest.raises(PermissionError) as exc:
            guard.check_arguments(["-n", "/etc/passwd"])

        assert "Path argument not allowed" in str(exc.value)

    def test_check_arguments_allowed(self, tmp_path):
        guard = PathGuard([tmp_path])

        guard.check_arguments(["-la", str(tmp_path / "x")])

    def test_allowed_paths_are_resolved(self, tmp_path):
        guard = PathGuard([str(tmp_path / "a" / "..")])

        assert guard.allowed_paths == [Path(tmp_path).resolve()]
