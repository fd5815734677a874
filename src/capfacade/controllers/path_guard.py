"""Restrict a controller to a set of allowed directories."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence


def normalize_paths(paths: Iterable[Path | str] | None) -> list[Path]:
    """Normalize a list of paths to absolute, resolved Paths."""
    return [Path(p).expanduser().resolve() for p in (paths or [])]


def looks_like_path(token: str) -> bool:
    """Heuristic for command arguments that name a file."""
    if token in {".", "..", "~"}:
        return True
    return token.startswith(("/", "./", "../", "~")) or "/" in token


def path_arguments(arguments: Sequence[str]) -> list[str]:
    """Pick the arguments of a command that look like paths.

    `--flag=/some/path` contributes its value; other long flags are skipped;
    short flags contribute whatever follows a path-looking start (`-I/usr`).
    """
    paths: list[str] = []

    for arg in arguments:
        if not arg:
            continue

        if "=" in arg:
            value = arg.split("=", 1)[1]
            if looks_like_path(value):
                paths.append(value)
                continue

        if arg.startswith("--"):
            continue

        if arg.startswith("-"):
            starts = [arg.find(s) for s in ("/", "~", "./", "../") if arg.find(s) > 0]
            if starts:
                paths.append(arg[min(starts):])
            continue

        if looks_like_path(arg):
            paths.append(arg)

    return paths


class PathGuard:
    """Allow access only below the configured directories.

    An empty guard allows every path.
    """

    def __init__(self, allowed_paths: Iterable[Path | str] | None = None):
        self.allowed_paths = normalize_paths(allowed_paths)

    def __bool__(self) -> bool:
        return bool(self.allowed_paths)

    def allows(self, path: Path | str, cwd: Path | None = None) -> bool:
        if not self.allowed_paths:
            return True
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = (cwd or Path.cwd()) / candidate
        candidate = candidate.resolve()
        return any(
            candidate == allowed or allowed in candidate.parents
            for allowed in self.allowed_paths
        )

    def check(self, path: Path | str) -> Path:
        """Resolve a path, raising PermissionError if it is not allowed."""
        if not self.allows(path):
            allowed_str = ", ".join(str(p) for p in self.allowed_paths)
            raise PermissionError(
                f"Access denied: '{path}' is outside allowed paths ({allowed_str})"
            )
        return Path(path).expanduser().resolve()

    def check_arguments(self, arguments: Sequence[str], cwd: Path | None = None) -> None:
        """Raise PermissionError if a path-like argument is not allowed."""
        if not self.allowed_paths:
            return
        for value in path_arguments(arguments):
            if not self.allows(value, cwd):
                allowed_str = ", ".join(str(p) for p in self.allowed_paths)
                raise PermissionError(
                    f"Path argument not allowed: '{value}' "
                    f"is outside allowed paths ({allowed_str})"
                )


__all__ = [
    "PathGuard",
    "looks_like_path",
    "normalize_paths",
    "path_arguments",
]
