"""Command line entrypoint for exercising resources against the local host."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from capfacade.config import Settings
from capfacade.controllers.local import LocalController, WholeFileLocalController
from capfacade.errors import ResourceError
from capfacade.logging_utils import configure_logging
from capfacade.resources import Command, File, Shell

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capfacade",
        description="Use capfacade resources through a local controller.",
    )
    parser.add_argument("--log-level", default=None, help="Log level (e.g. DEBUG).")
    parser.add_argument("--log-file", default=None, help="Write logs to this file.")
    parser.add_argument(
        "--whole-file",
        action="store_true",
        help="Read files in one fs_readfile call instead of chunks.",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("supports", help="List resource operations and whether they are supported.")

    cat = sub.add_parser("cat", help="Print a file.")
    cat.add_argument("path")

    stat = sub.add_parser("stat", help="Print a file's status.")
    stat.add_argument("path")

    exec_ = sub.add_parser("exec", help="Run a program and print its output.")
    exec_.add_argument("program")
    exec_.add_argument("arguments", nargs=argparse.REMAINDER)

    return parser


def _print_supports(controller: object) -> None:
    resources = [
        File(controller, "."),
        Command(controller, "true"),
        Shell(controller),
    ]
    for resource in resources:
        print(resource.describe())
        print()


def _cat(controller: object, path: str) -> None:
    with File.open_file(controller, path, "rb") as f:
        for chunk in f.chunks():
            sys.stdout.buffer.write(chunk)
    sys.stdout.flush()


def _stat(controller: object, path: str) -> None:
    st = File(controller, path).stat()
    print(f"path: {st.path}")
    print(f"size: {st.size}")
    print(f"mode: {oct(st.mode) if st.mode is not None else None}")
    print(f"inode: {st.inode}")
    print(f"nlinks: {st.nlinks}")
    print(f"uid: {st.uid}")
    print(f"gid: {st.gid}")
    print(f"mtime: {st.mtime}")


def _exec(controller: object, program: str, arguments: list[str]) -> None:
    with Command(controller, program, *arguments) as cmd:
        for line in cmd:
            sys.stdout.write(line)
    sys.stdout.flush()


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
        configure_logging(settings, log_level=args.log_level, log_file=args.log_file)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    controller_class = WholeFileLocalController if args.whole_file else LocalController
    controller = controller_class.from_settings(settings)

    try:
        if args.command == "supports":
            _print_supports(controller)
        elif args.command == "cat":
            _cat(controller, args.path)
        elif args.command == "stat":
            _stat(controller, args.path)
        elif args.command == "exec":
            _exec(controller, args.program, args.arguments)
    except (ResourceError, OSError) as exc:
        logger.debug("cli command failed command=%s", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0


def run() -> None:
    raise SystemExit(main())


__all__ = ["main", "run"]
