"""CLI entrypoints for monobuild commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .errors import BuildScriptFailure, CommandFailure, MonobuildError
from .logging import configure_logging
from .orchestrator import CommandContext, Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Print debug output about workspace resolution and caching.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_command_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "cmd",
        nargs=argparse.REMAINDER,
        help="Command run as-is when invoked from inside a monobuild build script.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monobuild",
        description="Build monorepo packages in dependency order with content-addressed caching.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Build the current package after its workspace dependencies.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_command_args(build_parser)

    deps_parser = subparsers.add_parser(
        "deps",
        help="Build only the workspace dependencies of the current package.",
    )
    _add_verbose_option(deps_parser, suppress_default=True)
    _add_command_args(deps_parser)

    all_parser = subparsers.add_parser(
        "all",
        help="Build every package in the workspace.",
    )
    _add_verbose_option(all_parser, suppress_default=True)
    _add_command_args(all_parser)

    graph_parser = subparsers.add_parser(
        "graph",
        help="Print the workspace dependency graph.",
    )
    _add_verbose_option(graph_parser, suppress_default=True)

    clean_parser = subparsers.add_parser(
        "clean",
        help="Delete the build cache.",
    )
    _add_verbose_option(clean_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for monobuild commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()
    ctx = CommandContext(
        cwd=Path.cwd(),
        cmd_args=list(getattr(args, "cmd", None) or []),
        environ=os.environ,
    )

    try:
        if args.command == "build":
            orchestrator.run_build(ctx)
        elif args.command == "deps":
            orchestrator.run_deps(ctx)
        elif args.command == "all":
            orchestrator.run_all(ctx)
        elif args.command == "graph":
            orchestrator.run_graph(ctx)
        elif args.command == "clean":
            orchestrator.run_clean(ctx)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except BuildScriptFailure as exc:
        parser.exit(1, f"{exc}\n")
    except CommandFailure as exc:
        parser.exit(exc.returncode or 1, f"{exc}\n")
    except MonobuildError as exc:
        parser.exit(1, f"monobuild {args.command} failed: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
