"""CLI entrypoints for compinit commands."""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import ConfigError
from .context import RunContext
from .errors import Cancelled, InitError, InitFailed, UserAborted
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_default: object = argparse.SUPPRESS if suppress_default else False
    log_file_default: object = argparse.SUPPRESS if suppress_default else None
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=verbose_default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=log_file_default,
        metavar="PATH",
        help="Also write a debug log of the run to PATH.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compinit",
        description="Bootstrap the current directory into a devfile-based component.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Initialize the current directory with a devfile and an optional starter project.",
    )
    _add_logging_options(init_parser, suppress_default=True)
    init_parser.add_argument("--name", help="Name of the component to create.")
    init_parser.add_argument("--devfile", help="Name of the devfile in the devfile registry.")
    init_parser.add_argument(
        "--devfile-registry",
        help="Name of the registry to fetch the devfile from (requires --devfile).",
    )
    init_parser.add_argument(
        "--devfile-path",
        help="Path or URL of a devfile to use instead of a registry devfile.",
    )
    init_parser.add_argument(
        "--starter",
        help="Name of the starter project to download into the empty directory.",
    )

    return parser


def _user_stopped(exc: InitError) -> bool:
    """True when the user stopped the command and the directory was left consistent."""
    if isinstance(exc, InitFailed):
        return isinstance(exc.cause, (UserAborted, Cancelled)) and not exc.starter_downloaded
    return isinstance(exc, (UserAborted, Cancelled))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for compinit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    if args.command != "init":  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        orchestrator = Orchestrator()
    except ConfigError as exc:
        parser.exit(1, f"compinit init failed: {exc}\n")

    raw_flags = {
        "name": args.name,
        "devfile": args.devfile,
        "devfile-registry": args.devfile_registry,
        "devfile-path": args.devfile_path,
        "starter": args.starter,
    }
    try:
        result = orchestrator.run_init(raw_flags, RunContext())
    except InitError as exc:
        logger.debug("init failed with %s", exc.kind, exc_info=True)
        if _user_stopped(exc):
            parser.exit(0, f"{exc}\n")
        parser.exit(1, f"{exc}\n")
    except KeyboardInterrupt:
        parser.exit(0, "compinit init cancelled\n")
    except Exception as exc:
        parser.exit(1, f"compinit init failed: {exc}\nRun with --verbose for more details.\n")

    print(result.message)


if __name__ == "__main__":  # pragma: no cover
    main()
