"""CLI entry point for watchrun: watch the current directory and run a command on changes."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from watchrun import __version__
from watchrun.controller import WatchController, WatchStartupError
from watchrun_core.config import build_watch_config
from watchrun_core.notifier import ConsoleNotifier
from watchrun_core.watchers import DEFAULT_DEBOUNCE_MS, DEFAULT_PATTERN, WatchConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watchrun",
        usage="%(prog)s [flags] [--] command [args...]",
        description=(
            "Watch files and execute commands on changes.\n\n"
            "watchrun monitors files in the current directory and subdirectories.\n"
            "When a file matching the glob pattern changes, it executes the specified command."
        ),
        epilog="Examples:\n"
        '  watchrun --pattern "**/*.py" pytest\n'
        '  watchrun -p "*.js" npm test\n'
        '  watchrun -p "src/**/*.ts" -d 500 -- npm run build',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-p",
        "--pattern",
        default=None,
        help=f"Glob pattern to match files, e.g. '*.go' or '**/*.js' (default: {DEFAULT_PATTERN})",
    )

    parser.add_argument(
        "-d",
        "--debounce",
        type=int,
        default=None,
        metavar="MS",
        help=f"Debounce time in milliseconds (default: {DEFAULT_DEBOUNCE_MS})",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Optional TOML file with a [watch] table (pattern, debounce_ms, command)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to execute, followed by its arguments",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Everything after a literal ``--`` is taken verbatim as the command. A
    ``--`` that appears after the command has started belongs to the command.

    Returns:
        Parsed arguments namespace with ``command`` as a list of tokens
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if "--" in argv:
        split = argv.index("--")
        args = parser.parse_args(argv[:split])
        if args.command:
            args.command = list(args.command) + argv[split:]
        else:
            args.command = argv[split + 1 :]
    else:
        args = parser.parse_args(argv)
        args.command = list(args.command)

    if args.debounce is not None and args.debounce < 0:
        parser.error("--debounce must be >= 0")

    if not args.command and not args.config:
        parser.error("a command to execute is required")

    return args


def configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in ("watchrun", "watchrun_core"):
        logging.getLogger(name).setLevel(logging.DEBUG)


def resolve_config(args: argparse.Namespace) -> WatchConfig:
    """Build the WatchConfig for the current working directory.

    Raises:
        WatchStartupError: If the working directory cannot be determined
        FileNotFoundError: If the config file is missing
        ValueError: If no command is configured or a value is invalid
    """
    try:
        cwd = Path.cwd()
    except OSError as e:
        raise WatchStartupError(f"Failed to get current directory: {e}") from e

    return build_watch_config(
        root=cwd,
        command=args.command,
        pattern=args.pattern,
        debounce_ms=args.debounce,
        config_path=args.config,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """
    Main entry point for the watchrun CLI.

    Handles:
    - Argument parsing
    - Building the watch configuration
    - Running the controller until interrupted
    - Error handling and exit codes
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    controller = None
    try:
        config = resolve_config(args)
        controller = WatchController(config, notifier=ConsoleNotifier())
        asyncio.run(controller.run())

    except KeyboardInterrupt:
        # Gracefully handle Ctrl+C
        if controller is not None:
            controller.stop()
        sys.exit(130)
    except (WatchStartupError, FileNotFoundError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
