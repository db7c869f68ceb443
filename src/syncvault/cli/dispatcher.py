"""CLI dispatcher.

Builds the subcommand parser and routes parsed arguments to the command
handlers.
"""

import argparse
import sys
from typing import Callable

from .common import add_verbosity_args, duration, positive_int

DEFAULT_TIMEOUT = "1h"


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="syncvault",
        description="Mirror a set of directories into a backup root with parallel rsync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Back up all configured items",
        description="Mirror every configured item into the backup root",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Let rsync show what would be done without making changes",
    )
    run_parser.add_argument(
        "--timeout",
        type=duration,
        default=duration(DEFAULT_TIMEOUT),
        metavar="DURATION",
        help=(
            "Deadline per item, e.g. '90s', '30m', '2h' "
            f"(default: {DEFAULT_TIMEOUT}, 0 disables)"
        ),
    )
    run_parser.add_argument(
        "-j",
        "--jobs",
        type=positive_int,
        metavar="N",
        help="Number of concurrent rsync processes (overrides config)",
    )
    run_parser.add_argument(
        "--item",
        metavar="NAME",
        action="append",
        help="Only back up the named item(s)",
    )
    run_parser.add_argument(
        "--rsync",
        metavar="PATH",
        default="rsync",
        help="rsync executable to use (default: rsync from PATH)",
    )
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any item failed",
    )

    # status command
    subparsers.add_parser(
        "status",
        help="Show configured items and their destinations",
        description="Display the backup root, items, and whether sources and destinations exist",
    )

    # config command with subcommands
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Validate or initialize configuration",
    )
    config_subs = config_parser.add_subparsers(dest="config_action")

    config_subs.add_parser(
        "validate",
        help="Validate configuration file",
    )

    init_parser = config_subs.add_parser(
        "init",
        help="Generate example configuration",
    )
    init_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )

    return parser


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"syncvault {__version__}")
        return 0

    if not args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    # Route to appropriate command handler
    handlers: dict[str, Callable] = {
        "run": cmd_run,
        "status": cmd_status,
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command."""
    from .run import execute_run

    return execute_run(args)


def cmd_status(args: argparse.Namespace) -> int:
    """Execute status command."""
    from .status import execute_status

    return execute_status(args)


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for syncvault CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    return run_subcommand(args)
