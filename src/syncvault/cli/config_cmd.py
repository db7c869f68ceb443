"""Config command: check or create a syncvault configuration file."""

import argparse
import logging
from pathlib import Path

from ..__logger__ import create_logger
from ..config import Config, ConfigError, find_config_file, load_config
from ..config.loader import config_search_paths, generate_example_config
from .common import get_log_level

logger = logging.getLogger(__name__)


def execute_config(args: argparse.Namespace) -> int:
    """Execute the config command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(get_log_level(args))

    actions = {"validate": _validate_config, "init": _init_config}
    action = actions.get(getattr(args, "config_action", None) or "")
    if action is None:
        print("Usage: syncvault config <validate|init>")
        return 1
    return action(args)


def _describe(config: Config) -> list[str]:
    """Summary lines for a loaded configuration."""
    lines = [
        f"  Backup root: {config.backup_root}",
        f"  Items: {len(config.items)}",
    ]
    lines += [f"    {item.label} <- {item.path}" for item in config.items]
    lines.append(f"  Jobs: {config.jobs}")
    if config.rsync_options:
        lines.append(f"  rsync options: {' '.join(config.rsync_options)}")
    lines.append(f"  Excludes: {len(config.excludes)}")
    return lines


def _validate_config(args: argparse.Namespace) -> int:
    """Load the configuration and report errors, warnings and a summary."""
    try:
        config_path = find_config_file(getattr(args, "config", None))
        if config_path is None:
            print("No configuration file found. Searched:")
            print("\n".join(f"  {path}" for path in config_search_paths()))
            return 1

        print(f"Validating: {config_path}")
        config, warnings = load_config(config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    if warnings:
        print("\nWarnings:")
        print("\n".join(f"  - {warning}" for warning in warnings))

    print("\nConfiguration is valid.")
    print("\n".join(_describe(config)))
    return 0


def _init_config(args: argparse.Namespace) -> int:
    """Print the example configuration or write it to ``--output``."""
    content = generate_example_config()

    output = getattr(args, "output", None)
    if not output:
        print(content)
        return 0

    try:
        Path(output).write_text(content)
    except OSError as e:
        logger.error("Cannot write %s: %s", output, e)
        return 1
    print(f"Example configuration written to: {output}")
    return 0
