"""Status command: Show configured items and their destinations."""

import argparse
import logging
from datetime import datetime
from pathlib import Path

from .. import __util__
from ..__logger__ import create_logger
from ..config import ConfigError, find_config_file, load_config
from .common import get_log_level

logger = logging.getLogger(__name__)


def _last_modified(path: Path) -> str:
    """Modification time of ``path`` for display."""
    return datetime.fromtimestamp(path.stat().st_mtime).strftime("%Y-%m-%d %H:%M:%S")


def execute_status(args: argparse.Namespace) -> int:
    """Execute the status command.

    Shows the backup root, and for every item whether its source exists
    and where its backup lives. Nothing is created or changed.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    log_level = get_log_level(args)
    create_logger(log_level)

    # Find and load config
    try:
        config_path = find_config_file(getattr(args, "config", None))
        if config_path is None:
            print("No configuration file found.")
            print("Create one with: syncvault config init")
            return 1

        config, _ = load_config(config_path)

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    try:
        backup_root = __util__.safe_path(config.backup_root)
    except __util__.UnsafePathError as e:
        logger.error("Unsafe backup root: %s", e)
        return 1

    print("syncvault Status")
    print("=" * 60)
    print(f"Config: {config_path}")
    print(f"Backup root: {backup_root}{'' if backup_root.is_dir() else ' (missing)'}")
    print(f"Jobs: {config.jobs}")
    if config.rsync_options:
        print(f"rsync options: {__util__.format_command(config.rsync_options)}")
    if config.excludes:
        print(f"Excludes: {', '.join(config.excludes)}")
    print("")

    all_healthy = True

    for item in config.items:
        print(f"Item: {item.label}")

        try:
            source = __util__.safe_path(item.path)
        except __util__.UnsafePathError as e:
            print(f"  Source: {item.path} (unsafe: {e})")
            all_healthy = False
            print("")
            continue

        if source.is_dir():
            print(f"  Source: {source}")
        else:
            print(f"  Source: {source} (missing)")
            all_healthy = False

        destination = backup_root / item.dest_name(source)
        if destination.is_dir():
            print(f"  Backup: {destination} (updated {_last_modified(destination)})")
        else:
            print(f"  Backup: {destination} (not yet created)")
        print("")

    # Summary
    print("=" * 60)
    if all_healthy:
        print("Overall: All sources available")
    else:
        print("Overall: Some issues detected")

    return 0 if all_healthy else 1
