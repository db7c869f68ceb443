"""Run command: Back up all configured items."""

import argparse
import logging

from .. import __util__
from ..__logger__ import create_logger
from ..config import ConfigError, find_config_file, load_config
from ..core.executor import ItemStatus
from ..core.runner import run_backup
from .common import get_log_level

logger = logging.getLogger(__name__)


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Item failures are logged but only change the exit code with --strict.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    # Initialize logger
    log_level = get_log_level(args)
    create_logger(log_level)

    # Find and load config
    try:
        config_path = find_config_file(getattr(args, "config", None))
        if config_path is None:
            print("No configuration file found.")
            print("Create one with: syncvault config init")
            return 1

        logger.info("Loading configuration from: %s", config_path)
        config, warnings = load_config(config_path)

        for warning in warnings:
            logger.warning("Config: %s", warning)

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    selected = getattr(args, "item", None)
    items = config.get_items(selected)
    if not items:
        logger.error("No configured item matches: %s", ", ".join(selected or []))
        return 1

    dry_run = getattr(args, "dry_run", False)
    if dry_run:
        logger.info("Dry run mode - rsync will not change anything")

    try:
        summary = run_backup(
            config,
            items,
            jobs=getattr(args, "jobs", None),
            dry_run=dry_run,
            verbose=getattr(args, "verbose", False),
            timeout=getattr(args, "timeout", None),
            rsync=getattr(args, "rsync", "rsync"),
        )
    except __util__.AbortError as e:
        logger.error("Aborting: %s", e)
        return 1

    if summary.failed:
        counts = ", ".join(
            f"{count} {status.value}"
            for status, count in summary.by_status().items()
            if status is not ItemStatus.SUCCEEDED
        )
        logger.warning(
            "Completed with errors: %d succeeded, %d failed (%s)",
            summary.succeeded,
            summary.failed,
            counts,
        )
        return 1 if getattr(args, "strict", False) else 0

    logger.info("All %d item(s) completed successfully", summary.succeeded)
    return 0
