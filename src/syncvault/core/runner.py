"""Backup run orchestration.

Checks the preconditions of a run, takes the run lock on the backup root,
and hands the items to the worker pool.
"""

import logging
import shutil
import time
from functools import partial
from pathlib import Path
from typing import Iterable, Optional

from filelock import FileLock, Timeout

from .. import __util__
from ..config import Config, ItemConfig
from .dispatcher import dispatch
from .executor import ItemResult, RunSummary, execute_item

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".syncvault.lock"


def find_transfer_tool(name: str = "rsync") -> str:
    """Locate the rsync executable.

    Raises:
        AbortError: if it cannot be found
    """
    path = shutil.which(name)
    if path is None:
        raise __util__.AbortError(f"Transfer tool '{name}' not found on PATH")
    return path


def prepare_backup_root(backup_root: str) -> Path:
    """Resolve and create the backup root.

    Raises:
        UnsafePathError: if the backup root resolves to the filesystem root
        AbortError: if it cannot be created
    """
    root = __util__.safe_path(backup_root)
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise __util__.AbortError(f"Cannot create backup root {root}: {e}") from e
    return root


def log_result(result: ItemResult) -> None:
    """Log the outcome of one item."""
    if result.ok:
        logger.info(
            "[worker %d] %s: %s (%.1fs)",
            result.worker_id,
            result.label,
            result.message or result.status.value,
            result.duration_seconds,
        )
    else:
        logger.error(
            "[worker %d] %s: %s - %s",
            result.worker_id,
            result.label,
            result.status.value,
            result.message,
        )


def run_backup(
    config: Config,
    items: Optional[Iterable[ItemConfig]] = None,
    *,
    jobs: Optional[int] = None,
    dry_run: bool = False,
    verbose: bool = False,
    timeout: Optional[float] = None,
    rsync: str = "rsync",
) -> RunSummary:
    """Back up ``items`` (default: all configured items).

    Fatal problems are raised before any item is started; item failures
    are only reported in the returned summary.

    Raises:
        AbortError: if rsync is missing, the backup root is unsafe or
            cannot be created, or another run holds the lock
    """
    items = list(config.items if items is None else items)
    jobs = jobs or config.jobs

    rsync_path = find_transfer_tool(rsync)
    backup_root = prepare_backup_root(config.backup_root)

    run_item = partial(
        _run_item,
        backup_root=backup_root,
        options=config.rsync_options,
        excludes=config.excludes,
        dry_run=dry_run,
        verbose=verbose,
        timeout=timeout,
        rsync=rsync_path,
    )

    lock = FileLock(backup_root / LOCK_FILE_NAME, timeout=0)
    try:
        with lock:
            logger.info(__util__.log_heading(f"Started at {time.ctime()}"))
            logger.info(
                "Backing up %d item(s) to %s with %d worker(s)%s",
                len(items),
                backup_root,
                jobs,
                " (dry run)" if dry_run else "",
            )
            results = dispatch(items, jobs, run_item, on_result=log_result)
            logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))
    except Timeout as e:
        raise __util__.AbortError(
            f"Another run is already using {backup_root} (lock: {e.lock_file})"
        ) from e

    return RunSummary(results=results)


def _run_item(item: ItemConfig, worker_id: int, **kwargs) -> ItemResult:
    return execute_item(item, worker_id=worker_id, **kwargs)
