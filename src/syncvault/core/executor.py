"""Execution of a single backup item.

Resolves and checks the item's paths, builds the rsync command and runs it
under a deadline. Every failure is reported as an ``ItemResult`` so a
worker can go on with the next item.
"""

import logging
import os
import signal
import subprocess
import threading
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Callable, Optional, Sequence

from .. import __util__
from ..config import ItemConfig
from .command import build_rsync_args

logger = logging.getLogger(__name__)

# Lines of rsync output quoted in a failure message
OUTPUT_TAIL_LINES = 5

# Seconds a timed out rsync gets to exit after SIGTERM
TERMINATE_GRACE_SECONDS = 5.0


class ItemStatus(Enum):
    """Lifecycle state of a backup item."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SOURCE_MISSING = "source missing"
    DESTINATION_UNAVAILABLE = "destination unavailable"
    UNSAFE_PATH = "unsafe path"
    TIMEOUT = "timeout"
    EXECUTION_FAILED = "execution failed"

    @property
    def is_terminal(self) -> bool:
        return self not in (ItemStatus.PENDING, ItemStatus.RUNNING)


@dataclass(frozen=True)
class ItemResult:
    """Outcome of one backup item."""

    label: str
    source: str
    status: ItemStatus
    worker_id: int = 0
    message: str = ""
    returncode: Optional[int] = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is ItemStatus.SUCCEEDED


@dataclass
class RunSummary:
    """Aggregated outcome of a whole run."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def total(self) -> int:
        return len(self.results)

    def by_status(self) -> dict[ItemStatus, int]:
        """Count results per terminal status."""
        return dict(Counter(r.status for r in self.results))

    def failures(self) -> list[ItemResult]:
        return [r for r in self.results if not r.ok]


def prepare_item(item: ItemConfig, backup_root: Path) -> tuple[Path, Path]:
    """Resolve the source and create the destination directory of an item.

    Args:
        item: Item to prepare
        backup_root: Resolved backup root

    Returns:
        Tuple of (resolved source, resolved destination)

    Raises:
        UnsafePathError: if a path is the filesystem root or the destination
            leaves the backup root
        SourceMissingError: if the source is not an existing directory
        DestinationUnavailableError: if the destination cannot be created
    """
    source = __util__.safe_path(item.path)

    try:
        is_dir = source.is_dir()
    except OSError as e:
        raise __util__.SourceMissingError(f"Cannot access source {source}: {e}") from e
    if not is_dir:
        if source.exists():
            raise __util__.SourceMissingError(f"Source is not a directory: {source}")
        raise __util__.SourceMissingError(f"Source does not exist: {source}")

    destination = __util__.safe_path(backup_root / item.dest_name(source))
    if not __util__.is_within(destination, backup_root):
        raise __util__.UnsafePathError(
            f"Destination {destination} is not below the backup root {backup_root}"
        )

    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise __util__.DestinationUnavailableError(
            f"Cannot create destination {destination}: {e}"
        ) from e

    return source, destination


def _signal_group(proc: subprocess.Popen, sig: int) -> None:
    """Send ``sig`` to rsync together with the helper processes it forked."""
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass
    except PermissionError:
        proc.send_signal(sig)


def _terminate_process_group(proc: subprocess.Popen) -> None:
    """Stop a timed out process group and reap its leader.

    SIGTERM comes first so rsync can remove its partial transfer files.
    Whatever is still running after the grace period gets SIGKILL.
    """
    _signal_group(proc, signal.SIGTERM)
    try:
        proc.wait(timeout=TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        logger.debug("Process %d ignored SIGTERM, killing it", proc.pid)
    _signal_group(proc, signal.SIGKILL)
    proc.wait()


def _read_output(
    stream: IO[str],
    tail: deque,
    on_line: Optional[Callable[[str], None]],
) -> None:
    for line in stream:
        line = line.rstrip("\n")
        if on_line is not None:
            on_line(line)
        if line.strip():
            tail.append(line)


def run_command(
    argv: Sequence[str],
    timeout: Optional[float] = None,
    on_line: Optional[Callable[[str], None]] = None,
) -> tuple[int, list[str]]:
    """Run ``argv`` and return its exit code and the tail of its output.

    stdout and stderr are read line by line while the process runs. Each
    line goes to ``on_line``; only the last ``OUTPUT_TAIL_LINES`` non-blank
    lines are kept.

    Raises:
        subprocess.TimeoutExpired: if the deadline passed; the process
            group has been stopped and reaped by then
        OSError: if the executable cannot be started
    """
    with subprocess.Popen(
        list(argv),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        start_new_session=True,
    ) as proc:
        tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
        reader = threading.Thread(
            target=_read_output,
            args=(proc.stdout, tail, on_line),
            name=f"output-{proc.pid}",
            daemon=True,
        )
        reader.start()
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            _terminate_process_group(proc)
            raise
        finally:
            reader.join()
        return proc.returncode, list(tail)


def execute_item(
    item: ItemConfig,
    backup_root: Path,
    options: Sequence[str] = (),
    excludes: Sequence[str] = (),
    *,
    dry_run: bool = False,
    verbose: bool = False,
    timeout: Optional[float] = None,
    worker_id: int = 0,
    rsync: str = "rsync",
) -> ItemResult:
    """Back up a single item with rsync.

    Args:
        item: Item to back up
        backup_root: Resolved backup root
        options: Global rsync options
        excludes: Normalized exclude patterns
        dry_run: Pass ``--dry-run`` to rsync
        verbose: Pass ``-v`` to rsync and log its output
        timeout: Deadline in seconds (None or <= 0 for no deadline, capped
            at MAX_DURATION)
        worker_id: Worker running this item, for reporting
        rsync: rsync executable

    Returns:
        ItemResult describing the outcome; never raises for item failures
    """
    label = item.label
    started = time.monotonic()
    if timeout is not None:
        timeout = min(timeout, __util__.MAX_DURATION) if timeout > 0 else None

    def finish(status: ItemStatus, message: str = "", returncode=None) -> ItemResult:
        return ItemResult(
            label=label,
            source=item.path,
            status=status,
            worker_id=worker_id,
            message=message,
            returncode=returncode,
            duration_seconds=time.monotonic() - started,
        )

    try:
        source, _ = prepare_item(item, backup_root)
    except __util__.UnsafePathError as e:
        return finish(ItemStatus.UNSAFE_PATH, str(e))
    except __util__.SourceMissingError as e:
        return finish(ItemStatus.SOURCE_MISSING, str(e))
    except __util__.DestinationUnavailableError as e:
        return finish(ItemStatus.DESTINATION_UNAVAILABLE, str(e))

    args = build_rsync_args(
        source,
        backup_root,
        item.dest_name(source),
        options,
        excludes,
        dry_run=dry_run,
        verbose=verbose,
    )
    argv = [rsync, *args]
    if verbose or dry_run:
        logger.info("[%s] %s", label, __util__.format_command(argv))

    def log_line(line: str) -> None:
        logger.info("[%s] %s", label, line)

    try:
        returncode, tail = run_command(
            argv, timeout=timeout, on_line=log_line if verbose else None
        )
    except subprocess.TimeoutExpired:
        return finish(ItemStatus.TIMEOUT, f"rsync did not finish within {timeout:g}s")
    except OSError as e:
        return finish(ItemStatus.EXECUTION_FAILED, f"Cannot run {rsync}: {e}")

    if returncode != 0:
        message = f"rsync exited with code {returncode}"
        if tail:
            message += ": " + " | ".join(tail)
        return finish(ItemStatus.EXECUTION_FAILED, message, returncode)

    return finish(ItemStatus.SUCCEEDED, "dry run" if dry_run else "", returncode)
