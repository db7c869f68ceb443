"""rsync command line construction.

Turns one item plus the global options into the argument list for a
single rsync invocation. Nothing here touches the filesystem.
"""

import os
from pathlib import Path
from typing import Sequence

# Mirror the source: archive mode, remove files gone from the source
MIRROR_FLAGS = ("-a", "--delete")
VERBOSE_FLAG = "-v"
EXCLUDE_FLAG = "--exclude"
DRY_RUN_FLAG = "--dry-run"


def with_trailing_sep(path: str | os.PathLike) -> str:
    """Return ``path`` ending in exactly one separator.

    rsync copies the *contents* of a source given with a trailing slash
    instead of creating a subdirectory for it.
    """
    text = os.fspath(path)
    stripped = text.rstrip(os.sep)
    if not stripped:
        return os.sep
    return stripped + os.sep


def build_rsync_args(
    source: Path,
    backup_root: Path,
    dest_name: str,
    options: Sequence[str] = (),
    excludes: Sequence[str] = (),
    dry_run: bool = False,
    verbose: bool = False,
) -> list[str]:
    """Build the rsync arguments for one item.

    Args:
        source: Resolved source directory
        backup_root: Resolved backup root
        dest_name: Directory name of the item below ``backup_root``
        options: Global rsync options, kept in order
        excludes: Normalized exclude patterns
        dry_run: Ask rsync to only report what it would do
        verbose: Add ``-v``

    Returns:
        Argument list without the rsync executable itself
    """
    args = list(MIRROR_FLAGS)
    if verbose:
        args.append(VERBOSE_FLAG)
    args.extend(options)
    for pattern in excludes:
        args.extend([EXCLUDE_FLAG, pattern])
    if dry_run:
        args.append(DRY_RUN_FLAG)
    args.append(with_trailing_sep(source))
    args.append(with_trailing_sep(Path(backup_root) / dest_name))
    return args
