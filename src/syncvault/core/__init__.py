"""Core backup engine for syncvault.

Builds rsync command lines, runs single items, and dispatches them to a
pool of workers.
"""

from .command import build_rsync_args
from .dispatcher import dispatch
from .executor import ItemResult, ItemStatus, RunSummary, execute_item
from .runner import run_backup

__all__ = [
    "build_rsync_args",
    "dispatch",
    "execute_item",
    "ItemResult",
    "ItemStatus",
    "RunSummary",
    "run_backup",
]
