"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional


def normalize_excludes(patterns: Iterable[str]) -> list[str]:
    """Trim exclude patterns and drop empty or repeated entries.

    The first occurrence of each pattern keeps its position.
    """
    normalized: dict[str, None] = {}
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern:
            normalized.setdefault(pattern, None)
    return list(normalized)


def default_jobs(cpu_count: Optional[int] = None) -> int:
    """Half of the available CPUs, at least one."""
    if cpu_count is None:
        cpu_count = os.cpu_count() or 1
    return max(1, cpu_count // 2)


def effective_jobs(jobs: Optional[int], cpu_count: Optional[int] = None) -> int:
    """Return ``jobs`` if positive, otherwise the default worker count."""
    if jobs is None or jobs <= 0:
        return default_jobs(cpu_count)
    return jobs


@dataclass(frozen=True)
class ItemConfig:
    """A single source directory to back up.

    Attributes:
        path: Source directory
        name: Display label (defaults to the base name of the source)
        dest: Directory name below the backup root (defaults to the
            base name of the resolved source)
    """

    path: str
    name: Optional[str] = None
    dest: Optional[str] = None

    @property
    def label(self) -> str:
        """Name used in log lines for this item."""
        return self.name or Path(self.path).name or self.path

    def dest_name(self, resolved_source: Path) -> str:
        """Destination directory name for the already resolved source."""
        return self.dest or resolved_source.name


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        backup_root: Directory under which every item gets its destination
        rsync_options: Extra rsync flags, passed through in order
        excludes: rsync exclude patterns
        jobs: Number of concurrent workers (<= 0 picks a default)
        items: Items to back up

    Raises:
        ValueError: if backup_root is empty or there are no items
    """

    backup_root: str
    items: list[ItemConfig] = field(default_factory=list)
    rsync_options: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    jobs: int = 0

    def __post_init__(self):
        if not self.backup_root or not self.backup_root.strip():
            raise ValueError("backup_root must not be empty")
        if not self.items:
            raise ValueError("at least one item must be configured")
        self.excludes = normalize_excludes(self.excludes)
        self.jobs = effective_jobs(self.jobs)

    def get_items(self, labels: Optional[Iterable[str]] = None) -> list[ItemConfig]:
        """Get the items to back up, optionally restricted to some labels."""
        if not labels:
            return list(self.items)
        wanted = set(labels)
        return [item for item in self.items if item.label in wanted]
