# pyright: standard

"""syncvault: syncvault/__util__.py
Common utility code shared between modules.
"""

import os
import re
import shlex
from pathlib import Path
from typing import Iterable

DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
# Longest accepted deadline, below the ~24.8 day limit of millisecond poll timeouts
MAX_DURATION = 24 * 86400
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$", re.IGNORECASE)


class AbortError(Exception):
    """Exception where run cannot continue."""


class UnsafePathError(AbortError):
    """A path resolved to something rsync must never operate on."""


class SourceMissingError(Exception):
    """The source directory of an item does not exist."""


class DestinationUnavailableError(Exception):
    """The destination directory of an item could not be created."""


def log_heading(caption: str) -> str:
    """Formatted heading for logging output sections."""
    return f"--[ {caption} ]--"


def safe_path(path: str | os.PathLike) -> Path:
    """Resolve ``path`` to an absolute path that is safe to mirror into.

    Relative paths are resolved against the working directory and ``~`` is
    expanded. The filesystem root is rejected: rsync runs with ``--delete``
    and must never be pointed at it.

    Raises:
        UnsafePathError: if the path cannot be resolved or resolves to root
    """
    try:
        resolved = Path(os.path.expanduser(os.fspath(path))).resolve()
    except (OSError, RuntimeError) as e:
        raise UnsafePathError(f"Cannot resolve path {str(path)!r}: {e}") from e

    if resolved == Path(resolved.anchor):
        raise UnsafePathError(
            f"Path {str(path)!r} resolves to the filesystem root ({resolved})"
        )
    return resolved


def is_within(path: Path, parent: Path) -> bool:
    """Return True if ``path`` lies strictly below ``parent``."""
    return path != parent and path.is_relative_to(parent)


def format_command(argv: Iterable[str]) -> str:
    """Render ``argv`` as a shell-quoted string, for display only."""
    return " ".join(shlex.quote(str(arg)) for arg in argv)


def parse_duration(value: str | int | float) -> float:
    """Parse a duration such as ``90``, ``30s``, ``15m``, ``2h`` or ``1d``.

    Returns:
        Number of seconds

    Raises:
        ValueError: if the value is not a valid duration or is longer than
            MAX_DURATION
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(value)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        seconds = float(number) * DURATION_UNITS[(unit or "s").lower()]

    if seconds < 0:
        raise ValueError(f"Duration must not be negative: {value!r}")
    if seconds > MAX_DURATION:
        raise ValueError(
            f"Duration {value!r} exceeds the maximum of {MAX_DURATION // 86400} days"
        )
    return seconds
