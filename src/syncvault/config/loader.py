"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import os
import tomllib
from collections import Counter
from pathlib import Path
from typing import Any

from .schema import Config, ItemConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


APP_NAME = "syncvault"
CONFIG_FILE_NAME = "config.toml"


def config_search_paths() -> list[Path]:
    """Config file search paths in priority order."""
    paths = []
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        paths.append(Path(xdg_config_home) / APP_NAME / CONFIG_FILE_NAME)
    paths.append(Path.home() / ".config" / APP_NAME / CONFIG_FILE_NAME)
    paths.append(Path("/etc") / APP_NAME / CONFIG_FILE_NAME)

    # XDG_CONFIG_HOME usually points at ~/.config
    return list(dict.fromkeys(paths))


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in config_search_paths():
        if path.exists():
            return path

    return None


def _string_list(data: dict[str, Any], key: str, section: str) -> list[str]:
    """Fetch an optional list of strings, rejecting anything else."""
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{section}.{key}' must be a list of strings")
    return value


def _parse_item(data: Any, index: int) -> ItemConfig:
    """Parse item configuration from dict."""
    if not isinstance(data, dict):
        raise ConfigError(f"Item #{index + 1} must be a table")
    if not data.get("path"):
        raise ConfigError(f"Item #{index + 1} missing required 'path' field")

    for key in ("path", "name", "dest"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"Item #{index + 1}: '{key}' must be a string")

    return ItemConfig(
        path=data["path"],
        name=data.get("name") or None,
        dest=data.get("dest") or None,
    )


def _parse_config(data: dict[str, Any]) -> Config:
    """Build a Config from the decoded TOML document."""
    backup_root = data.get("backup_root")
    if backup_root is None:
        raise ConfigError("Missing required 'backup_root' setting")
    if not isinstance(backup_root, str):
        raise ConfigError("'backup_root' must be a string")
    if not backup_root.strip():
        raise ConfigError("'backup_root' must not be empty")

    rsync = data.get("rsync", {})
    if not isinstance(rsync, dict):
        raise ConfigError("'rsync' must be a table")

    jobs = data.get("jobs", 0)
    if isinstance(jobs, bool) or not isinstance(jobs, int):
        raise ConfigError("'jobs' must be an integer")

    raw_items = data.get("items", [])
    if not isinstance(raw_items, list):
        raise ConfigError("'items' must be an array of tables")
    if not raw_items:
        raise ConfigError("No items configured")

    return Config(
        backup_root=backup_root,
        items=[_parse_item(item, i) for i, item in enumerate(raw_items)],
        rsync_options=_string_list(rsync, "options", "rsync"),
        excludes=_string_list(rsync, "excludes", "rsync"),
        jobs=jobs,
    )


def _validate_config(config: Config, data: dict[str, Any]) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    for path, count in Counter(item.path for item in config.items).items():
        if count > 1:
            warnings.append(f"Source '{path}' is listed {count} times")

    # Sources are not resolved yet, so this compares configured base names
    dest_names = Counter(
        item.dest or Path(item.path).name for item in config.items
    )
    for name, count in dest_names.items():
        if count > 1:
            warnings.append(
                f"{count} items share the destination '{name}' and will "
                "overwrite each other"
            )

    if data.get("jobs", 0) > len(config.items):
        warnings.append(
            f"jobs ({config.jobs}) exceeds the number of items "
            f"({len(config.items)}), extra workers will stay idle"
        )

    if "--delete" in config.rsync_options:
        warnings.append("'--delete' in rsync.options is redundant, it is always set")

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    config = _parse_config(data)

    # Validate and collect warnings
    warnings = _validate_config(config, data)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# syncvault configuration
# Every item is mirrored with rsync into <backup_root>/<dest>

backup_root = "/mnt/backup"

# Number of concurrent rsync processes
# (0 or unset = half of the available CPUs, at least 1)
jobs = 2

[rsync]
# Extra flags passed to every rsync call, in this order.
# "-a --delete" is always set.
options = ["--numeric-ids", "--human-readable"]
excludes = ["*.tmp", ".cache/"]

# Home directory backup
[[items]]
name = "home"
path = "/home/alice"
dest = "alice-home"

# dest defaults to the last component of path ("etc" here)
[[items]]
path = "/etc"
"""
