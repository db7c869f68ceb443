"""Configuration system for syncvault.

This module provides TOML-based configuration loading, validation,
and schema definitions for the backup run.
"""

from .loader import ConfigError, find_config_file, load_config
from .schema import (
    Config,
    ItemConfig,
    default_jobs,
    effective_jobs,
    normalize_excludes,
)

__all__ = [
    "Config",
    "ItemConfig",
    "default_jobs",
    "effective_jobs",
    "normalize_excludes",
    "load_config",
    "find_config_file",
    "ConfigError",
]
