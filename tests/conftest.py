"""Pytest configuration and shared fixtures."""

import stat

import pytest

FAKE_RSYNC = """#!/bin/sh
# Records its arguments and behaves according to marker files next to the
# source directory: <source>/.fail exits 23, <source>/.sleep hangs.
src=""
prev=""
for arg in "$@"; do
    src="$prev"
    prev="$arg"
done
echo "$*" >> "{log}"
if [ -e "${{src}}.fail" ]; then
    echo "rsync: simulated failure" >&2
    exit 23
fi
if [ -e "${{src}}.sleep" ]; then
    sleep 30
fi
echo "sent 42 bytes"
exit 0
"""


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
backup_root = "/mnt/backup"
jobs = 2

[rsync]
options = ["--numeric-ids", "--human-readable"]
excludes = ["*.tmp", "  .cache/ ", "", "*.tmp"]

[[items]]
name = "home"
path = "/home/alice"
dest = "alice-home"

[[items]]
path = "/etc"
"""


@pytest.fixture
def minimal_config_toml():
    """Return a minimal valid TOML configuration string."""
    return """
backup_root = "/mnt/backup"

[[items]]
path = "/home"
"""


@pytest.fixture
def config_file(tmp_config_dir, sample_config_toml):
    """Create a temporary config file with sample content."""
    config_path = tmp_config_dir / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def minimal_config_file(tmp_config_dir, minimal_config_toml):
    """Create a temporary config file with minimal content."""
    config_path = tmp_config_dir / "minimal.toml"
    config_path.write_text(minimal_config_toml)
    return config_path


@pytest.fixture
def rsync_log(tmp_path):
    """File the fake rsync appends its arguments to."""
    return tmp_path / "rsync.log"


@pytest.fixture
def fake_rsync(tmp_path, rsync_log):
    """Create an executable stand-in for rsync and return its path."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "rsync"
    script.write_text(FAKE_RSYNC.format(log=rsync_log))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def backup_tree(tmp_path):
    """Create source directories and an empty backup root.

    Returns:
        Tuple of (sources dir, backup root)
    """
    sources = tmp_path / "sources"
    for name in ("docs", "music", "photos"):
        (sources / name).mkdir(parents=True)
        (sources / name / "file.txt").write_text(name)
    backup_root = tmp_path / "backup"
    return sources, backup_root


@pytest.fixture
def run_config_file(tmp_config_dir, backup_tree):
    """Create a config file pointing at the backup_tree directories."""
    sources, backup_root = backup_tree
    config_path = tmp_config_dir / "run.toml"
    config_path.write_text(f"""
backup_root = "{backup_root}"
jobs = 2

[rsync]
options = ["--numeric-ids"]
excludes = ["*.tmp"]

[[items]]
name = "documents"
path = "{sources / 'docs'}"

[[items]]
path = "{sources / 'music'}"

[[items]]
path = "{sources / 'photos'}"
dest = "pictures"
""")
    return config_path
