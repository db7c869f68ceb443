"""Tests for configuration schema and normalization."""

from pathlib import Path

import pytest

from syncvault.config.schema import (
    Config,
    ItemConfig,
    default_jobs,
    effective_jobs,
    normalize_excludes,
)


class TestNormalizeExcludes:
    """Tests for normalize_excludes function."""

    def test_trims_whitespace(self):
        assert normalize_excludes(["  *.tmp ", "\t.cache/\n"]) == ["*.tmp", ".cache/"]

    def test_drops_empty_entries(self):
        assert normalize_excludes(["", "   ", "*.o"]) == ["*.o"]

    def test_drops_duplicates_keeping_first(self):
        result = normalize_excludes(["b", "a", "b", " a", "c"])
        assert result == ["b", "a", "c"]

    def test_empty_input(self):
        assert normalize_excludes([]) == []

    @pytest.mark.parametrize(
        "patterns",
        [
            [],
            ["a"],
            [" a ", "a", "", "b", "  ", "b "],
            ["node_modules/", "*.pyc", "*.pyc", " .git/"],
        ],
    )
    def test_idempotent(self, patterns):
        once = normalize_excludes(patterns)
        assert normalize_excludes(once) == once
        assert "" not in once
        assert len(once) == len(set(once))

    def test_accepts_any_iterable(self):
        assert normalize_excludes(p for p in ["x", "x"]) == ["x"]


class TestJobs:
    """Tests for worker count defaulting."""

    def test_default_is_half_of_cpus(self):
        assert default_jobs(8) == 4

    def test_default_is_at_least_one(self):
        assert default_jobs(1) == 1

    def test_zero_uses_default(self):
        assert effective_jobs(0, cpu_count=8) == 4

    def test_negative_uses_default(self):
        assert effective_jobs(-5, cpu_count=8) == 4
        assert effective_jobs(-5, cpu_count=1) == 1

    def test_none_uses_default(self):
        assert effective_jobs(None, cpu_count=6) == 3

    def test_positive_is_kept(self):
        assert effective_jobs(7, cpu_count=2) == 7

    def test_unknown_cpu_count(self, monkeypatch):
        monkeypatch.setattr("os.cpu_count", lambda: None)
        assert default_jobs() == 1


class TestItemConfig:
    """Tests for ItemConfig dataclass."""

    def test_label_uses_name(self):
        assert ItemConfig(path="/home/alice", name="home").label == "home"

    def test_label_defaults_to_base_name(self):
        assert ItemConfig(path="/home/alice").label == "alice"

    def test_label_ignores_trailing_slash(self):
        assert ItemConfig(path="/home/alice/").label == "alice"

    def test_dest_name_uses_dest(self):
        item = ItemConfig(path="/home/alice", dest="alice-home")
        assert item.dest_name(Path("/home/alice")) == "alice-home"

    def test_dest_name_uses_resolved_source(self):
        """A relative source like '.' takes the name of what it points to."""
        item = ItemConfig(path=".")
        assert item.dest_name(Path("/srv/data")) == "data"

    def test_is_frozen(self):
        item = ItemConfig(path="/a")
        with pytest.raises(AttributeError):
            item.path = "/b"


class TestConfig:
    """Tests for Config dataclass."""

    def test_excludes_are_normalized(self):
        config = Config(
            backup_root="/b", items=[ItemConfig(path="/a")], excludes=[" a", "a", ""], jobs=1
        )
        assert config.excludes == ["a"]

    def test_jobs_are_defaulted(self, monkeypatch):
        monkeypatch.setattr("os.cpu_count", lambda: 8)
        config = Config(backup_root="/b", items=[ItemConfig(path="/a")], jobs=0)
        assert config.jobs == 4

    def test_get_items_all(self):
        items = [ItemConfig(path="/a"), ItemConfig(path="/b")]
        config = Config(backup_root="/backup", items=items, jobs=1)
        assert config.get_items() == items

    def test_get_items_by_label(self):
        items = [
            ItemConfig(path="/a", name="first"),
            ItemConfig(path="/srv/b"),
            ItemConfig(path="/c"),
        ]
        config = Config(backup_root="/backup", items=items, jobs=1)
        assert config.get_items(["first", "b"]) == items[:2]

    def test_get_items_no_match(self):
        config = Config(backup_root="/backup", items=[ItemConfig(path="/a")], jobs=1)
        assert config.get_items(["nope"]) == []

    @pytest.mark.parametrize("backup_root", ["", "   "])
    def test_empty_backup_root(self, backup_root):
        with pytest.raises(ValueError, match="backup_root"):
            Config(backup_root=backup_root, items=[ItemConfig(path="/a")])

    def test_no_items(self):
        with pytest.raises(ValueError, match="item"):
            Config(backup_root="/backup")
