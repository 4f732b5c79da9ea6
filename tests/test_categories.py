"""Tests for file_saver.categories."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from file_saver.categories import (
    DEFAULT_CATEGORIES,
    FALLBACK_STORAGE_PATH,
    Category,
    CategoryRegistry,
    ConfigError,
    load_categories,
)


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(content)
    return path


# ---------------------------------------------------------------------------
# load_categories
# ---------------------------------------------------------------------------


class TestLoadCategories:
    def test_loads_entries_in_order(self, tmp_path: Path):
        path = _write_config(
            tmp_path,
            "categories:\n"
            "  - name: work\n"
            "    path: ./files/work\n"
            "  - name: memes\n"
            "    path: /srv/memes\n",
        )
        cats = load_categories(path)
        assert list(cats) == ["work", "memes"]
        assert cats["memes"] == Category("memes", Path("/srv/memes"))

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_categories(tmp_path / "nope.yml")

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = _write_config(tmp_path, "categories: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_categories(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = _write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_categories(path)

    def test_missing_categories_key_raises(self, tmp_path: Path):
        path = _write_config(tmp_path, "other_setting: 1\n")
        with pytest.raises(ConfigError, match="no 'categories' list"):
            load_categories(path)

    def test_skips_malformed_entries(self, tmp_path: Path, caplog):
        path = _write_config(
            tmp_path,
            "categories:\n"
            "  - name: ok\n"
            "    path: ./ok\n"
            "  - name: nopath\n"
            "  - just-a-string\n",
        )
        with caplog.at_level(logging.WARNING):
            cats = load_categories(path)
        assert list(cats) == ["ok"]
        assert "missing name or path" in caplog.text
        assert "non-dict" in caplog.text

    def test_no_valid_entries_raises(self, tmp_path: Path):
        path = _write_config(tmp_path, "categories:\n  - name: x\n")
        with pytest.raises(ConfigError, match="no valid categories"):
            load_categories(path)

    def test_duplicate_last_entry_wins(self, tmp_path: Path, caplog):
        path = _write_config(
            tmp_path,
            "categories:\n"
            "  - name: a\n"
            "    path: ./first\n"
            "  - name: b\n"
            "    path: ./bee\n"
            "  - name: a\n"
            "    path: ./second\n",
        )
        with caplog.at_level("WARNING", logger="file_saver.categories"):
            cats = load_categories(path)
        assert cats["a"].storage_path == Path("./second")
        assert list(cats) == ["a", "b"]
        assert "Duplicate category 'a'" in caplog.text


# ---------------------------------------------------------------------------
# CategoryRegistry
# ---------------------------------------------------------------------------


class TestCategoryRegistry:
    def test_defaults_has_five_categories(self):
        reg = CategoryRegistry.defaults()
        assert reg.names() == ["document", "image", "video", "audio", "other"]
        assert reg.resolve_path("image") == Path("./files/images")
        assert reg.resolve_path("other") == Path("./files/misc")

    def test_from_config_falls_back_on_error(self, tmp_path: Path, caplog):
        with caplog.at_level(logging.WARNING):
            reg = CategoryRegistry.from_config(tmp_path / "missing.yml")
        assert len(reg) == len(DEFAULT_CATEGORIES)
        assert "Using default categories" in caplog.text

    def test_from_config_uses_file(self, tmp_path: Path):
        path = _write_config(
            tmp_path, "categories:\n  - name: books\n    path: ./books\n"
        )
        reg = CategoryRegistry.from_config(path)
        assert reg.names() == ["books"]
        assert "document" not in reg

    def test_resolve_path_unknown(self):
        assert CategoryRegistry.defaults().resolve_path("nope") is None

    def test_storage_path_for_unknown_uses_other(self):
        reg = CategoryRegistry({"other": Category("other", Path("/x/other"))})
        assert reg.storage_path_for("ghost") == Path("/x/other")

    def test_storage_path_for_without_other_uses_hardcoded(self):
        reg = CategoryRegistry({"a": Category("a", Path("/a"))})
        assert reg.storage_path_for("ghost") == FALLBACK_STORAGE_PATH

    def test_registry_is_read_only_copy(self):
        source = {"a": Category("a", Path("/a"))}
        reg = CategoryRegistry(source)
        source["b"] = Category("b", Path("/b"))
        assert "b" not in reg

    def test_ensure_directories_creates_all(self, tmp_path: Path):
        reg = CategoryRegistry(
            {
                "a": Category("a", tmp_path / "files" / "a"),
                "b": Category("b", tmp_path / "files" / "b"),
            }
        )
        reg.ensure_directories()
        reg.ensure_directories()  # idempotent
        assert (tmp_path / "files" / "a").is_dir()
        assert (tmp_path / "files" / "b").is_dir()

    def test_ensure_directories_logs_errors(self, tmp_path: Path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a dir")
        reg = CategoryRegistry(
            {
                "bad": Category("bad", blocker / "sub"),
                "good": Category("good", tmp_path / "good"),
            }
        )
        with caplog.at_level(logging.ERROR):
            reg.ensure_directories()
        assert "Error creating directory" in caplog.text
        assert (tmp_path / "good").is_dir()

    def test_ensure_directories_never_raises(self):
        reg = CategoryRegistry({"a": Category("a", Path("/a"))})
        with patch.object(Path, "mkdir", side_effect=PermissionError("denied")):
            reg.ensure_directories()
