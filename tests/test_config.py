"""Tests for YAML config loading."""

from pathlib import Path

import pytest
import yaml

from ccexp import config
from ccexp.menu import MessageDurations


@pytest.fixture
def config_path():
    path = config.get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class TestLoadConfig:
    def test_defaults_when_missing(self):
        cfg = config.load_config()
        assert cfg == config.DEFAULT_CONFIG
        assert cfg is not config.DEFAULT_CONFIG

    def test_path_follows_xdg(self, tmp_path):
        assert config.get_config_path() == tmp_path / "xdg" / "ccexp" / "config.yaml"

    def test_merges_over_defaults(self, config_path):
        config_path.write_text(yaml.dump({"include_hidden": True, "extra_exclusions": ["docs"]}))
        cfg = config.load_config()
        assert cfg["include_hidden"] is True
        assert cfg["extra_exclusions"] == ["docs"]
        assert cfg["max_depth"] == 20

    def test_corrupt_yaml_gives_defaults(self, config_path):
        config_path.write_text(":::invalid yaml: [")
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_non_mapping_gives_defaults(self, config_path):
        config_path.write_text("- just\n- a list\n")
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "other.yaml"
        path.write_text("theme: ascii\n")
        assert config.load_config(path)["theme"] == "ascii"


class TestEnvironment:
    def test_theme_override(self, monkeypatch, config_path):
        config_path.write_text("theme: unicode\n")
        monkeypatch.setenv("CCEXP_THEME", "ASCII")
        assert config.load_config()["theme"] == "ascii"

    def test_invalid_theme_ignored(self, monkeypatch):
        monkeypatch.setenv("CCEXP_THEME", "neon")
        assert config.load_config()["theme"] == "auto"

    @pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("0", False)])
    def test_debug_override(self, monkeypatch, value, expected):
        monkeypatch.setenv("CCEXP_DEBUG", value)
        assert config.load_config()["debug"] is expected


class TestDerivedValues:
    def test_message_durations(self):
        cfg = dict(config.DEFAULT_CONFIG, success_message_seconds=1.5)
        assert config.message_durations(cfg) == MessageDurations(success=1.5, error=3.0)

    def test_invalid_durations_fall_back(self):
        cfg = dict(config.DEFAULT_CONFIG, success_message_seconds="soon", error_message_seconds=-1)
        assert config.message_durations(cfg) == MessageDurations()

    def test_scan_options_from_config(self, tmp_path):
        cfg = dict(config.DEFAULT_CONFIG, recursive=False, max_depth=4, extra_exclusions=["docs"])
        options = config.scan_options(cfg, tmp_path)

        assert options.path == tmp_path
        assert options.recursive is False
        assert options.include_hidden is False
        assert options.max_depth == 4
        assert options.extra_exclusions == ("docs",)

    def test_flags_override_config(self, tmp_path):
        cfg = dict(config.DEFAULT_CONFIG, recursive=False, include_hidden=False)
        options = config.scan_options(cfg, tmp_path, recursive=True, include_hidden=True)
        assert options.recursive is True
        assert options.include_hidden is True

    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert config.scan_options(config.DEFAULT_CONFIG).path == Path.cwd()

    def test_bad_exclusions_ignored(self, tmp_path):
        cfg = dict(config.DEFAULT_CONFIG, extra_exclusions="docs")
        assert config.scan_options(cfg, tmp_path).extra_exclusions == ()
