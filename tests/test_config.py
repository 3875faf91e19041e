"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from bloatreport.config import (
    BloatReportConfig,
    get_config_path,
    load_config,
    save_config,
    set_config_value,
)
from bloatreport.exceptions import ConfigError


class TestConfig:
    def test_default_config(self):
        config = BloatReportConfig()
        assert config.github.api_url == "https://api.github.com"
        assert config.github.bot_login == "github-actions[bot]"
        assert config.github.per_page == 100
        assert config.report.compare_host == "https://github.com"

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_config(tmp_path / "nope.json") == BloatReportConfig()

    def test_save_and_load(self, tmp_path: Path):
        config = BloatReportConfig()
        config.github.bot_login = "size-bot"
        config.report.compare_host = "https://git.example.com"

        path = get_config_path(tmp_path)
        save_config(path, config)
        loaded = load_config(path)

        assert loaded.github.bot_login == "size-bot"
        assert loaded.report.compare_host == "https://git.example.com"

    def test_invalid_file(self, tmp_path: Path):
        path = tmp_path / ".bloatreport.json"
        path.write_text("{broken")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("SIZE_TOKEN", "abc")
        config = BloatReportConfig()
        config.github.token_env = "SIZE_TOKEN"
        assert config.github.token == "abc"

    def test_token_missing(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        assert BloatReportConfig().github.token is None

    def test_set_config_value(self):
        updated = set_config_value(BloatReportConfig(), "github.bot_login", "size-bot")
        assert updated.github.bot_login == "size-bot"

    def test_set_config_invalid_key(self):
        with pytest.raises(KeyError):
            set_config_value(BloatReportConfig(), "nonexistent.key", "value")

    def test_set_config_invalid_value(self):
        with pytest.raises(ConfigError):
            set_config_value(BloatReportConfig(), "github.per_page", 500)
