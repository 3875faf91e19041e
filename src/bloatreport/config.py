"""Configuration management for bloatreport."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from bloatreport.exceptions import ConfigError

CONFIG_FILE = ".bloatreport.json"
DEFAULT_BOT_LOGIN = "github-actions[bot]"


class GitHubConfig(BaseModel):
    """Issue tracker API configuration."""

    api_url: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    bot_login: str = DEFAULT_BOT_LOGIN
    per_page: int = Field(default=100, ge=1, le=100)
    timeout: float = 15.0

    @property
    def token(self) -> str | None:
        return os.environ.get(self.token_env) or None


class ReportConfig(BaseModel):
    """Comment rendering configuration."""

    compare_host: str = "https://github.com"


class BloatReportConfig(BaseModel):
    """Full bloatreport configuration."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def get_config_path(root: Path | None = None) -> Path:
    """Get the config file location for a working directory."""
    return (root or Path.cwd()) / CONFIG_FILE


def load_config(path: Path | None = None) -> BloatReportConfig:
    """Load configuration from a JSON file, falling back to defaults."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return BloatReportConfig()
    try:
        data = json.loads(config_path.read_text())
        return BloatReportConfig(**data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e


def save_config(path: Path, config: BloatReportConfig) -> None:
    """Save configuration as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: BloatReportConfig, key: str, value: Any) -> BloatReportConfig:
    """Set a nested config value using dot notation (e.g., 'github.bot_login')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return BloatReportConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
