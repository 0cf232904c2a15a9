"""XDG directory management and configuration for logscout."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir, user_log_dir
from pydantic import ValidationError

from logscout.models import AppConfig


def get_config_dir() -> Path:
    """Get the logscout config directory.

    Respects LOGSCOUT_CONFIG_DIR environment variable if set.
    """
    if override := os.environ.get("LOGSCOUT_CONFIG_DIR"):
        return Path(override)
    return Path(user_config_dir("logscout"))


def get_log_dir() -> Path:
    """Get the directory the application log file is written to."""
    if override := os.environ.get("LOGSCOUT_LOG_DIR"):
        return Path(override)
    return Path(user_log_dir("logscout"))


def load_config() -> AppConfig:
    """Load application config from disk, returning defaults if not found."""
    path = get_config_dir() / "config.toml"
    if not path.exists():
        return AppConfig()
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text())
        return AppConfig(**data)
    except (OSError, ValueError, TypeError, ValidationError):
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Save application config to disk."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "config.toml"
    path.write_bytes(tomli_w.dumps(config.model_dump(exclude_none=True)).encode())
