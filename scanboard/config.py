"""Configuration file support for ScanBoard (.scanboard.yml)."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from scanboard.errors import ConfigError

DEFAULT_CONFIG_NAME = ".scanboard.yml"
API_BASE_ENV = "SCANBOARD_API_BASE"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("console", "json")


@dataclass
class Config:
    """ScanBoard configuration loaded from .scanboard.yml."""

    api_base: str | None = None
    timeout: float = 10.0
    log_level: str = "WARNING"
    log_format: str = "console"


def load_config(config_path: str | None = None, project_root: str | None = None) -> Config:
    """Load configuration from a YAML file, then apply environment overrides.

    Priority: explicit --config path > .scanboard.yml in project root > defaults.
    ``SCANBOARD_API_BASE`` overrides whatever ``api_base`` the file sets.
    """
    path = None

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    elif project_root:
        candidate = Path(project_root) / DEFAULT_CONFIG_NAME
        if candidate.exists():
            path = candidate

    if path is None:
        config = Config()
    else:
        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must be a YAML mapping, got {type(raw).__name__}")

        config = _parse_config(raw)

    env_base = os.environ.get(API_BASE_ENV)
    if env_base:
        config.api_base = _normalize_base(env_base)

    return config


def _normalize_base(value: str) -> str | None:
    value = value.strip().rstrip("/")
    return value or None


def _parse_config(raw: dict) -> Config:
    """Parse and validate raw YAML dict into a Config object."""
    config = Config()

    if "api_base" in raw:
        base = raw["api_base"]
        if base is not None and not isinstance(base, str):
            raise ConfigError("api_base must be a string")
        config.api_base = _normalize_base(base) if base else None

    if "timeout" in raw:
        val = raw["timeout"]
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError("timeout must be a positive number")
        config.timeout = float(val)

    if "log_level" in raw:
        level = str(raw["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}, got '{raw['log_level']}'")
        config.log_level = level

    if "log_format" in raw:
        fmt = raw["log_format"]
        if fmt not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {LOG_FORMATS}, got '{fmt}'")
        config.log_format = fmt

    return config
