"""
Configuration management for oncalldash.

This module provides optional YAML configuration on top of built-in
defaults. The defaults describe the on-call setup completely, so a normal run
reads no file at all; an override file is only loaded when one is passed
explicitly (--config or ONCALLDASH_CONFIG).

Features:
- Refresh cadence (tick, issue refresh, splash delay, log fetch timeout)
- kubectl and sentry-cli binaries, Sentry org and projects
- Health endpoints (and which ones expose groups)
- Log level and log file override

Architecture:
- ConfigManager: loads the optional file and merges it over defaults
- AppConfig and its sections are frozen dataclasses; the merged value is
  built once at startup and passed by reference, never mutated
"""

import logging
import os
from dataclasses import dataclass, field, fields, is_dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ONCALLDASH_CONFIG"


@dataclass(frozen=True)
class RefreshConfig:
    """Timer intervals, in seconds."""
    tick_interval: float = 15.0
    issue_refresh_interval: float = 60.0
    splash_delay: float = 1.2
    log_timeout: float = 10.0
    log_tail: int = 500


@dataclass(frozen=True)
class KubectlConfig:
    binary: str = "kubectl"


@dataclass(frozen=True)
class SentryProject:
    name: str
    slug: str


@dataclass(frozen=True)
class SentryConfig:
    binary: str = "sentry-cli"
    org: str = "siip"
    query: str = "age:-24h is:unresolved"
    projects: Tuple[SentryProject, ...] = (
        SentryProject(name="Ticketing", slug="siip-ticketing"),
        SentryProject(name="IAM", slug="siip-iam-service"),
    )


@dataclass(frozen=True)
class HealthEndpoint:
    name: str
    url: str
    groups: bool = False


@dataclass(frozen=True)
class HealthConfig:
    timeout: float = 10.0
    endpoints: Tuple[HealthEndpoint, ...] = (
        HealthEndpoint(name="Ticketing API", url="https://ticketing.siip.io/health"),
        HealthEndpoint(name="IAM API", url="https://iam.siip.io/health", groups=True),
    )


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    kubectl: KubectlConfig = field(default_factory=KubectlConfig)
    sentry: SentryConfig = field(default_factory=SentryConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def _check_value(value: Any, expected: type, path: str) -> Any:
    """Check a scalar override against the type of the value it replaces."""
    if isinstance(value, bool) and expected is not bool:
        raise ConfigError(f"Config key '{path}' must be {expected.__name__}, got bool")
    if expected is float and isinstance(value, int):
        value = float(value)
    if not isinstance(value, expected):
        raise ConfigError(
            f"Config key '{path}' must be {expected.__name__}, got {type(value).__name__}"
        )
    # numeric settings are all intervals, timeouts or line counts
    if expected in (int, float) and value <= 0:
        raise ConfigError(f"Config key '{path}' must be positive")
    return value


class ConfigManager:
    """Configuration manager with optional YAML file support."""

    def __init__(self, config_file: Optional[str] = None):
        if config_file is None:
            config_file = os.environ.get(CONFIG_ENV_VAR) or None
        self.config_file = Path(config_file).expanduser() if config_file else None
        self._config: AppConfig = AppConfig()
        self.load_config()

    def load_config(self) -> None:
        """Load configuration from the YAML file, if one was given."""
        if self.config_file is None:
            logger.debug("No configuration file given, using defaults")
            return
        try:
            with open(self.config_file, 'r') as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {self.config_file}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigError(f"Config {self.config_file} must be a mapping")

        self._config = self._merge_configs(AppConfig(), user_config)
        level = self._config.logging.level
        if not isinstance(logging.getLevelName(level.upper()), int):
            raise ConfigError(f"Unknown log level '{level}' in {self.config_file}")
        logger.debug(f"Loaded configuration from {self.config_file}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        updates = {}
        for section in fields(AppConfig):
            if section.name in user:
                updates[section.name] = self._merge_dataclass(
                    getattr(default, section.name), user[section.name], section.name
                )
        unknown = set(user) - {f.name for f in fields(AppConfig)}
        if unknown:
            logger.warning(f"Ignoring unknown config sections: {sorted(unknown)}")
        return replace(default, **updates)

    def _merge_dataclass(self, obj: Any, updates: Any, section: str) -> Any:
        """Return a copy of a frozen dataclass with updates applied."""
        if not isinstance(updates, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        changes = {}
        for key, value in updates.items():
            if not hasattr(obj, key):
                logger.warning(f"Ignoring unknown config key {section}.{key}")
                continue
            if key in ("projects", "endpoints") and not isinstance(value, list):
                raise ConfigError(f"Config key '{section}.{key}' must be a list")
            if key == "projects":
                value = tuple(self._build(SentryProject, item, f"{section}.{key}") for item in value)
            elif key == "endpoints":
                value = tuple(self._build(HealthEndpoint, item, f"{section}.{key}") for item in value)
            elif is_dataclass(getattr(obj, key)):
                value = self._merge_dataclass(getattr(obj, key), value, f"{section}.{key}")
            else:
                default = getattr(obj, key)
                if default is not None or value is not None:
                    expected = str if default is None else type(default)
                    value = _check_value(value, expected, f"{section}.{key}")
            changes[key] = value
        return replace(obj, **changes)

    def _build(self, cls: type, item: Any, section: str) -> Any:
        if not isinstance(item, dict):
            raise ConfigError(f"Entries of '{section}' must be mappings")
        types = {f.name: f.type for f in fields(cls)}
        item = {
            key: _check_value(value, types[key], f"{section}.{key}") if key in types else value
            for key, value in item.items()
        }
        try:
            return cls(**item)
        except TypeError as e:
            raise ConfigError(f"Invalid entry in '{section}': {e}") from e

    def get_log_level(self) -> str:
        """Get configured log level."""
        return self._config.logging.level.upper()

    def get_custom_log_path(self) -> Optional[str]:
        """Get custom log file path if configured."""
        return self._config.logging.file_path
