"""
Configuration for the feature flag service.

This module provides a centralized configuration system that:
- Loads configuration from feature_flags.yaml
- Supports environment variable overrides
- Validates configuration values
- Provides type-safe access via dataclasses

Usage:
    from featureflags.config import load_config

    config = load_config()
    print(config.database.url)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from featureflags.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///feature_flags.db"


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class GeneralConfig:
    """General application settings."""

    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if str(self.log_level).upper() not in valid_levels:
            self.log_level = "INFO"
        else:
            self.log_level = str(self.log_level).upper()


@dataclass
class DatabaseConfig:
    """Record store connection settings."""

    url: str = DEFAULT_DATABASE_URL
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False
    create_tables: bool = True

    def __post_init__(self):
        if not self.url:
            raise ConfigurationError("database.url must not be empty")
        if self.pool_size < 1:
            raise ConfigurationError(
                "database.pool_size must be at least 1",
                details={"pool_size": self.pool_size},
            )
        if self.max_overflow < 0:
            raise ConfigurationError(
                "database.max_overflow must not be negative",
                details={"max_overflow": self.max_overflow},
            )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.url in ("sqlite://", "sqlite:///:memory:")


@dataclass
class AppConfig:
    """Top-level configuration."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "general": {
                "log_level": self.general.log_level,
                "json_logs": self.general.json_logs,
            },
            "database": {
                "url": self.database.url,
                "pool_size": self.database.pool_size,
                "max_overflow": self.database.max_overflow,
                "echo": self.database.echo,
                "create_tables": self.database.create_tables,
            },
        }


# =============================================================================
# Environment Variable Mapping
# =============================================================================

# Format: ENV_VAR -> (section, key, type)
ENV_VAR_MAPPING: Dict[str, tuple] = {
    "LOG_LEVEL": ("general", "log_level", str),
    "LOG_JSON": ("general", "json_logs", bool),
    "DATABASE_URL": ("database", "url", str),
    # Checked after the generic name so it wins when both are set
    "FEATURE_FLAGS_DATABASE_URL": ("database", "url", str),
    "FEATURE_FLAGS_DB_POOL_SIZE": ("database", "pool_size", int),
    "FEATURE_FLAGS_DB_MAX_OVERFLOW": ("database", "max_overflow", int),
    "FEATURE_FLAGS_DB_ECHO": ("database", "echo", bool),
}

_cached_config: Optional[AppConfig] = None


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _parse_bool(value: Union[str, bool]) -> bool:
    """Parse a string or bool into a boolean value."""
    if isinstance(value, bool):
        return value
    return value.lower() in ("true", "1", "yes", "on")


def _parse_value(value: str, target_type: type) -> Any:
    """Parse a string value to the target type."""
    if target_type == bool:
        return _parse_bool(value)
    elif target_type == int:
        return int(float(value))  # Handle "10.0" -> 10
    elif target_type == float:
        return float(value)
    return value


def _apply_env_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config dictionary."""
    for env_var, (section, key, value_type) in ENV_VAR_MAPPING.items():
        env_value = os.getenv(env_var)
        if env_value is None:
            continue
        section_dict = config_dict.setdefault(section, {})
        try:
            section_dict[key] = _parse_value(env_value, value_type)
        except (ValueError, TypeError):
            logger.warning(f"Ignoring invalid value for {env_var}: {env_value!r}")

    return config_dict


def _find_config_file() -> Optional[Path]:
    """Find the feature_flags.yaml file."""
    search_paths = [
        Path.cwd() / "feature_flags.yaml",
        Path.home() / ".featureflags" / "config.yaml",
    ]

    env_config = os.getenv("FEATURE_FLAGS_CONFIG")
    if env_config:
        search_paths.insert(0, Path(env_config))

    for path in search_paths:
        if path.exists():
            return path

    return None


def _load_yaml_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        config_path = _find_config_file()
        if config_path is None:
            return {}
    elif not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}",
            details={"path": str(config_path)},
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationError(
            f"Failed to load config from {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping",
            details={"path": str(config_path)},
        )

    logger.debug(f"Loaded configuration from {config_path}")
    return data


def _dict_to_config(config_dict: Dict[str, Any]) -> AppConfig:
    """Convert a configuration dictionary to AppConfig."""
    general = config_dict.get("general") or {}
    database = config_dict.get("database") or {}

    try:
        return AppConfig(
            general=GeneralConfig(
                log_level=general.get("log_level", "INFO"),
                json_logs=_parse_bool(general.get("json_logs", False)),
            ),
            database=DatabaseConfig(
                url=database.get("url", DEFAULT_DATABASE_URL),
                pool_size=int(database.get("pool_size", 5)),
                max_overflow=int(database.get("max_overflow", 10)),
                echo=_parse_bool(database.get("echo", False)),
                create_tables=_parse_bool(database.get("create_tables", True)),
            ),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    use_cache: bool = True,
) -> AppConfig:
    """
    Load the application configuration.

    Priority order (highest to lowest):
    1. Environment variables
    2. Config file (feature_flags.yaml)
    3. Default values

    Args:
        config_path: Optional path to config file. If None, searches default locations.
        use_cache: If True, returns cached config on subsequent calls.

    Returns:
        AppConfig instance with all configuration values.
    """
    global _cached_config

    if use_cache and _cached_config is not None:
        return _cached_config

    if config_path is not None:
        config_path = Path(config_path)

    config_dict = _load_yaml_config(config_path)
    config_dict = _apply_env_overrides(config_dict)
    config = _dict_to_config(config_dict)

    if use_cache:
        _cached_config = config

    return config


def reload_config(config_path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Force reload of configuration, ignoring cache."""
    global _cached_config
    _cached_config = None
    return load_config(config_path=config_path, use_cache=True)
