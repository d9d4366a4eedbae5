#!/usr/bin/env python3
"""Hierarchical configuration for pathsfilter.

This module provides configuration management with:
- 4-level precedence hierarchy (defaults, file, environment, CLI)
- YAML configuration files
- Environment variable overrides (PATHSFILTER_*)
- Type coercion driven by the compiled defaults
- Validation into an immutable Settings object

Example:
    >>> config = ConfigManager()
    >>> config.load_file("pathsfilter.yaml")
    >>> config.get("logging.level", default="INFO")
    >>> settings = config.settings()
"""

import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from pathsfilter.core.constants import (
    DEFAULT_CONFIG,
    ConfigKey,
    ErrorCode,
    ExportFormat,
    PredicateQuantifier,
)
from pathsfilter.core.validators import (
    ValidationError,
    validate_export_format,
    validate_fetch_depth,
    validate_log_level,
    validate_predicate_quantifier,
)

ENV_PREFIX = "PATHSFILTER_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    CONFIG_FILE = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


@dataclass(frozen=True)
class Settings:
    """Validated settings for one run."""

    filters: str
    list_files: ExportFormat = ExportFormat.NONE
    predicate_quantifier: PredicateQuantifier = PredicateQuantifier.SOME
    base: str = ""
    ref: str = ""
    before: str = ""
    default_branch: str = ""
    working_directory: str = ""
    initial_fetch_depth: int = 100
    pr_files: str = ""
    output_file: str = ""
    log_level: str = "INFO"
    log_file: str = ""


class ConfigManager:
    """Thread-safe hierarchical configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. Config file (YAML)
    3. Environment variables (PATHSFILTER_*)
    4. CLI arguments (highest)

    Nested keys are addressed with dots (``logging.level``) and, in the
    environment, with a double underscore (``PATHSFILTER_LOGGING__LEVEL``).
    """

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = _deep_copy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment(os.environ if environ is None else environ)

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.CONFIG_FILE) -> None:
        """Load configuration from YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}")

        with self._lock:
            self._config[source] = _normalize_keys(config_data)

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.CLI_ARGS) -> None:
        """Load configuration from dictionary.

        Keys whose value is None are ignored so unset CLI options never
        shadow lower-precedence sources.
        """
        cleaned = {k: v for k, v in _normalize_keys(config_data).items() if v is not None}
        with self._lock:
            self._config[source] = cleaned

    def _load_environment(self, environ: Mapping[str, str]) -> None:
        """Load configuration from environment variables.

        Environment variables in format: PATHSFILTER_KEY=value or
        PATHSFILTER_SECTION__KEY=value. Unknown keys are ignored.
        """
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split("__")
            default = self._get_nested(DEFAULT_CONFIG, ".".join(parts))
            if default is None or isinstance(default, dict):
                continue

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_env_value(value, default)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = env_config

    def _parse_env_value(self, value: str, default: Any) -> Any:
        """Coerce an environment value to the type of its default."""
        if isinstance(default, bool):
            return value.lower() in ("true", "yes", "1")
        if isinstance(default, int):
            try:
                return int(value)
            except ValueError:
                return value
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    @staticmethod
    def _get_nested(config: Mapping[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.CLI_ARGS) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = _deep_merge(merged, self._config[source])
            return merged

    def settings(self) -> Settings:
        """Validate the merged configuration.

        Returns:
            Settings for the run

        Raises:
            ConfigError: If a required value is missing or a value is invalid
        """
        merged = self.get_all()
        filters = merged.get(ConfigKey.FILTERS) or ""
        if not isinstance(filters, str) or not filters.strip():
            raise ConfigError("Filters configuration is required")

        logging_config = merged.get(ConfigKey.LOGGING) or {}

        try:
            return Settings(
                filters=filters,
                list_files=validate_export_format(merged[ConfigKey.LIST_FILES]),
                predicate_quantifier=validate_predicate_quantifier(
                    merged[ConfigKey.PREDICATE_QUANTIFIER]
                ),
                base=str(merged.get(ConfigKey.BASE) or ""),
                ref=str(merged.get(ConfigKey.REF) or ""),
                before=str(merged.get(ConfigKey.BEFORE) or ""),
                default_branch=str(merged.get(ConfigKey.DEFAULT_BRANCH) or ""),
                working_directory=str(merged.get(ConfigKey.WORKING_DIRECTORY) or ""),
                initial_fetch_depth=validate_fetch_depth(merged[ConfigKey.INITIAL_FETCH_DEPTH]),
                pr_files=str(merged.get(ConfigKey.PR_FILES) or ""),
                output_file=str(merged.get(ConfigKey.OUTPUT_FILE) or ""),
                log_level=validate_log_level(logging_config.get("level") or "INFO"),
                log_file=str(logging_config.get("file") or ""),
            )
        except ValidationError as e:
            raise ConfigError(str(e), e.error_code)

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    """Accept ``list-files`` style keys as well as ``list_files``."""
    result: Dict[str, Any] = {}
    for key, value in config.items():
        name = str(key).replace("-", "_")
        result[name] = _normalize_keys(value) if isinstance(value, dict) else value
    return result


def _deep_copy(config: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _deep_copy(v) if isinstance(v, dict) else v for k, v in config.items()}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, override winning."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
