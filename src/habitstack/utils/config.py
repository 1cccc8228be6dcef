"""Configuration management backed by YAML.

The packaged ``config.yaml`` is read (or a replacement file named by
``HABITSTACK_CONFIG_FILE``), environment overrides are merged on top, and every
key the scheduler reads is coerced to its type. A bad value fails here, before
any run starts, instead of surfacing as a TypeError deep in an engine.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from dotenv import load_dotenv

from habitstack.utils.exceptions import ConfigurationError

load_dotenv()

CONFIG_ENV_VAR = "HABITSTACK_CONFIG_FILE"
DEFAULT_CONFIG_NAME = "config.yaml"
ENV_PREFIX = "HABITSTACK__"
PACKAGE_ROOT = "habitstack"

# Flat environment variables that map onto nested config keys.
ENVIRONMENT_ALIASES: dict[str, tuple[str, str]] = {
    "HABITSTACK_LOG_LEVEL": ("logging", "level"),
    "HABITSTACK_LOG_DIR": ("logging", "log_dir"),
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _non_negative(value: Any) -> float:
    number = float(value)
    if number < 0:
        raise ValueError("must not be negative")
    return number


def _optional_limit(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or int(value) != float(value):
        raise ValueError("must be a whole number")
    return int(value)


def _optional_path(value: Any) -> Optional[Path]:
    if value in (None, ""):
        return None
    return Path(str(value)).expanduser()


def _log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
    return level


# Type of every key the package reads. Keys outside the schema are kept as-is.
SCHEMA: dict[str, dict[str, Callable[[Any], Any]]] = {
    "scheduling": {
        "tolerance_seconds": _non_negative,
        "increment_seconds": _non_negative,
    },
    "scoring": {
        "core_base": float,
        "optional_base": float,
        "never_completed_boost": _non_negative,
        "overdue_exponent": float,
        "essential_score": float,
    },
    "optimizer": {
        "early_stop_utilization": float,
        "max_candidates": _optional_limit,
    },
    "budget": {
        "standard_buffer_minutes": _non_negative,
        "minimum_buffer_minutes": _non_negative,
    },
    "logging": {
        "level": _log_level,
        "log_dir": _optional_path,
    },
}


class Config(dict):
    """Validated configuration: section name to a mapping of typed values."""

    def section(self, name: str) -> dict[str, Any]:
        """Return a section, or an empty mapping when the file omits it."""
        return self.get(name) or {}


def validate_config(data: Any) -> Config:
    """Coerce every known key to its type.

    Raises:
        ConfigurationError: A section is not a mapping or a value has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    validated: dict[str, Any] = {}
    for name, value in data.items():
        fields = SCHEMA.get(name)
        if fields is None:
            validated[name] = value
            continue
        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"Config section '{name}' must be a mapping, got {value!r}")

        section = dict(value)
        for key, coerce in fields.items():
            if key not in section:
                continue
            try:
                section[key] = coerce(section[key])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid value for {name}.{key}: {section[key]!r} ({exc})") from exc
        validated[name] = section
    return Config(validated)


def _read_config_source(path_override: str | Path | None = None) -> Any:
    if path_override:
        config_path = Path(path_override).expanduser().resolve()
        handle = config_path.open("r", encoding="utf-8")
    else:
        handle = resources.files(PACKAGE_ROOT).joinpath(DEFAULT_CONFIG_NAME).open("r", encoding="utf-8")

    with handle:
        try:
            return yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse configuration: {exc}") from exc


def _env_key_path(key: str) -> tuple[str, ...] | None:
    """Map ``HABITSTACK__SECTION__KEY`` (or a flat alias) to a config path."""
    if key in ENVIRONMENT_ALIASES:
        return ENVIRONMENT_ALIASES[key]
    if not key.startswith(ENV_PREFIX):
        return None
    parts = [segment.lower() for segment in key[len(ENV_PREFIX):].split("__") if segment]
    return tuple(parts) or None


def _load_env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_key, raw_value in os.environ.items():
        path = _env_key_path(env_key)
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value

        current = overrides
        for segment in path[:-1]:
            current = current.setdefault(segment, {})
        current[path[-1]] = value
    return overrides


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@lru_cache(maxsize=4)
def get_config(config_path: str | Path | None = None) -> Config:
    """Load and validate configuration, applying environment overrides."""
    base = _read_config_source(config_path or os.environ.get(CONFIG_ENV_VAR))
    if not isinstance(base, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    return validate_config(_deep_merge(base, _load_env_overrides()))


__all__ = ["Config", "SCHEMA", "get_config", "validate_config"]
