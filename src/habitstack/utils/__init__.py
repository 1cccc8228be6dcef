"""Utility functions and helpers."""

from .config import Config, get_config, validate_config
from .display import format_duration, relative_time
from .exceptions import (
    CandidateLimitExceededError,
    ConfigurationError,
    InsufficientTimeError,
    SchedulingError,
    TaskReferenceInvalidError,
)

__all__ = [
    "Config",
    "get_config",
    "validate_config",
    "format_duration",
    "relative_time",
    "SchedulingError",
    "InsufficientTimeError",
    "TaskReferenceInvalidError",
    "CandidateLimitExceededError",
    "ConfigurationError",
]
