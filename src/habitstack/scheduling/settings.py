"""Explicit tuning values passed into every scheduling call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from habitstack.utils.config import Config
from habitstack.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class SchedulerSettings:
    """Constants of the scheduling algorithms.

    The defaults are the production values; ``from_config`` lets a caller
    source them from ``config.yaml`` without the engine reading global state.
    """

    tolerance_seconds: float = 60.0
    increment_seconds: float = 300.0
    core_base_score: float = 100.0
    optional_base_score: float = 10.0
    never_completed_boost: float = 0.5
    overdue_exponent: float = 1.5
    essential_score: float = 1_000_000.0
    early_stop_utilization: float = 0.8
    max_candidates: Optional[int] = 20

    def __post_init__(self) -> None:
        if self.increment_seconds <= 0:
            raise ConfigurationError("increment_seconds must be positive")
        if self.tolerance_seconds < 0:
            raise ConfigurationError("tolerance_seconds must not be negative")
        if not 0 < self.early_stop_utilization <= 1:
            raise ConfigurationError("early_stop_utilization must be within (0, 1]")

    @classmethod
    def from_config(cls, config: Config) -> "SchedulerSettings":
        """Build settings from a validated config; missing keys keep their defaults."""
        scheduling = config.section("scheduling")
        scoring = config.section("scoring")
        optimizer = config.section("optimizer")
        defaults = cls()
        return cls(
            tolerance_seconds=scheduling.get("tolerance_seconds", defaults.tolerance_seconds),
            increment_seconds=scheduling.get("increment_seconds", defaults.increment_seconds),
            core_base_score=scoring.get("core_base", defaults.core_base_score),
            optional_base_score=scoring.get("optional_base", defaults.optional_base_score),
            never_completed_boost=scoring.get("never_completed_boost", defaults.never_completed_boost),
            overdue_exponent=scoring.get("overdue_exponent", defaults.overdue_exponent),
            essential_score=scoring.get("essential_score", defaults.essential_score),
            early_stop_utilization=optimizer.get("early_stop_utilization", defaults.early_stop_utilization),
            max_candidates=optimizer.get("max_candidates", defaults.max_candidates),
        )


DEFAULT_SETTINGS = SchedulerSettings()
