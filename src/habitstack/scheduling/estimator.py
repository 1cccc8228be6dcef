"""Read-only duration estimates that avoid running the full scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from habitstack.core.models import Task, TaskTier
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.eligibility import is_task_eligible
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings

logger = get_logger(__name__)


def estimate_duration(
    tasks: Iterable[Task],
    minimum_tier: TaskTier = TaskTier.OPTIONAL,
    now: Optional[datetime] = None,
) -> float:
    """Sum ``min_duration`` of eligible tasks whose tier is at least ``minimum_tier``.

    ESSENTIAL answers "Essential only", CORE "Core and up" and OPTIONAL
    "everything". Uses the scheduler's eligibility rule so the estimate
    matches what Stage 1 would consider.
    """
    minimum_tier = TaskTier.parse(minimum_tier)
    now = now or datetime.now()
    total = 0.0
    included = 0
    for task in tasks:
        if task.tier >= minimum_tier and is_task_eligible(task, now):
            total += task.min_duration
            included += 1

    logger.debug("estimate.complete", tier=minimum_tier.label, tasks=included, total_s=total)
    return total


@dataclass(frozen=True)
class TimeRequirements:
    """Minimum time each tier needs against a budget"""

    essential_time: float
    core_time: float
    optional_time: float
    available_time: float
    tolerance: float

    @property
    def total_minimum(self) -> float:
        return self.essential_time + self.core_time + self.optional_time

    @property
    def can_schedule_essentials(self) -> bool:
        return self.essential_time <= self.available_time + self.tolerance

    @property
    def time_after_essentials(self) -> float:
        return max(0.0, self.available_time - self.essential_time)

    @property
    def warning(self) -> Optional[str]:
        """Human-readable note when Essentials crowd out (or exceed) the budget."""
        if not self.can_schedule_essentials:
            return (
                f"Essential tasks require {self.essential_time / 60:.0f} minutes, "
                f"but only {self.available_time / 60:.0f} minutes are available."
            )
        if self.essential_time > self.available_time / 2:
            return (
                f"Essential tasks consume {self.essential_time / 60:.0f} of "
                f"{self.available_time / 60:.0f} available minutes, leaving "
                f"{self.time_after_essentials / 60:.0f} minutes for other tasks."
            )
        return None


def analyze_time_requirements(
    tasks: Iterable[Task],
    available_time: float,
    now: datetime,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> TimeRequirements:
    """Pre-flight check of what each tier needs before a run is attempted."""
    totals = {tier: 0.0 for tier in TaskTier}
    for task in tasks:
        if is_task_eligible(task, now):
            totals[task.tier] += task.min_duration

    requirements = TimeRequirements(
        essential_time=totals[TaskTier.ESSENTIAL],
        core_time=totals[TaskTier.CORE],
        optional_time=totals[TaskTier.OPTIONAL],
        available_time=available_time,
        tolerance=settings.tolerance_seconds,
    )
    if requirements.warning:
        logger.warning("schedule.requirements", message=requirements.warning)
    return requirements
