"""Scheduling engines, their stages and helpers."""

from .budget import TimeBudget
from .eligibility import filter_eligible, is_task_eligible
from .estimator import TimeRequirements, analyze_time_requirements, estimate_duration
from .optimizer import TaskCombinationOptimizer, optimize
from .priority import calculate_priority_score
from .scheduler import (
    BaseScheduler,
    CombinatorialScheduler,
    SchedulePlan,
    SchedulingStrategy,
    TieredScheduler,
    get_strategy,
    schedule,
)
from .settings import SchedulerSettings
from .summary import ScheduleSummary, summarize_schedule

__all__ = [
    "BaseScheduler",
    "CombinatorialScheduler",
    "SchedulePlan",
    "SchedulerSettings",
    "ScheduleSummary",
    "SchedulingStrategy",
    "TaskCombinationOptimizer",
    "TieredScheduler",
    "TimeBudget",
    "TimeRequirements",
    "analyze_time_requirements",
    "calculate_priority_score",
    "estimate_duration",
    "filter_eligible",
    "get_strategy",
    "is_task_eligible",
    "optimize",
    "schedule",
    "summarize_schedule",
]
