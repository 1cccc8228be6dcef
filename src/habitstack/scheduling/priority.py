"""Priority scoring: tier weight, never-completed boost and overdue decay."""

from __future__ import annotations

import math
from datetime import datetime

from habitstack.core.models import Task, TaskTier
from habitstack.scheduling.eligibility import is_task_eligible
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings
from habitstack.scheduling.time_utils import seconds_since

INELIGIBLE_SCORE = -math.inf


def base_score(tier: TaskTier, settings: SchedulerSettings = DEFAULT_SETTINGS) -> float:
    if tier is TaskTier.CORE:
        return settings.core_base_score
    if tier is TaskTier.OPTIONAL:
        return settings.optional_base_score
    return settings.essential_score


def overdue_factor(task: Task, now: datetime, settings: SchedulerSettings = DEFAULT_SETTINGS) -> float:
    """How many intervals have passed since completion, raised to the overdue exponent.

    1.0 when the task was never completed or resets daily.
    """
    if task.last_completed is None or task.repetition_interval <= 0:
        return 1.0
    elapsed = max(0.0, seconds_since(task.last_completed, now))
    return (elapsed / task.repetition_interval) ** settings.overdue_exponent


def calculate_priority_score(
    task: Task,
    now: datetime,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
    *,
    eligible: bool | None = None,
) -> float:
    """Return the urgency score of ``task`` at ``now``; higher is more urgent.

    Essential tasks get the fixed sentinel so no Core/Optional action can
    outcompete them. Ineligible tasks get ``-inf`` and are never selectable.
    Pass ``eligible`` when the caller has already evaluated eligibility.
    """
    if eligible is None:
        eligible = is_task_eligible(task, now)
    if not eligible:
        return INELIGIBLE_SCORE

    if task.is_essential:
        return settings.essential_score

    base = base_score(task.tier, settings)
    boost = base * settings.never_completed_boost if task.last_completed is None else 0.0
    return (base + boost) * overdue_factor(task, now, settings)
