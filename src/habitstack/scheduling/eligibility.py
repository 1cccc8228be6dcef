"""Decide whether a task is due, i.e. a scheduling candidate at all."""

from __future__ import annotations

from datetime import datetime

from habitstack.core.models import Task
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.time_utils import is_same_calendar_day, seconds_since

logger = get_logger(__name__)


def is_task_eligible(task: Task, now: datetime) -> bool:
    """Return True when ``task`` is a candidate at ``now``.

    Rules, in order:

    1. Never completed: eligible.
    2. Repetition interval 0 (daily reset): eligible unless it was completed
       on the current calendar day.
    3. Otherwise eligible once the interval has fully elapsed since the last
       completion.

    Every engine and the duration estimator share this one rule set.
    """
    if task.last_completed is None:
        return True

    if task.repetition_interval == 0:
        return not is_same_calendar_day(task.last_completed, now)

    return seconds_since(task.last_completed, now) >= task.repetition_interval


def filter_eligible(tasks, now: datetime) -> list[Task]:
    """Return the eligible tasks in their original order."""
    eligible = []
    for task in tasks:
        if is_task_eligible(task, now):
            eligible.append(task)
        else:
            logger.debug("eligibility.skip", task=task.name, last_completed=str(task.last_completed))
    return eligible
