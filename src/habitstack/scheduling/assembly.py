"""Re-emit admitted tasks in routine order with their final allocations."""

from __future__ import annotations

from typing import Hashable, List, Mapping, Sequence

from habitstack.core.models import ScheduledTask, Task
from habitstack.monitoring.logging import get_logger

logger = get_logger(__name__)


def finalize_schedule(
    tasks_in_order: Sequence[Task],
    allocations: Mapping[Hashable, float],
) -> List[ScheduledTask]:
    """Walk the routine order, keeping tasks present in ``allocations``.

    The output order is the routine order restricted to admitted tasks, never
    the admission order. A task ID appearing twice in the routine is emitted
    once, at its first position.
    """
    schedule: List[ScheduledTask] = []
    emitted = set()
    for task in tasks_in_order:
        if task.id in emitted or task.id not in allocations:
            continue
        emitted.add(task.id)
        schedule.append(ScheduledTask(task=task, allocated_duration=allocations[task.id]))

    if not schedule and tasks_in_order:
        logger.warning("schedule.empty", routine_tasks=len(tasks_in_order))
    return schedule


def unique_by_id(tasks: Sequence[Task]) -> List[Task]:
    """Drop repeated task IDs, keeping each task's first position."""
    seen = set()
    unique: List[Task] = []
    for task in tasks:
        if task.id in seen:
            logger.debug("schedule.duplicate_reference", task=task.name)
            continue
        seen.add(task.id)
        unique.append(task)
    return unique
