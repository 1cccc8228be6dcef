"""Stage 2: spend leftover budget on more tasks or longer elastic allocations.

The loop repeatedly executes the single best affordable action, where an
action either admits an eligible task at its minimum duration or extends an
admitted elastic task by one fixed increment. It is greedy and never
backtracks, so it behaves like a fractional knapsack over discrete
increments rather than a global optimum.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Hashable, List, Mapping, Tuple

from habitstack.core.models import Task
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.selection import SelectionResult
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings

logger = get_logger(__name__)


class ActionType(str, Enum):
    """Kinds of enhancement action"""
    ADD_TASK = "add_task"
    ADD_INCREMENT = "add_increment"


@dataclass(frozen=True)
class EnhancementAction:
    """A candidate action; replaced, never mutated, as increments are spent"""

    type: ActionType
    task: Task
    priority_score: float
    cost: float
    remaining_increments: int = 0

    def rank(self) -> tuple:
        """Key for ``max``: score desc, cost asc, task name desc, then ID."""
        return (self.priority_score, -self.cost, self.task.name, str(self.task.id))


@dataclass(frozen=True)
class EnhancementResult:
    allocations: Dict[Hashable, float] = field(default_factory=dict)
    remaining_time: float = 0.0
    trace: Tuple[Tuple[ActionType, Hashable], ...] = ()


def max_increments(task: Task, increment: float) -> int:
    """Number of whole increments that fit between min and max duration."""
    if not task.is_elastic:
        return 0
    return int((task.max_duration - task.min_duration) // increment)


def _increment_action(task: Task, score: float, increment: float) -> EnhancementAction | None:
    count = max_increments(task, increment)
    if count <= 0:
        return None
    return EnhancementAction(
        type=ActionType.ADD_INCREMENT,
        task=task,
        priority_score=score,
        cost=increment,
        remaining_increments=count,
    )


def initial_candidates(
    selection: SelectionResult,
    tasks_by_id: Mapping[Hashable, Task],
    scores: Mapping[Hashable, float],
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> List[EnhancementAction]:
    """Increment actions for admitted elastic tasks, then AddTask actions that could fit."""
    increment = settings.increment_seconds
    candidates: List[EnhancementAction] = []

    for task_id in selection.admitted:
        task = tasks_by_id[task_id]
        action = _increment_action(task, scores.get(task_id, settings.essential_score), increment)
        if action is not None:
            candidates.append(action)

    for task_id, score in selection.unadmitted.items():
        task = tasks_by_id[task_id]
        if task.min_duration <= selection.remaining_time:
            candidates.append(
                EnhancementAction(
                    type=ActionType.ADD_TASK,
                    task=task,
                    priority_score=score,
                    cost=task.min_duration,
                )
            )
    return candidates


def enhance_schedule(
    selection: SelectionResult,
    tasks_by_id: Mapping[Hashable, Task],
    scores: Mapping[Hashable, float],
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> EnhancementResult:
    """Distribute Stage 1's remaining time.

    Args:
        selection: Stage 1 output (baseline allocations and carried candidates)
        tasks_by_id: Lookup for every eligible task
        scores: Priority score per task ID; Essential tasks fall back to the sentinel
        settings: Increment size and the Essential sentinel score

    Returns:
        Final allocation per admitted task, leftover time, and the executed
        actions in order.
    """
    increment = settings.increment_seconds
    remaining = selection.remaining_time
    allocations: Dict[Hashable, float] = dict(selection.admitted)
    candidates = initial_candidates(selection, tasks_by_id, scores, settings)
    trace: List[Tuple[ActionType, Hashable]] = []

    logger.debug("schedule.stage2.start", remaining_min=round(remaining / 60, 1), candidates=len(candidates))

    while remaining >= increment:
        affordable = [action for action in candidates if action.cost <= remaining]
        if not affordable:
            logger.debug("schedule.stage2.exhausted", remaining_s=remaining)
            break

        best = max(affordable, key=EnhancementAction.rank)
        candidates = [action for action in candidates if action is not best]
        remaining -= best.cost
        task = best.task
        trace.append((best.type, task.id))

        if best.type is ActionType.ADD_TASK:
            allocations[task.id] = task.min_duration
            follow_up = _increment_action(task, best.priority_score, increment)
            if follow_up is not None:
                candidates.append(follow_up)
        else:
            allocations[task.id] = allocations.get(task.id, task.min_duration) + increment
            if best.remaining_increments > 1:
                candidates.append(replace(best, remaining_increments=best.remaining_increments - 1))

        logger.debug(
            "schedule.enhance.action",
            action=best.type.value,
            task=task.name,
            score=best.priority_score,
            allocated_s=allocations[task.id],
            remaining_s=remaining,
        )

    logger.info(
        "schedule.stage2.complete",
        tasks=len(allocations),
        actions=len(trace),
        remaining_min=round(remaining / 60, 1),
    )
    return EnhancementResult(allocations=allocations, remaining_time=remaining, trace=tuple(trace))
