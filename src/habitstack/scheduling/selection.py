"""Stage 1: tier-by-tier admission of eligible tasks at their minimum duration.

The 60 s tolerance is one allowance shared by the whole run, not a fresh
allowance per task. Several marginal admissions together therefore never
overrun the budget by more than the tolerance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping, Sequence, Tuple

from habitstack.core.models import Task, TaskTier
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings
from habitstack.utils.exceptions import InsufficientTimeError

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectionResult:
    """What Stage 1 hands to Stage 2.

    ``admitted`` maps task ID to its baseline allocation (``min_duration``) in
    admission order. ``unadmitted`` maps every eligible Core/Optional task
    that did not fit to its priority score.
    """

    admitted: Dict[Hashable, float] = field(default_factory=dict)
    remaining_time: float = 0.0
    unadmitted: Dict[Hashable, float] = field(default_factory=dict)
    tolerance_used: float = 0.0


class _AdmissionBudget:
    """Remaining time plus the single per-run tolerance allowance.

    A tolerance admission zeroes the remaining time and spends the shortfall
    from the allowance, so the run can overrun its budget by at most the
    tolerance in total.
    """

    def __init__(self, available_time: float, tolerance: float):
        self.remaining = max(0.0, available_time)
        self.slack = tolerance

    def admit(self, duration: float, *, require_remaining: bool) -> Tuple[bool, float]:
        """Try to spend ``duration``; return (admitted, shortfall absorbed)."""
        if duration <= self.remaining:
            self.remaining -= duration
            return True, 0.0

        shortfall = duration - self.remaining
        if shortfall <= self.slack and (self.remaining > 0 or not require_remaining):
            self.slack -= shortfall
            self.remaining = 0.0
            return True, shortfall
        return False, 0.0


def _priority_order(
    tasks: Sequence[Tuple[int, Task]],
    scores: Mapping[Hashable, float],
) -> List[Tuple[int, Task]]:
    """Sort by score desc, then oldest completion (never = oldest), then routine position."""

    def key(item: Tuple[int, Task]):
        index, task = item
        completed = task.last_completed
        return (
            -scores[task.id],
            completed is not None,
            completed.timestamp() if completed is not None else 0.0,
            index,
        )

    return sorted(tasks, key=key)


def select_initial_tasks(
    tasks: Sequence[Task],
    available_time: float,
    scores: Mapping[Hashable, float],
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> SelectionResult:
    """Admit eligible tasks tier by tier.

    Args:
        tasks: Eligible tasks in original routine order, without duplicates
        available_time: Budget in seconds, already net of any buffer
        scores: Priority score per task ID (Essential tasks may be omitted)
        settings: Tolerance and scoring constants

    Raises:
        InsufficientTimeError: An Essential task does not fit even with tolerance
    """
    budget = _AdmissionBudget(available_time, settings.tolerance_seconds)
    admitted: Dict[Hashable, float] = {}
    indexed = list(enumerate(tasks))

    essential = [item for item in indexed if item[1].tier is TaskTier.ESSENTIAL]
    logger.debug("schedule.stage1.essential", count=len(essential))
    for _, task in essential:
        before = budget.remaining
        accepted, shortfall = budget.admit(task.min_duration, require_remaining=False)
        if not accepted:
            logger.error(
                "schedule.essential.insufficient",
                task=task.name,
                required_s=task.min_duration,
                available_s=before,
                shortfall_s=task.min_duration - before,
            )
            raise InsufficientTimeError(task.name, required=task.min_duration, available=before)
        admitted[task.id] = task.min_duration
        if shortfall:
            logger.warning(
                "schedule.essential.tolerance",
                task=task.name,
                required_s=task.min_duration,
                available_s=before,
                shortfall_s=shortfall,
            )
        else:
            logger.debug("schedule.stage1.admit", tier="essential", task=task.name, remaining_s=budget.remaining)

    unadmitted: Dict[Hashable, float] = {}
    for tier in (TaskTier.CORE, TaskTier.OPTIONAL):
        candidates = _priority_order([item for item in indexed if item[1].tier is tier], scores)
        logger.debug("schedule.stage1.tier", tier=tier.label, count=len(candidates))
        for _, task in candidates:
            score = scores[task.id]
            before = budget.remaining
            accepted, shortfall = budget.admit(task.min_duration, require_remaining=True)
            if not accepted:
                unadmitted[task.id] = score
                logger.debug("schedule.stage1.skip", tier=tier.label, task=task.name, score=score)
                continue
            admitted[task.id] = task.min_duration
            if shortfall:
                logger.debug(
                    "schedule.stage1.tolerance",
                    tier=tier.label,
                    task=task.name,
                    available_s=before,
                    shortfall_s=shortfall,
                )
            else:
                logger.debug(
                    "schedule.stage1.admit",
                    tier=tier.label,
                    task=task.name,
                    score=score,
                    remaining_s=budget.remaining,
                )

    tolerance_used = settings.tolerance_seconds - budget.slack
    logger.info(
        "schedule.stage1.complete",
        admitted=len(admitted),
        remaining_min=round(budget.remaining / 60, 1),
        carried=len(unadmitted),
    )
    return SelectionResult(
        admitted=admitted,
        remaining_time=budget.remaining,
        unadmitted=unadmitted,
        tolerance_used=tolerance_used,
    )
