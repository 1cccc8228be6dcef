"""Exhaustive subset search: the optimal-but-exponential alternative engine.

After Essential tasks are forced in, every subset of the remaining eligible
tasks is a candidate, visited from the largest subset size down. For ``n``
candidates that is up to ``2**n`` subsets, so the search is only suitable for
small routines (around 15 tasks); ``max_candidates`` makes callers state that
bound explicitly. The tiered scheduler is linear-ish and should be preferred
for anything larger.

The best subset maximises the summed priority score, breaking ties by higher
time utilisation. The search stops after a size level once the best subset
found so far fills at least ``early_stop_utilization`` of the remaining budget.
Every task runs at its minimum duration; the search does not extend elastic
tasks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from itertools import combinations
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from habitstack.core.models import ScheduledTask, Task
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.assembly import finalize_schedule, unique_by_id
from habitstack.scheduling.eligibility import filter_eligible
from habitstack.scheduling.priority import calculate_priority_score
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings
from habitstack.utils.exceptions import CandidateLimitExceededError, InsufficientTimeError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Combination:
    tasks: Tuple[Task, ...]
    score: float
    total_time: float


class TaskCombinationOptimizer:
    """Find the highest-scoring subset of ``tasks`` that fits ``available_time``."""

    def __init__(
        self,
        tasks: Sequence[Task],
        scores: Dict[Hashable, float],
        available_time: float,
        early_stop_utilization: float = DEFAULT_SETTINGS.early_stop_utilization,
    ):
        self.tasks = list(tasks)
        self.scores = scores
        self.available_time = available_time
        self.early_stop_utilization = early_stop_utilization
        self.evaluated = 0

    def _better(self, candidate: Combination, best: Optional[Combination]) -> bool:
        if best is None:
            return True
        if candidate.score != best.score:
            return candidate.score > best.score
        return candidate.total_time > best.total_time

    def find_optimal_combination(self) -> Optional[Combination]:
        """Return the best fitting subset, or None when no single task fits."""
        best: Optional[Combination] = None

        for size in range(len(self.tasks), 0, -1):
            for subset in combinations(self.tasks, size):
                self.evaluated += 1
                total_time = sum(task.min_duration for task in subset)
                if total_time > self.available_time:
                    continue
                candidate = Combination(
                    tasks=subset,
                    score=sum(self.scores[task.id] for task in subset),
                    total_time=total_time,
                )
                if self._better(candidate, best):
                    best = candidate
                    logger.debug(
                        "optimizer.better",
                        tasks=[task.name for task in subset],
                        score=candidate.score,
                        total_s=total_time,
                    )

            if best is not None and self._utilization(best) >= self.early_stop_utilization:
                logger.debug("optimizer.early_stop", size=size, evaluated=self.evaluated)
                break

        return best

    def _utilization(self, combination: Combination) -> float:
        if self.available_time <= 0:
            return 1.0
        return combination.total_time / self.available_time


def optimize(
    tasks: Sequence[Task],
    available_time: float,
    now: Optional[datetime] = None,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> Optional[List[ScheduledTask]]:
    """Schedule ``tasks`` by exhaustive search.

    Returns the chosen tasks in input order at their minimum durations, or
    None when nothing fits at all.

    Raises:
        InsufficientTimeError: Eligible Essential tasks exceed the budget
        CandidateLimitExceededError: More non-Essential candidates than ``settings.max_candidates``
    """
    now = now or datetime.now()
    eligible = filter_eligible(unique_by_id(tasks), now)
    essentials = [task for task in eligible if task.is_essential]
    others = [task for task in eligible if not task.is_essential]

    if settings.max_candidates is not None and len(others) > settings.max_candidates:
        raise CandidateLimitExceededError(len(others), settings.max_candidates)

    remaining = available_time
    chosen: Dict[Hashable, float] = {}
    # Shortest first, strict fit: the subset search has no tolerance.
    for task in sorted(essentials, key=lambda t: t.min_duration):
        if task.min_duration > remaining:
            logger.error(
                "optimizer.essential.insufficient",
                task=task.name,
                required_s=task.min_duration,
                available_s=remaining,
            )
            raise InsufficientTimeError(task.name, required=task.min_duration, available=remaining)
        chosen[task.id] = task.min_duration
        remaining -= task.min_duration

    if others and remaining > 0:
        scores = {task.id: calculate_priority_score(task, now, settings, eligible=True) for task in others}
        optimizer = TaskCombinationOptimizer(others, scores, remaining, settings.early_stop_utilization)
        best = optimizer.find_optimal_combination()
        if best is not None:
            for task in best.tasks:
                chosen[task.id] = task.min_duration
            logger.info(
                "optimizer.complete",
                added=len(best.tasks),
                score=best.score,
                evaluated=optimizer.evaluated,
            )
        else:
            logger.info("optimizer.no_combination", evaluated=optimizer.evaluated)

    if not chosen:
        return None
    return finalize_schedule(tasks, chosen)
