"""Scheduling strategies behind one interface.

``TieredScheduler`` is the greedy two-stage engine (eligibility, scoring,
tiered admission, enhancement, assembly). ``CombinatorialScheduler`` wraps
the exhaustive subset search. Both are stateless between calls: every input
(tasks, budget, clock, settings) is passed in explicitly, so the same
instance may serve concurrent callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Hashable, List, Optional, Protocol, Sequence, Type

from habitstack.core.models import Routine, ScheduledTask, ScheduleResult, Task
from habitstack.core.store import TaskStore, resolve_routine
from habitstack.monitoring.logging import get_logger, run_context
from habitstack.scheduling.assembly import finalize_schedule, unique_by_id
from habitstack.scheduling.eligibility import filter_eligible
from habitstack.scheduling.enhancement import EnhancementResult, enhance_schedule
from habitstack.scheduling.optimizer import optimize
from habitstack.scheduling.priority import calculate_priority_score
from habitstack.scheduling.selection import SelectionResult, select_initial_tasks
from habitstack.scheduling.settings import DEFAULT_SETTINGS, SchedulerSettings
from habitstack.scheduling.summary import summarize_schedule
from habitstack.scheduling.time_utils import Clock
from habitstack.utils.exceptions import SchedulingError

logger = get_logger(__name__)


class SchedulingStrategy(Protocol):
    """Anything that turns tasks and a budget into a ScheduleResult."""

    name: str

    def schedule(self, tasks: Sequence[Task], available_time: float) -> ScheduleResult:
        ...


class BaseScheduler:
    """Shared plumbing: injected clock and settings, error-to-result mapping."""

    name = "base"

    def __init__(
        self,
        settings: Optional[SchedulerSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.clock = clock or datetime.now

    def generate_schedule(self, tasks: Sequence[Task], available_time: float) -> List[ScheduledTask]:
        """Return the schedule or raise a SchedulingError."""
        raise NotImplementedError

    def schedule(self, tasks: Sequence[Task], available_time: float) -> ScheduleResult:
        """Run the strategy, returning failures as a typed result."""
        with run_context(self.name):
            try:
                scheduled = self.generate_schedule(tasks, available_time)
            except SchedulingError as exc:
                logger.error("schedule.failed", error=exc.message)
                return ScheduleResult.failure(exc, strategy=self.name)
        return ScheduleResult.success(scheduled, strategy=self.name)

    def schedule_routine(self, routine: Routine, store: TaskStore, available_time: float) -> ScheduleResult:
        """Resolve ``routine`` against ``store`` (skipping dangling entries) and schedule it."""
        return self.schedule(resolve_routine(routine, store), available_time)


@dataclass(frozen=True)
class SchedulePlan:
    """Every intermediate product of one tiered run, for inspection and tests"""

    scheduled: List[ScheduledTask] = field(default_factory=list)
    eligible: List[Task] = field(default_factory=list)
    scores: Dict[Hashable, float] = field(default_factory=dict)
    selection: SelectionResult = field(default_factory=SelectionResult)
    enhancement: EnhancementResult = field(default_factory=EnhancementResult)


class TieredScheduler(BaseScheduler):
    """Greedy two-stage engine: tiered admission, then iterative enhancement."""

    name = "tiered"

    def plan(self, tasks: Sequence[Task], available_time: float) -> SchedulePlan:
        now = self.clock()
        tasks = unique_by_id(tasks)
        log = logger.bind(strategy=self.name)
        log.info("schedule.start", tasks=len(tasks), available_min=round(available_time / 60, 1))

        if not tasks:
            log.info("schedule.empty_routine")
            return SchedulePlan()

        eligible = filter_eligible(tasks, now)
        scores = {
            task.id: calculate_priority_score(task, now, self.settings, eligible=True)
            for task in eligible
        }
        selection = select_initial_tasks(eligible, available_time, scores, self.settings)
        enhancement = enhance_schedule(
            selection,
            {task.id: task for task in eligible},
            scores,
            self.settings,
        )
        scheduled = finalize_schedule(tasks, enhancement.allocations)

        summary = summarize_schedule(tasks, scheduled, available_time)
        log.info("schedule.complete", **summary.as_log_fields())
        return SchedulePlan(
            scheduled=scheduled,
            eligible=eligible,
            scores=scores,
            selection=selection,
            enhancement=enhancement,
        )

    def generate_schedule(self, tasks: Sequence[Task], available_time: float) -> List[ScheduledTask]:
        return self.plan(tasks, available_time).scheduled


class CombinatorialScheduler(BaseScheduler):
    """Exhaustive subset search; exponential, for small routines only."""

    name = "optimal"

    def generate_schedule(self, tasks: Sequence[Task], available_time: float) -> List[ScheduledTask]:
        logger.info(
            "schedule.start",
            strategy=self.name,
            tasks=len(tasks),
            available_min=round(available_time / 60, 1),
        )
        scheduled = optimize(tasks, available_time, self.clock(), self.settings)
        return scheduled or []


STRATEGIES: Dict[str, Type[BaseScheduler]] = {
    TieredScheduler.name: TieredScheduler,
    CombinatorialScheduler.name: CombinatorialScheduler,
}


def get_strategy(
    name: str,
    settings: Optional[SchedulerSettings] = None,
    clock: Optional[Clock] = None,
) -> BaseScheduler:
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown scheduling strategy {name!r}; choose from {sorted(STRATEGIES)}") from None
    return strategy_cls(settings=settings, clock=clock)


def schedule(
    tasks: Sequence[Task],
    available_time: float,
    *,
    now: Optional[datetime] = None,
    settings: Optional[SchedulerSettings] = None,
) -> ScheduleResult:
    """Schedule ``tasks`` into ``available_time`` seconds with the tiered engine."""
    clock = (lambda: now) if now is not None else None
    return TieredScheduler(settings=settings, clock=clock).schedule(tasks, available_time)
