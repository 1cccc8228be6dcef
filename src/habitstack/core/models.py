"""Domain models for routines, tasks and schedules"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Hashable, List, Optional, Tuple

from habitstack.utils.exceptions import SchedulingError


class TaskTier(IntEnum):
    """Task importance tiers; the value is the ordinal used for comparisons"""
    OPTIONAL = 1  # Nice to have, fills leftover time
    CORE = 2  # Should happen, selected by urgency
    ESSENTIAL = 3  # Must happen or the run fails

    @classmethod
    def parse(cls, value) -> "TaskTier":
        """Accept a tier, its ordinal, or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown task tier: {value!r}") from exc

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Task:
    """A schedulable work item, read but never mutated by the scheduler.

    Durations and the repetition interval are in seconds. A repetition
    interval of 0 means the task resets once per calendar day.
    """

    id: Hashable
    name: str
    tier: TaskTier
    min_duration: float
    max_duration: float
    last_completed: Optional[datetime] = None
    repetition_interval: float = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "tier", TaskTier.parse(self.tier))
        if self.min_duration < 0 or self.max_duration < 0:
            raise ValueError(f"Task '{self.name}' has a negative duration")
        if self.min_duration > self.max_duration:
            raise ValueError(
                f"Task '{self.name}' has min_duration {self.min_duration} > max_duration {self.max_duration}"
            )
        if self.repetition_interval < 0:
            raise ValueError(f"Task '{self.name}' has a negative repetition interval")

    @property
    def is_elastic(self) -> bool:
        return self.max_duration > self.min_duration

    @property
    def is_essential(self) -> bool:
        return self.tier is TaskTier.ESSENTIAL

    def __repr__(self):
        return f"<Task(id={self.id!r}, name={self.name!r}, tier={self.tier.label})>"


@dataclass(frozen=True)
class Routine:
    """An ordered sequence of task references; order is preserved in output"""

    name: str
    task_ids: Tuple[Hashable, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_ids", tuple(self.task_ids))

    def __len__(self) -> int:
        return len(self.task_ids)


@dataclass(frozen=True)
class ScheduledTask:
    """A task admitted into a schedule with its allocated duration (seconds)"""

    task: Task
    allocated_duration: float

    @property
    def id(self) -> Hashable:
        return self.task.id

    @property
    def is_extended(self) -> bool:
        return self.allocated_duration > self.task.min_duration

    def __repr__(self):
        return f"<ScheduledTask(id={self.task.id!r}, allocated={self.allocated_duration}s)>"


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of one scheduling run: either a schedule or a typed error"""

    scheduled: List[ScheduledTask] = field(default_factory=list)
    error: Optional[SchedulingError] = None
    strategy: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_allocated(self) -> float:
        return sum(item.allocated_duration for item in self.scheduled)

    @property
    def task_ids(self) -> List[Hashable]:
        return [item.id for item in self.scheduled]

    def unwrap(self) -> List[ScheduledTask]:
        """Return the schedule, re-raising the stored error for failed runs."""
        if self.error is not None:
            raise self.error
        return list(self.scheduled)

    @classmethod
    def success(cls, scheduled: List[ScheduledTask], strategy: Optional[str] = None) -> "ScheduleResult":
        return cls(scheduled=list(scheduled), strategy=strategy)

    @classmethod
    def failure(cls, error: SchedulingError, strategy: Optional[str] = None) -> "ScheduleResult":
        return cls(error=error, strategy=strategy)
