"""Post-run statistics for logging and display."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence

from habitstack.core.models import ScheduledTask, Task, TaskTier


@dataclass(frozen=True)
class ScheduleSummary:
    scheduled_count: int
    total_count: int
    scheduled_by_tier: Dict[TaskTier, int] = field(default_factory=dict)
    total_by_tier: Dict[TaskTier, int] = field(default_factory=dict)
    extended_count: int = 0
    total_allocated: float = 0.0
    available_time: float = 0.0

    @property
    def unused_time(self) -> float:
        return max(0.0, self.available_time - self.total_allocated)

    def as_log_fields(self) -> dict:
        fields = {
            "scheduled": f"{self.scheduled_count}/{self.total_count}",
            "extended": self.extended_count,
            "allocated_min": round(self.total_allocated / 60, 1),
            "unused_min": round(self.unused_time / 60, 1),
        }
        for tier in TaskTier:
            fields[tier.name.lower()] = f"{self.scheduled_by_tier.get(tier, 0)}/{self.total_by_tier.get(tier, 0)}"
        return fields


def summarize_schedule(
    routine_tasks: Sequence[Task],
    scheduled: Sequence[ScheduledTask],
    available_time: float,
) -> ScheduleSummary:
    total_by_tier: Dict[TaskTier, int] = {tier: 0 for tier in TaskTier}
    for task in routine_tasks:
        total_by_tier[task.tier] += 1

    scheduled_by_tier: Dict[TaskTier, int] = {tier: 0 for tier in TaskTier}
    for item in scheduled:
        scheduled_by_tier[item.task.tier] += 1

    return ScheduleSummary(
        scheduled_count=len(scheduled),
        total_count=len(routine_tasks),
        scheduled_by_tier=scheduled_by_tier,
        total_by_tier=total_by_tier,
        extended_count=sum(1 for item in scheduled if item.is_extended),
        total_allocated=sum(item.allocated_duration for item in scheduled),
        available_time=available_time,
    )
