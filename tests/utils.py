"""Builders shared by the scheduling tests."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from habitstack.core.models import Task, TaskTier

NOW = datetime(2025, 1, 15, 12, 0, 0)
DAY = timedelta(days=1).total_seconds()
HOUR = timedelta(hours=1).total_seconds()


def minutes(value: float) -> float:
    return value * 60


def make_task(
    task_id: str,
    tier: TaskTier | str = TaskTier.OPTIONAL,
    min_minutes: float = 5,
    max_minutes: Optional[float] = None,
    *,
    last_completed: Optional[datetime] = None,
    interval: float = 0,
    name: Optional[str] = None,
) -> Task:
    return Task(
        id=task_id,
        name=name or task_id,
        tier=TaskTier.parse(tier),
        min_duration=minutes(min_minutes),
        max_duration=minutes(max_minutes if max_minutes is not None else min_minutes),
        last_completed=last_completed,
        repetition_interval=interval,
    )


def ago(**kwargs) -> datetime:
    return NOW - timedelta(**kwargs)
