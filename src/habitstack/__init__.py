"""HabitStack - fit a tiered routine into the time you have"""

from habitstack.core.models import Routine, ScheduledTask, ScheduleResult, Task, TaskTier
from habitstack.core.store import InMemoryTaskStore, load_routine_file, resolve_routine
from habitstack.scheduling import (
    CombinatorialScheduler,
    SchedulerSettings,
    SchedulingStrategy,
    TieredScheduler,
    estimate_duration,
    optimize,
    schedule,
)
from habitstack.utils.exceptions import (
    InsufficientTimeError,
    SchedulingError,
    TaskReferenceInvalidError,
)

__version__ = "0.1.0"

__all__ = [
    "Task",
    "TaskTier",
    "Routine",
    "ScheduledTask",
    "ScheduleResult",
    "InMemoryTaskStore",
    "load_routine_file",
    "resolve_routine",
    "SchedulingStrategy",
    "TieredScheduler",
    "CombinatorialScheduler",
    "SchedulerSettings",
    "schedule",
    "estimate_duration",
    "optimize",
    "SchedulingError",
    "InsufficientTimeError",
    "TaskReferenceInvalidError",
]
