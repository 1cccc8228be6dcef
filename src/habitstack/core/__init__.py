"""Core domain models and the task store boundary."""

from habitstack.core.models import Routine, ScheduledTask, ScheduleResult, Task, TaskTier
from habitstack.core.store import InMemoryTaskStore, TaskStore, load_routine_file, resolve_routine

__all__ = [
    "Task",
    "TaskTier",
    "Routine",
    "ScheduledTask",
    "ScheduleResult",
    "TaskStore",
    "InMemoryTaskStore",
    "load_routine_file",
    "resolve_routine",
]
