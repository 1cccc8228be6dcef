"""Task store boundary: resolving routines to tasks and loading routine files"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Hashable, Iterable, List, Optional, Protocol, Tuple

import yaml

from habitstack.core.models import Routine, Task, TaskTier
from habitstack.monitoring.logging import get_logger
from habitstack.utils.exceptions import ConfigurationError, TaskReferenceInvalidError

logger = get_logger(__name__)


class TaskStore(Protocol):
    """Read API the scheduler consumes; persistence lives behind it."""

    def get(self, task_id: Hashable) -> Task:
        """Return the task, raising TaskReferenceInvalidError if unknown."""
        ...


class InMemoryTaskStore:
    """Snapshot of tasks keyed by ID"""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Dict[Hashable, Task] = {}
        for task in tasks:
            self.add(task)

    def add(self, task: Task) -> None:
        if task.id in self._tasks:
            raise ConfigurationError(f"Duplicate task ID {task.id!r}")
        self._tasks[task.id] = task

    def get(self, task_id: Hashable) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskReferenceInvalidError(task_id) from None

    def __contains__(self, task_id: Hashable) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)


def resolve_routine(routine: Routine, store: TaskStore) -> List[Task]:
    """Resolve a routine's references in order.

    A dangling reference is logged and skipped; one bad entry never aborts
    the whole routine.
    """
    tasks: List[Task] = []
    for position, task_id in enumerate(routine.task_ids):
        try:
            tasks.append(store.get(task_id))
        except TaskReferenceInvalidError as exc:
            logger.warning(
                "routine.task_missing",
                routine=routine.name,
                task_id=str(exc.task_id),
                position=position,
            )
    return tasks


def _parse_timestamp(value: Any, task_id: Hashable) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ConfigurationError(f"Task {task_id!r}: invalid last_completed {value!r}") from exc


def _duration_seconds(entry: Dict[str, Any], prefix: str) -> Optional[float]:
    if f"{prefix}_minutes" in entry:
        return float(entry[f"{prefix}_minutes"]) * 60
    if f"{prefix}_duration" in entry:
        return float(entry[f"{prefix}_duration"])
    return None


def task_from_dict(entry: Dict[str, Any]) -> Task:
    """Build a Task from a routine-file mapping.

    Durations may be given as ``min_minutes``/``max_minutes`` or in seconds as
    ``min_duration``/``max_duration``; a missing maximum means fixed duration.
    """
    if "id" not in entry:
        raise ConfigurationError(f"Task entry without an id: {entry!r}")
    task_id = entry["id"]

    min_duration = _duration_seconds(entry, "min")
    if min_duration is None:
        raise ConfigurationError(f"Task {task_id!r} has no minimum duration")
    max_duration = _duration_seconds(entry, "max")

    try:
        return Task(
            id=task_id,
            name=str(entry.get("name", task_id)),
            tier=TaskTier.parse(entry.get("tier", "optional")),
            min_duration=min_duration,
            max_duration=max_duration if max_duration is not None else min_duration,
            last_completed=_parse_timestamp(entry.get("last_completed"), task_id),
            repetition_interval=float(entry.get("repetition_interval", 0)),
        )
    except ValueError as exc:
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(f"Task {task_id!r}: {exc}") from exc


def load_routine_file(path: str | Path) -> Tuple[Routine, InMemoryTaskStore]:
    """Load a YAML routine file into a routine and the store it references.

    Expected shape::

        name: Morning
        tasks:
          - {id: shower, name: Shower, tier: essential, min_minutes: 10}
        routine: [shower]

    When ``routine`` is omitted the catalogue order is used.
    """
    routine_path = Path(path).expanduser()
    with routine_path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse routine file {routine_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Routine file {routine_path} must contain a mapping")

    store = InMemoryTaskStore(task_from_dict(entry) for entry in data.get("tasks") or [])
    order = data.get("routine")
    if order is None:
        order = [entry["id"] for entry in data.get("tasks") or []]

    routine = Routine(name=str(data.get("name", routine_path.stem)), task_ids=tuple(order))
    logger.debug("routine.loaded", path=str(routine_path), tasks=len(store), entries=len(routine))
    return routine, store
