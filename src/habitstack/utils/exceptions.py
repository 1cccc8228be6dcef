"""Custom exceptions for HabitStack"""

from typing import Hashable, Optional


class SchedulingError(Exception):
    """Base class for failures surfaced to the caller of a scheduling run"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InsufficientTimeError(SchedulingError):
    """Raised when Essential tasks cannot fit the budget, even with tolerance"""

    def __init__(
        self,
        task_name: Optional[str],
        required: float,
        available: float,
    ):
        """Initialize InsufficientTimeError

        Args:
            task_name: Essential task that could not be admitted, if known
            required: Seconds the task (or Essential set) needed
            available: Seconds that were left in the budget
        """
        subject = f"Essential task '{task_name}'" if task_name else "Essential tasks"
        super().__init__(
            f"There is not enough time to schedule the selected routine: "
            f"{subject} need {required / 60:.1f} min, {available / 60:.1f} min available."
        )
        self.task_name = task_name
        self.required = required
        self.available = available

    @property
    def shortfall(self) -> float:
        return max(0.0, self.required - self.available)


class TaskReferenceInvalidError(SchedulingError):
    """Raised when a routine references a task the store can no longer resolve"""

    def __init__(self, task_id: Hashable):
        super().__init__(f"Task with ID {task_id} could not be found.")
        self.task_id = task_id


class CandidateLimitExceededError(SchedulingError):
    """Raised when the combinatorial optimizer is handed too many candidates"""

    def __init__(self, count: int, limit: int):
        """Initialize CandidateLimitExceededError

        Args:
            count: Number of candidate tasks after Essential tasks were forced in
            limit: Largest candidate set the optimizer accepts
        """
        super().__init__(
            f"Combination search over {count} tasks exceeds the limit of {limit}; "
            "use the tiered scheduler for larger routines."
        )
        self.count = count
        self.limit = limit


class ConfigurationError(ValueError):
    """Raised for malformed routine files or configuration values"""


__all__ = [
    "SchedulingError",
    "InsufficientTimeError",
    "TaskReferenceInvalidError",
    "CandidateLimitExceededError",
    "ConfigurationError",
]
