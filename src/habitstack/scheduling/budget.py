"""Turn a wall-clock window into the net budget handed to the scheduler."""

from __future__ import annotations

from dataclasses import dataclass

from habitstack.utils.config import Config

STANDARD_BUFFER = 15 * 60
MINIMUM_BUFFER = 5 * 60


@dataclass(frozen=True)
class TimeBudget:
    """A window with a flexible buffer.

    The standard buffer is kept unless Essential tasks would not fit with it;
    then the buffer shrinks to whatever the Essentials leave, down to the
    minimum buffer. The scheduler only ever sees ``available_time``.
    """

    total_time: float
    essential_time: float = 0.0
    standard_buffer: float = STANDARD_BUFFER
    minimum_buffer: float = MINIMUM_BUFFER

    @property
    def effective_buffer(self) -> float:
        if self.total_time <= 0:
            return 0.0
        if (
            self.essential_time > self.total_time - self.standard_buffer
            and self.essential_time <= self.total_time - self.minimum_buffer
        ):
            return self.total_time - self.essential_time
        return min(self.standard_buffer, self.total_time)

    @property
    def available_time(self) -> float:
        return max(0.0, self.total_time - self.effective_buffer)

    @property
    def can_schedule_essentials(self) -> bool:
        return self.essential_time <= self.total_time - self.minimum_buffer

    @classmethod
    def from_config(cls, config: Config, total_time: float, essential_time: float = 0.0) -> "TimeBudget":
        budget = config.section("budget")
        return cls(
            total_time=total_time,
            essential_time=essential_time,
            standard_buffer=budget.get("standard_buffer_minutes", STANDARD_BUFFER / 60) * 60,
            minimum_buffer=budget.get("minimum_buffer_minutes", MINIMUM_BUFFER / 60) * 60,
        )
