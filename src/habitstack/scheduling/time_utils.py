"""Shared helpers for reasoning about calendar days and elapsed time."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def _align(dt: datetime, reference: datetime) -> datetime:
    """Express ``dt`` in the same timezone frame as ``reference``.

    Naive timestamps are read as local time, so an aware completion time
    compared against a naive ``now`` (or the reverse) is converted rather
    than rejected.
    """
    if reference.tzinfo is not None:
        return dt.astimezone(reference.tzinfo)
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def is_same_calendar_day(dt: datetime, now: datetime) -> bool:
    """Return True when ``dt`` falls on the calendar day of ``now``.

    Aware timestamps are first converted into ``now``'s timezone so the check
    follows the caller's local calendar.
    """
    return _align(dt, now).date() == now.date()


def seconds_since(dt: datetime, now: datetime) -> float:
    """Seconds elapsed from ``dt`` to ``now`` (negative if ``dt`` is in the future)."""
    return (now - _align(dt, now)).total_seconds()


def fixed_clock(now: datetime) -> Clock:
    """Return a clock that always reports ``now``."""
    return lambda: now
