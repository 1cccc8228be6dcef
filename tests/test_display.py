import pytest

from habitstack.core.models import ScheduledTask
from habitstack.scheduling.summary import summarize_schedule
from habitstack.utils.display import format_duration, relative_time
from tests.utils import make_task, minutes


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0s"), (45, "45s"), (600, "10m"), (1230, "20m 30s"), (3900, "1h 5m"), (None, "—")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_relative_time():
    assert relative_time(None) == "never"
    assert relative_time(300) == "5m ago"
    assert relative_time(-3600) == "1h from now"


def test_summary_counts_tiers_and_extensions():
    tasks = [make_task("e", "essential", 10), make_task("c", "core", 5, 15), make_task("o", "optional", 5)]
    scheduled = [ScheduledTask(tasks[0], minutes(10)), ScheduledTask(tasks[1], minutes(10))]
    summary = summarize_schedule(tasks, scheduled, minutes(30))
    assert summary.extended_count == 1
    assert summary.unused_time == minutes(10)
    assert summary.as_log_fields() == {
        "scheduled": "2/3",
        "extended": 1,
        "allocated_min": 20.0,
        "unused_min": 10.0,
        "optional": "0/1",
        "core": "1/1",
        "essential": "1/1",
    }
