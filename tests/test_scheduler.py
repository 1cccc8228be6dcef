from datetime import datetime, timezone

import pytest

from habitstack.core.models import Routine
from habitstack.core.store import InMemoryTaskStore
from habitstack.scheduling.enhancement import ActionType
from habitstack.scheduling.scheduler import (
    CombinatorialScheduler,
    TieredScheduler,
    get_strategy,
    schedule,
)
from habitstack.utils.exceptions import InsufficientTimeError
from tests.utils import DAY, NOW, ago, make_task, minutes


@pytest.fixture
def tiered(clock):
    return TieredScheduler(clock=clock)


def _allocations(result):
    return [(item.id, item.allocated_duration) for item in result.scheduled]


def test_empty_routine_is_an_empty_success(tiered):
    result = tiered.schedule([], minutes(30))
    assert result.ok
    assert result.scheduled == []
    assert result.strategy == "tiered"


def test_nothing_due_is_an_empty_success(tiered):
    result = tiered.schedule([make_task("a", "core", 5, last_completed=ago(hours=1))], minutes(30))
    assert result.ok
    assert result.scheduled == []


def test_essential_overrun_is_a_typed_failure(tiered):
    result = tiered.schedule([make_task("e", "essential", 25)], minutes(20))
    assert not result.ok
    assert isinstance(result.error, InsufficientTimeError)
    with pytest.raises(InsufficientTimeError):
        result.unwrap()


def test_essential_within_tolerance_is_scheduled(tiered):
    result = tiered.schedule([make_task("e", "essential", 20.5)], minutes(20))
    assert result.ok
    assert _allocations(result) == [("e", minutes(20.5))]


def test_morning_routine_fills_the_budget(tiered):
    tasks = [
        make_task("A", "essential", 10),
        make_task("B", "core", 5, 15),
        make_task("C", "optional", 10),
    ]
    plan = tiered.plan(tasks, minutes(20))
    # C (10m) no longer fits once A and B are in, so the last 5m extend B.
    assert plan.selection.unadmitted == {"C": pytest.approx(15.0)}
    assert plan.enhancement.trace == ((ActionType.ADD_INCREMENT, "B"),)
    assert [(item.id, item.allocated_duration) for item in plan.scheduled] == [
        ("A", minutes(10)),
        ("B", minutes(10)),
    ]


def test_spare_time_extends_elastic_tasks(tiered):
    tasks = [
        make_task("A", "essential", 10),
        make_task("B", "core", 5, 15),
        make_task("C", "optional", 5),
    ]
    assert _allocations(tiered.schedule(tasks, minutes(20))) == [
        ("A", minutes(10)),
        ("B", minutes(5)),
        ("C", minutes(5)),
    ]
    assert _allocations(tiered.schedule(tasks, minutes(30))) == [
        ("A", minutes(10)),
        ("B", minutes(15)),
        ("C", minutes(5)),
    ]


def test_output_follows_routine_order_not_priority(tiered):
    tasks = [
        make_task("opt", "optional", 5),
        make_task("core", "core", 5),
        make_task("ess", "essential", 5),
    ]
    assert tiered.schedule(tasks, minutes(15)).task_ids == ["opt", "core", "ess"]


def test_duplicate_reference_is_scheduled_once(tiered):
    task = make_task("a", "core", 5)
    assert tiered.schedule([task, make_task("b", "core", 5), task], minutes(30)).task_ids == ["a", "b"]


def test_plan_exposes_scores(tiered):
    plan = tiered.plan([make_task("e", "essential", 5), make_task("c", "core", 5)], minutes(30))
    assert plan.scores == {"e": 1_000_000, "c": pytest.approx(150.0)}
    assert [task.id for task in plan.eligible] == ["e", "c"]


def test_schedule_routine_skips_dangling_references(clock):
    store = InMemoryTaskStore([make_task("a", "core", 5), make_task("b", "optional", 5)])
    routine = Routine(name="Morning", task_ids=("a", "gone", "b"))
    result = TieredScheduler(clock=clock).schedule_routine(routine, store, minutes(30))
    assert result.ok
    assert result.task_ids == ["a", "b"]


def test_module_level_schedule_accepts_now():
    result = schedule([make_task("a", "core", 5, last_completed=ago(hours=1))], minutes(30), now=NOW)
    assert result.ok
    assert result.scheduled == []


def test_get_strategy(clock):
    assert isinstance(get_strategy("tiered", clock=clock), TieredScheduler)
    assert isinstance(get_strategy("optimal", clock=clock), CombinatorialScheduler)
    with pytest.raises(ValueError, match="Unknown scheduling strategy"):
        get_strategy("random")


def test_same_input_same_output(tiered):
    tasks = [
        make_task("a", "core", 5, 20),
        make_task("b", "core", 5, 20),
        make_task("c", "optional", 5, 20),
    ]
    first = _allocations(tiered.schedule(tasks, minutes(37)))
    second = _allocations(tiered.schedule(list(tasks), minutes(37)))
    assert first == second


def test_mixed_timezones_do_not_break_the_run():
    completed = datetime(2025, 1, 10, 8, tzinfo=timezone.utc)
    task = make_task("a", "core", 10, last_completed=completed, interval=DAY)
    result = schedule([task], minutes(30), now=NOW)
    assert result.ok
    assert result.task_ids == ["a"]
