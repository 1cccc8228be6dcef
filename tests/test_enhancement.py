from habitstack.scheduling.enhancement import (
    ActionType,
    EnhancementAction,
    enhance_schedule,
    initial_candidates,
    max_increments,
)
from habitstack.scheduling.selection import SelectionResult
from tests.utils import make_task, minutes


def _enhance(tasks, admitted, unadmitted, remaining_minutes, scores=None):
    by_id = {task.id: task for task in tasks}
    selection = SelectionResult(
        admitted={task_id: by_id[task_id].min_duration for task_id in admitted},
        remaining_time=minutes(remaining_minutes),
        unadmitted=dict(unadmitted),
    )
    if scores is None:
        scores = dict(unadmitted)
    return enhance_schedule(selection, by_id, scores)


def test_max_increments_counts_whole_steps():
    assert max_increments(make_task("a", "core", 5, 17), 300) == 2
    assert max_increments(make_task("a", "core", 5, 15), 300) == 2
    assert max_increments(make_task("a", "core", 5), 300) == 0


def test_rank_orders_score_then_cost_then_name():
    alpha = make_task("a", name="Alpha")
    bravo = make_task("b", name="Bravo")
    cheap = EnhancementAction(ActionType.ADD_INCREMENT, alpha, 10, 300)
    pricey = EnhancementAction(ActionType.ADD_TASK, alpha, 10, 600)
    named = EnhancementAction(ActionType.ADD_INCREMENT, bravo, 10, 300)
    assert max([pricey, cheap], key=EnhancementAction.rank) is cheap
    assert max([cheap, named], key=EnhancementAction.rank) is named


def test_initial_candidates_skip_tasks_that_cannot_fit():
    elastic = make_task("b", "core", 5, 15)
    small = make_task("c", "optional", 5)
    large = make_task("d", "core", 20)
    selection = SelectionResult(
        admitted={"b": minutes(5)},
        remaining_time=minutes(10),
        unadmitted={"c": 15.0, "d": 150.0},
    )
    candidates = initial_candidates(selection, {t.id: t for t in (elastic, small, large)}, {"b": 150.0})
    assert [(action.type, action.task.id) for action in candidates] == [
        (ActionType.ADD_INCREMENT, "b"),
        (ActionType.ADD_TASK, "c"),
    ]
    assert candidates[0].remaining_increments == 2


def test_best_action_wins_each_round():
    elastic = make_task("B", "core", 5, 15)
    optional = make_task("C", "optional", 5)
    overdue = make_task("D", "core", 10)
    result = _enhance(
        [elastic, optional, overdue],
        admitted=["B"],
        unadmitted={"C": 15.0, "D": 282.0},
        remaining_minutes=20,
        scores={"B": 150.0, "C": 15.0, "D": 282.0},
    )
    assert result.trace == (
        (ActionType.ADD_TASK, "D"),
        (ActionType.ADD_INCREMENT, "B"),
        (ActionType.ADD_INCREMENT, "B"),
    )
    assert result.allocations == {"B": minutes(15), "D": minutes(10)}
    assert result.remaining_time == 0


def test_equal_score_prefers_cheaper_action():
    x = make_task("X", "core", 5, 10)
    y = make_task("Y", "core", 10)
    result = _enhance([x, y], admitted=["X"], unadmitted={"Y": 100.0}, remaining_minutes=10,
                      scores={"X": 100.0, "Y": 100.0})
    assert result.trace == ((ActionType.ADD_INCREMENT, "X"),)
    assert result.allocations == {"X": minutes(10)}
    assert result.remaining_time == minutes(5)


def test_equal_score_and_cost_prefers_greater_name():
    alpha = make_task("a", "optional", 5, name="Alpha")
    bravo = make_task("b", "optional", 5, name="Bravo")
    result = _enhance([alpha, bravo], admitted=[], unadmitted={"a": 10.0, "b": 10.0}, remaining_minutes=5)
    assert result.trace == ((ActionType.ADD_TASK, "b"),)


def test_added_elastic_task_becomes_extendable():
    elastic = make_task("E", "optional", 5, 10)
    result = _enhance([elastic], admitted=[], unadmitted={"E": 50.0}, remaining_minutes=10)
    assert result.trace == ((ActionType.ADD_TASK, "E"), (ActionType.ADD_INCREMENT, "E"))
    assert result.allocations == {"E": minutes(10)}


def test_essential_increments_use_sentinel_score():
    essential = make_task("ess", "essential", 10, 20)
    core = make_task("core", "core", 5, 15)
    result = _enhance(
        [essential, core],
        admitted=["ess", "core"],
        unadmitted={},
        remaining_minutes=10,
        scores={"core": 150.0},
    )
    assert result.allocations == {"ess": minutes(20), "core": minutes(5)}


def test_increments_stop_at_max_duration():
    task = make_task("a", "core", 5, 17)
    result = _enhance([task], admitted=["a"], unadmitted={}, remaining_minutes=30, scores={"a": 100.0})
    assert result.allocations == {"a": minutes(15)}
    assert result.remaining_time == minutes(20)


def test_nothing_happens_below_one_increment():
    tiny = make_task("t", "optional", 1)
    result = _enhance([tiny], admitted=[], unadmitted={"t": 10.0}, remaining_minutes=299 / 60)
    assert result.trace == ()
    assert result.allocations == {}
