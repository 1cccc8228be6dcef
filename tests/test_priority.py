import math

import pytest

from habitstack.scheduling.priority import calculate_priority_score, overdue_factor
from habitstack.scheduling.settings import SchedulerSettings
from tests.utils import DAY, NOW, ago, make_task


@pytest.mark.parametrize(
    "tier, expected",
    [("core", 150.0), ("optional", 15.0)],
)
def test_never_completed_gets_boost(tier, expected):
    assert calculate_priority_score(make_task("a", tier), NOW) == pytest.approx(expected)


def test_daily_reset_completed_yesterday_scores_base():
    task = make_task("a", "core", last_completed=ago(days=1))
    assert calculate_priority_score(task, NOW) == pytest.approx(100.0)


def test_overdue_tasks_score_superlinearly():
    task = make_task("a", "core", last_completed=ago(days=2), interval=DAY)
    assert overdue_factor(task, NOW) == pytest.approx(2 ** 1.5)
    assert calculate_priority_score(task, NOW) == pytest.approx(100 * 2 ** 1.5)


def test_more_overdue_outranks_less_overdue():
    older = make_task("a", "optional", last_completed=ago(days=4), interval=DAY)
    newer = make_task("b", "optional", last_completed=ago(days=2), interval=DAY)
    assert calculate_priority_score(older, NOW) > calculate_priority_score(newer, NOW)


def test_essential_gets_sentinel():
    assert calculate_priority_score(make_task("a", "essential"), NOW) == 1_000_000


def test_ineligible_gets_negative_infinity():
    task = make_task("a", "core", last_completed=ago(hours=1))
    assert calculate_priority_score(task, NOW) == -math.inf


def test_settings_change_weights():
    settings = SchedulerSettings(core_base_score=50, never_completed_boost=1.0)
    assert calculate_priority_score(make_task("a", "core"), NOW, settings) == pytest.approx(100.0)


def test_known_eligibility_skips_the_check():
    task = make_task("a", "core", last_completed=ago(hours=1))
    assert calculate_priority_score(task, NOW, eligible=True) == pytest.approx(100.0)
