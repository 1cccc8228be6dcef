from datetime import datetime
from textwrap import dedent

import pytest

from habitstack.core.models import Routine, TaskTier
from habitstack.core.store import InMemoryTaskStore, load_routine_file, resolve_routine, task_from_dict
from habitstack.utils.exceptions import ConfigurationError, TaskReferenceInvalidError
from tests.utils import make_task, minutes

ROUTINE_YAML = dedent(
    """
    name: Morning
    tasks:
      - {id: shower, name: Shower, tier: essential, min_minutes: 10}
      - {id: stretch, name: Stretch, tier: core, min_minutes: 5, max_minutes: 15}
      - {id: read, name: Read, min_duration: 180}
      - id: journal
        name: Journal
        tier: core
        min_minutes: 5
        last_completed: 2025-01-15 08:00:00
        repetition_interval: 86400
    routine: [shower, stretch, gone, read, journal]
    """
)


@pytest.fixture
def routine_file(tmp_path):
    path = tmp_path / "morning.yaml"
    path.write_text(ROUTINE_YAML, encoding="utf-8")
    return path


class TestInMemoryTaskStore:
    def test_get_unknown_raises(self):
        store = InMemoryTaskStore([make_task("a")])
        assert "a" in store
        with pytest.raises(TaskReferenceInvalidError) as exc_info:
            store.get("b")
        assert exc_info.value.task_id == "b"

    def test_duplicate_ids_are_rejected(self):
        with pytest.raises(ConfigurationError):
            InMemoryTaskStore([make_task("a"), make_task("a")])


def test_resolve_routine_skips_dangling_references():
    store = InMemoryTaskStore([make_task("a"), make_task("b")])
    tasks = resolve_routine(Routine(name="r", task_ids=["b", "missing", "a", "b"]), store)
    assert [task.id for task in tasks] == ["b", "a", "b"]


def test_load_routine_file(routine_file):
    routine, store = load_routine_file(routine_file)
    assert routine.name == "Morning"
    assert routine.task_ids == ("shower", "stretch", "gone", "read", "journal")
    assert len(store) == 4

    stretch = store.get("stretch")
    assert stretch.tier is TaskTier.CORE
    assert (stretch.min_duration, stretch.max_duration) == (minutes(5), minutes(15))

    read = store.get("read")
    assert read.tier is TaskTier.OPTIONAL
    assert read.min_duration == read.max_duration == 180

    journal = store.get("journal")
    assert journal.last_completed == datetime(2025, 1, 15, 8, 0)
    assert journal.repetition_interval == 86400


def test_routine_defaults_to_catalogue_order(tmp_path):
    path = tmp_path / "plain.yaml"
    path.write_text("tasks:\n  - {id: b, min_minutes: 1}\n  - {id: a, min_minutes: 1}\n", encoding="utf-8")
    routine, _ = load_routine_file(path)
    assert routine.name == "plain"
    assert routine.task_ids == ("b", "a")


@pytest.mark.parametrize(
    "entry",
    [
        {"name": "no id", "min_minutes": 5},
        {"id": "x"},
        {"id": "x", "tier": "urgent", "min_minutes": 5},
        {"id": "x", "min_minutes": 10, "max_minutes": 5},
        {"id": "x", "min_minutes": 5, "last_completed": "yesterday"},
    ],
)
def test_invalid_entries_raise_configuration_error(entry):
    with pytest.raises(ConfigurationError):
        task_from_dict(entry)


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_routine_file(path)
