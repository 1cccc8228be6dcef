from __future__ import annotations

import pytest

from habitstack.scheduling.settings import SchedulerSettings
from habitstack.scheduling.time_utils import fixed_clock
from habitstack.utils.config import get_config
from tests.utils import NOW


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def settings():
    return SchedulerSettings()


@pytest.fixture
def fresh_config():
    """Clear the config cache around a test that changes the environment."""
    get_config.cache_clear()
    yield get_config
    get_config.cache_clear()
