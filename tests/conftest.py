"""Pytest configuration and fixtures for taskhound tests.

Every test gets a quiet default notifier (no console rendering) and a fresh
settings cache so environment patches don't leak between tests.
"""

from datetime import datetime, timedelta

import pytest

from taskhound.messaging import Notifier, reset_notifier, set_notifier
from taskhound.settings import clear_settings_cache


class FakeClock:
    """Callable clock returning a controllable naive local datetime."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now

    @property
    def ts(self) -> int:
        return int(self.now.timestamp())


@pytest.fixture(autouse=True)
def isolate_settings_and_notifier():
    """Reset cached settings and install a silent default notifier."""
    clear_settings_cache()
    set_notifier(Notifier(console_output=False))

    yield

    reset_notifier()
    clear_settings_cache()


@pytest.fixture
def notifier():
    """A console-less notifier whose history tests can inspect."""
    return Notifier(console_output=False)


@pytest.fixture
def clock():
    """Wednesday, May 15 2024, 10:30:00 local time."""
    return FakeClock(datetime(2024, 5, 15, 10, 30, 0))
