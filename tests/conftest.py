"""Shared fixtures: deterministic time sources for debounce and drag tests."""

import pytest


class ManualTimer:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Timer source that only fires when ``advance`` is called."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float):
        self.now += seconds
        due = [t for t in self.active if t.due <= self.now]
        self.timers = [t for t in self.active if t.due > self.now]
        for timer in due:
            timer.callback()


class FakeClock:
    """Monotonic clock that moves only when told to."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def scheduler():
    """Manual timer scheduler."""
    return ManualScheduler()


@pytest.fixture
def clock():
    """Fake monotonic clock."""
    return FakeClock()
