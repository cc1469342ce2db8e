import os

# Без окна и звуковой карты
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from events import EventBus


class FakeClock:
    """Управляемые часы в миллисекундах"""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class Recorder:
    """Записывает все события шины"""

    def __init__(self, events):
        self.calls = []
        for name in ("score_changed", "food_eaten", "game_over"):
            events.subscribe(name, self._make(name))

    def _make(self, name):
        def listener(*args):
            self.calls.append((name, args))
        return listener

    def of(self, name):
        return [args for event, args in self.calls if event == name]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def recorder(events):
    return Recorder(events)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)
