import os
import random
from datetime import datetime, timedelta

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "hide"

from engine.timing.scheduler import Scheduler
from reaction.results import ResultStore
from reaction.trial import TrialController


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FakeWallClock:
    def __init__(self, start=datetime(2024, 5, 1, 14, 3, 22, 480000)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeWallClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)


@pytest.fixture
def store():
    return ResultStore()


@pytest.fixture
def controller(store, scheduler, clock, wall_clock):
    return TrialController(
        store,
        scheduler,
        rng=random.Random(1234),
        clock=clock,
        wall_clock=wall_clock,
    )


@pytest.fixture
def fire_stimulus(controller, scheduler, clock):
    """Advance the fake clock past the pending delay and run the timer."""
    def fire():
        clock.advance(controller.delay_sec)
        scheduler.run_due()
    return fire
