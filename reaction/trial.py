from __future__ import annotations
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from engine.timing.scheduler import ScheduledTask, Scheduler
from reaction.results import ResultStore, TrialRecord

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class Stimulus:
    label: str
    color: RGB


DEFAULT_STIMULI: Tuple[Stimulus, ...] = (
    Stimulus("Red", (255, 59, 48)),
    Stimulus("Green", (52, 199, 89)),
    Stimulus("Blue", (0, 122, 255)),
)

# Shown only if the stimulus set is somehow empty
FALLBACK_STIMULUS = Stimulus("Unknown", (255, 255, 255))

DEFAULT_DELAY_RANGE = (2.0, 6.0)


class TrialState(Enum):
    Idle = 1
    ArmedWaiting = 2  # delay running, input ignored
    ArmedReady = 3    # stimulus shown, waiting for the tap
    Completed = 4


class TrialController:
    """
    Owns the trial state machine:

        Idle -> ArmedWaiting -> ArmedReady -> Completed -> Idle

    The view reads state from here and forwards user actions; it never
    mutates trial state itself. Actions that make no sense in the current
    state are silently ignored.
    """

    def __init__(
        self,
        store: ResultStore,
        scheduler: Scheduler,
        stimuli: Sequence[Stimulus] = DEFAULT_STIMULI,
        delay_range: Tuple[float, float] = DEFAULT_DELAY_RANGE,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.perf_counter,
        wall_clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.scheduler = scheduler
        self.stimuli = tuple(stimuli)
        self.delay_range = delay_range
        self.rng = rng or random.Random()
        self.clock = clock
        self.wall_clock = wall_clock

        self.state: TrialState = TrialState.Idle
        self.dry_run: bool = False
        self.stimulus: Optional[Stimulus] = None
        self.reaction_time_ms: Optional[float] = None
        self.last_record: Optional[TrialRecord] = None
        self.delay_sec: float = 0.0

        self._presented_at: Optional[float] = None
        self._presented_wall: Optional[datetime] = None
        self._pending: Optional[ScheduledTask] = None
        self._listeners: List[Callable[[TrialState], None]] = []

    # ---------- observers ----------
    def add_listener(self, callback: Callable[[TrialState], None]) -> None:
        self._listeners.append(callback)

    def _set_state(self, new_state: TrialState) -> None:
        logger.debug("trial %s -> %s", self.state.name, new_state.name)
        self.state = new_state
        for cb in self._listeners:
            cb(new_state)

    # ---------- actions ----------
    def start_trial(self, dry_run: bool = False) -> None:
        if self._pending is not None and self._pending.cancel():
            logger.debug("cancelled pending stimulus of the previous trial")
        self.dry_run = dry_run
        self.stimulus = None
        self.reaction_time_ms = None
        self.last_record = None
        self._presented_at = None
        self._presented_wall = None

        lo, hi = self.delay_range
        self.delay_sec = self.rng.uniform(lo, hi)
        self._pending = self.scheduler.call_later(self.delay_sec, self.present_stimulus)
        self._set_state(TrialState.ArmedWaiting)
        logger.debug("%s started, stimulus in %.2f s",
                     "dry run" if dry_run else "trial", self.delay_sec)

    def present_stimulus(self) -> None:
        if self.state != TrialState.ArmedWaiting:
            return
        self._pending = None
        if self.stimuli:
            self.stimulus = self.rng.choice(self.stimuli)
        else:
            logger.error("no stimuli configured, showing %s", FALLBACK_STIMULUS.label)
            self.stimulus = FALLBACK_STIMULUS
        self._presented_at = self.clock()
        self._presented_wall = self.wall_clock()
        self._set_state(TrialState.ArmedReady)

    def register_response(self, at: Optional[float] = None) -> Optional[float]:
        """
        Score a tap. `at` is the clock reading when the tap happened (defaults
        to now); taps stamped before the stimulus count as early and are
        dropped. Returns the reaction time in ms, or None if nothing was scored.
        """
        if self.state != TrialState.ArmedReady or self._presented_at is None:
            return None
        if at is None:
            at = self.clock()
        if at < self._presented_at:
            return None

        self.reaction_time_ms = (at - self._presented_at) * 1000.0
        if not self.dry_run:
            self.last_record = TrialRecord(
                timestamp=self._presented_wall,
                reaction_time_ms=self.reaction_time_ms,
                stimulus_label=self.stimulus.label,
            )
            self.store.append(self.last_record)
        self._set_state(TrialState.Completed)
        return self.reaction_time_ms

    def dismiss_result(self) -> None:
        if self.state != TrialState.Completed:
            return
        self.reaction_time_ms = None
        self._set_state(TrialState.Idle)

    @property
    def can_ignore(self) -> bool:
        return (
            self.state == TrialState.Completed
            and not self.dry_run
            and self.last_record is not None
            and self.store.last is self.last_record
            and not self.last_record.ignored
        )

    def mark_last_ignored(self) -> bool:
        """Caller is expected to have confirmed with the user; there is no undo."""
        if not self.can_ignore:
            return False
        return self.store.mark_last_ignored(self.last_record)

    @property
    def presented_at(self) -> Optional[float]:
        return self._presented_at
