from __future__ import annotations
import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """
    Handle for a callback registered with Scheduler.call_later().
    A task runs at most once; cancel() before it runs drops it.
    """

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self) -> bool:
        """Returns True if the task was still pending."""
        if self.done or self.cancelled:
            return False
        self.cancelled = True
        return True

    @property
    def pending(self) -> bool:
        return not (self.done or self.cancelled)

    def __repr__(self) -> str:
        state = "done" if self.done else "cancelled" if self.cancelled else "pending"
        return f"<ScheduledTask due={self.due:.3f} {state}>"


class Scheduler:
    """
    Cooperative single-threaded timer. The window loop calls run_due() once
    per frame; nothing runs outside that call.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock
        self._heap: List[Tuple[float, int, ScheduledTask]] = []
        self._seq = itertools.count()

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ScheduledTask:
        if delay_sec < 0:
            raise ValueError(f"delay must be >= 0, got {delay_sec}")
        task = ScheduledTask(self.clock() + delay_sec, callback)
        heapq.heappush(self._heap, (task.due, next(self._seq), task))
        logger.debug("scheduled %r", task)
        return task

    def run_due(self, now: Optional[float] = None) -> int:
        """Run every pending task whose due time has passed. Returns how many ran."""
        if now is None:
            now = self.clock()
        ran = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, task = heapq.heappop(self._heap)
            if task.cancelled:
                continue
            task.done = True
            task.callback()
            ran += 1
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._heap if t.pending)

    def cancel_all(self) -> None:
        for _, _, task in self._heap:
            task.cancel()
        self._heap.clear()
