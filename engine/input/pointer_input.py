from __future__ import annotations
import pygame
from typing import Callable, List, Tuple

from engine.api.config import EngineConfig
from engine.api.frame_data import Tap

# Keys that count as a tap anywhere on screen
TAP_KEYS = (pygame.K_SPACE,)


class PointerInput:
    """
    Turns pygame events into Taps:
    - left mouse button down
    - finger down (touch screens; pygame reports normalized 0..1 coords)
    - SPACE, reported at the screen center
    Each tap is stamped with `clock()` when the event is handled, so the
    stamp is on the same timeline as the scheduler.
    Respects --mirror by converting window coords -> logical coords.
    """

    def __init__(self, cfg: EngineConfig, clock: Callable[[], float]):
        self.mirror = cfg.mirror
        self.clock = clock
        self._taps: List[Tap] = []

    def _to_logical(self, x: float, y: float, w: int, h: int) -> Tuple[float, float]:
        if self.mirror:
            x = (w - 1) - x
        return float(x), float(y)

    def handle_pygame_event(self, event: pygame.event.Event, screen_size: Tuple[int, int]) -> None:
        w, h = screen_size

        if event.type == pygame.MOUSEBUTTONDOWN:
            # touch screens also emit synthetic mouse events; the finger event wins
            if event.button != 1 or getattr(event, "touch", False):
                return
            lx, ly = self._to_logical(*event.pos, w, h)
            self._taps.append(Tap(lx, ly, self.clock(), "mouse"))

        elif event.type == pygame.FINGERDOWN:
            lx, ly = self._to_logical(event.x * w, event.y * h, w, h)
            self._taps.append(Tap(lx, ly, self.clock(), "touch"))

        elif event.type == pygame.KEYDOWN and event.key in TAP_KEYS:
            self._taps.append(Tap(w / 2, h / 2, self.clock(), "key"))

    def drain(self) -> List[Tap]:
        """Return the taps collected since the last call, oldest first."""
        taps, self._taps = self._taps, []
        return taps
