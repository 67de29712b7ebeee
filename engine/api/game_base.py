from __future__ import annotations

import pygame

from engine.app.context import Context

from .frame_data import FrameData


class Game:
    """
    Base interface games should implement. The loop calls, per frame:
    on_event() for each pygame event, then on_update() once due timers on
    ctx.scheduler have run, then on_draw().
    """

    def on_load(self, ctx: Context, manifest: dict) -> None:
        """Called once; manifest options already include command line overrides."""
        ...

    def on_update(self, dt_ms: float, frame: FrameData) -> None:
        """frame.taps holds this frame's taps, oldest first."""
        ...

    def on_draw(self, surface: pygame.Surface) -> None:
        ...

    def on_event(self, event: pygame.event.Event) -> None:
        """Optional: raw pygame events, e.g. keyboard shortcuts."""
        ...

    def on_unload(self) -> None:
        """Optional: cleanup when the game exits. Also runs if on_load raised."""
        ...
