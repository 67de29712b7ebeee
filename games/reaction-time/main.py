from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import pygame

from engine.api import Game, FrameData, Tap
from engine.app.context import Context
from engine.render.shapes import draw_button, draw_text, draw_text_centered
from reaction.export import ExportResult, export_to_destination
from reaction.results import ResultStore
from reaction.settings import TrialSettings
from reaction.stats import SessionSummary, summarize
from reaction.trial import TrialController, TrialState

logger = logging.getLogger(__name__)

# Colors
NEUTRAL_BG = (255, 255, 255)
MENU_BG = (242, 242, 247)
TEXT_DARK = (20, 20, 20)
TEXT_MUTED = (110, 110, 120)
BUTTON_BG = (0, 0, 0)
BUTTON_FG = (255, 255, 255)
DESTRUCTIVE_BG = (200, 30, 30)
OK_COLOR = (30, 140, 60)
ERROR_COLOR = (200, 30, 30)
OVERLAY_COLOR = (0, 0, 0, 150)

# Layout
BUTTON_W = 340
BUTTON_H = 64
BUTTON_GAP = 18
BUTTON_HIT_PAD = 6
TITLE_FONT_SIZE = 56
HUD_FONT_SIZE = 26
RESULT_FONT_SIZE = 40


class Button:
    def __init__(self, label: str, rect: pygame.Rect, action: str, bg=BUTTON_BG):
        self.label = label
        self.rect = rect
        self.action = action
        self.bg = bg

    def hit(self, x: float, y: float) -> bool:
        return self.rect.inflate(BUTTON_HIT_PAD * 2, BUTTON_HIT_PAD * 2).collidepoint(x, y)


class ReactionTimeGame(Game):
    def on_load(self, ctx: Context, manifest):
        self.ctx = ctx
        self.manifest = manifest
        self.w, self.h = ctx.screen_size

        self.settings = TrialSettings.from_options(manifest.get("options", {}))
        self.store = ResultStore()
        self.controller = TrialController(
            self.store,
            ctx.scheduler,
            stimuli=self.settings.stimuli,
            delay_range=self.settings.delay_range,
            clock=ctx.scheduler.clock,
        )
        self.controller.add_listener(self._on_state_change)

        self.confirming_ignore: bool = False
        self.summary: SessionSummary = summarize(self.store.exportable())
        self.export_result: Optional[ExportResult] = None

    # ---------- Helpers ----------
    def _stack(self, labels: List[Tuple[str, str]], top: int) -> List[Button]:
        x = (self.w - BUTTON_W) // 2
        out = []
        for i, (label, action) in enumerate(labels):
            y = top + i * (BUTTON_H + BUTTON_GAP)
            bg = DESTRUCTIVE_BG if action == "confirm_ignore" else BUTTON_BG
            out.append(Button(label, pygame.Rect(x, y, BUTTON_W, BUTTON_H), action, bg))
        return out

    def _row(self, labels: List[Tuple[str, str]], y: int) -> List[Button]:
        total = len(labels) * BUTTON_W + (len(labels) - 1) * BUTTON_GAP
        x0 = (self.w - total) // 2
        out = []
        for i, (label, action) in enumerate(labels):
            x = x0 + i * (BUTTON_W + BUTTON_GAP)
            bg = DESTRUCTIVE_BG if action == "confirm_ignore" else BUTTON_BG
            out.append(Button(label, pygame.Rect(x, y, BUTTON_W, BUTTON_H), action, bg))
        return out

    def visible_buttons(self) -> List[Button]:
        state = self.controller.state
        if state == TrialState.Idle:
            labels = [("Start Test", "start"), ("Test Run", "dry_run")]
            if len(self.store) > 0:
                labels.append(("Export Data to JSON", "export"))
            return self._stack(labels, top=self.h // 2 - BUTTON_H)
        if state == TrialState.Completed:
            if self.confirming_ignore:
                return self._row([("Ignore", "confirm_ignore"), ("Cancel", "cancel_ignore")],
                                 y=self.h // 2 + 40)
            labels = [("Go to Main Menu", "menu")]
            if self.controller.can_ignore:
                labels.append(("Ignore This Test", "ignore"))
            return self._row(labels, y=self.h // 2 + 40)
        return []

    def _on_state_change(self, state: TrialState) -> None:
        self.confirming_ignore = False
        if state in (TrialState.Idle, TrialState.Completed):
            self.summary = summarize(self.store.exportable())

    def perform(self, action: str) -> None:
        c = self.controller
        if action == "start":
            self.export_result = None
            c.start_trial(dry_run=False)
        elif action == "dry_run":
            self.export_result = None
            c.start_trial(dry_run=True)
        elif action == "export":
            self._export()
        elif action == "menu":
            c.dismiss_result()
        elif action == "ignore":
            if c.can_ignore:
                self.confirming_ignore = True
        elif action == "confirm_ignore":
            if self.confirming_ignore and c.mark_last_ignored():
                c.dismiss_result()
        elif action == "cancel_ignore":
            self.confirming_ignore = False

    def _export(self) -> None:
        if len(self.store) == 0:
            return
        self.export_result = export_to_destination(
            self.store.exportable(), self.settings.export_path)

    def _handle_tap(self, tap: Tap) -> bool:
        """Returns True when the tap changed something; later taps this frame are dropped."""
        state = self.controller.state
        if state in (TrialState.ArmedWaiting, TrialState.ArmedReady):
            return self.controller.register_response(at=tap.t) is not None
        if tap.source == "key":
            # SPACE only answers a stimulus; it never presses buttons
            return False
        for b in self.visible_buttons():
            if b.hit(tap.x, tap.y):
                self.perform(b.action)
                return True
        return False

    # ---------- Update ----------
    def on_update(self, dt_ms: float, frame: FrameData) -> None:
        for tap in frame.taps:
            if self._handle_tap(tap):
                break

    # ---------- Events ----------
    def on_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        state = self.controller.state
        key = event.key

        if state == TrialState.Idle:
            if key == pygame.K_s:
                self.perform("start")
            elif key == pygame.K_t:
                self.perform("dry_run")
            elif key == pygame.K_e:
                self.perform("export")
        elif state == TrialState.Completed:
            if self.confirming_ignore:
                if key in (pygame.K_y, pygame.K_RETURN):
                    self.perform("confirm_ignore")
                elif key in (pygame.K_n, pygame.K_BACKSPACE):
                    self.perform("cancel_ignore")
            elif key in (pygame.K_m, pygame.K_BACKSPACE, pygame.K_RETURN):
                self.perform("menu")
            elif key == pygame.K_i:
                self.perform("ignore")
            elif key == pygame.K_s:
                self.perform("start")
            elif key == pygame.K_t:
                self.perform("dry_run")

    # ---------- Draw ----------
    def on_draw(self, surface: pygame.Surface) -> None:
        state = self.controller.state
        if state == TrialState.Idle:
            self._draw_menu(surface)
            return

        stim = self.controller.stimulus
        surface.fill(stim.color if stim is not None else NEUTRAL_BG)
        if self.controller.dry_run and state == TrialState.ArmedWaiting:
            draw_text(surface, "Test Run", (20, 16), TEXT_MUTED, size=HUD_FONT_SIZE)

        if state == TrialState.Completed:
            self._draw_result(surface)

    def _draw_menu(self, surface: pygame.Surface) -> None:
        surface.fill(MENU_BG)
        draw_text_centered(surface, self.manifest.get("title", "Reaction Time Test"),
                           (self.w // 2, 90), TEXT_DARK, size=TITLE_FONT_SIZE)

        for b in self.visible_buttons():
            draw_button(surface, b.rect, b.label, BUTTON_FG, b.bg)

        s = self.summary
        if s.count:
            line = (f"{s.count} trials   mean {s.mean_ms:.0f} ms   median {s.median_ms:.0f} ms"
                    f"   best {s.best_ms:.0f} ms   sd {s.std_ms:.0f} ms")
        else:
            line = "No trials recorded yet"
        draw_text_centered(surface, line, (self.w // 2, 170), TEXT_MUTED, size=HUD_FONT_SIZE)

        r = self.export_result
        if r is not None:
            if r.ok:
                msg, color = f"Saved {r.count} results to {r.destination}", OK_COLOR
            else:
                msg, color = f"Failed to save data: {r.error}", ERROR_COLOR
            draw_text_centered(surface, msg, (self.w // 2, self.h - 40), color, size=22)

        draw_text(surface, "S start   T test run   E export   Esc quit",
                  (20, self.h - 30), TEXT_MUTED, size=20)

    def _draw_result(self, surface: pygame.Surface) -> None:
        rt = self.controller.reaction_time_ms or 0.0
        box = pygame.Rect(0, 0, 520, 80)
        box.center = (self.w // 2, self.h // 2 - 40)
        pygame.draw.rect(surface, BUTTON_BG, box, border_radius=10)
        draw_text_centered(surface, f"Reaction Time: {rt:.2f} ms", box.center,
                           BUTTON_FG, size=RESULT_FONT_SIZE)

        if self.confirming_ignore:
            overlay = pygame.Surface((self.w, self.h), pygame.SRCALPHA)
            overlay.fill(OVERLAY_COLOR)
            surface.blit(overlay, (0, 0))
            draw_text_centered(surface, "Ignore This Test", (self.w // 2, self.h // 2 - 110),
                               BUTTON_FG, size=RESULT_FONT_SIZE)
            draw_text_centered(surface,
                               "Are you sure you want to ignore this test? The data will be marked as ignored.",
                               (self.w // 2, self.h // 2 - 60), BUTTON_FG, size=HUD_FONT_SIZE)

        for b in self.visible_buttons():
            draw_button(surface, b.rect, b.label, BUTTON_FG, b.bg)

    def on_unload(self) -> None:
        controller = getattr(self, "controller", None)
        if controller is not None and len(self.store):
            logger.info("session ended with %d stored trials (%d exportable)",
                        len(self.store), self.summary.count)


def get_game():
    return ReactionTimeGame()
