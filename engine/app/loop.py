from __future__ import annotations
import logging
import sys
import time
from typing import Any, Dict, Optional
import pygame

from engine.api.config import EngineConfig
from engine.api.frame_data import FrameData
from engine.app.context import Context
from engine.app.loader import GAMES_DIR, load_game_manifest, load_game_module
from engine.input.pointer_input import PointerInput
from engine.timing.scheduler import Scheduler

logger = logging.getLogger(__name__)

BACKGROUND = (12, 14, 18)


def run_game(
    game_id: str,
    screen_size: tuple[int, int],
    fps: int = 60,
    mirror: bool = False,
    fullscreen: bool = False,
    option_overrides: Optional[Dict[str, Any]] = None,
):
    cfg = EngineConfig(
        screen_size=screen_size,
        fps=fps,
        mirror=mirror,
        fullscreen=fullscreen,
        option_overrides=option_overrides or {},
    )

    # load game before opening a window so a bad id fails fast
    game_root = GAMES_DIR / game_id
    try:
        manifest = load_game_manifest(game_root).with_overrides(cfg.option_overrides)
        module = load_game_module(game_root)
    except (FileNotFoundError, AttributeError, ValueError) as e:
        print(f"ERROR: could not load game '{game_id}': {e}", file=sys.stderr)
        return
    game = module.get_game()

    pygame.init()
    pygame.display.set_caption(manifest.title)
    flags = pygame.FULLSCREEN if fullscreen else 0
    screen = pygame.display.set_mode(screen_size, flags)
    clock = pygame.time.Clock()

    scheduler = Scheduler(clock=time.perf_counter)
    input_layer = PointerInput(cfg, clock=scheduler.clock)

    # Render target: draw to off-screen if mirroring, otherwise draw directly to screen
    render_surface = screen if not mirror else pygame.Surface(
        screen_size).convert()

    ctx = Context(
        screen=render_surface,
        clock=clock,
        cfg=cfg,
        scheduler=scheduler,
        resources={},
        screen_size=screen_size,
    )

    running = True
    try:
        try:
            game.on_load(ctx, manifest.as_dict())
        except ValueError as e:
            print(f"ERROR: could not load game '{game_id}': {e}", file=sys.stderr)
            return
        logger.info("running %s at %dx%d", manifest.id, *screen_size)

        while running:
            dt = clock.tick(fps)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                input_layer.handle_pygame_event(event, screen_size)
                game.on_event(event)

            # timers fire after input so a tap and a stimulus in the same frame keep their order
            scheduler.run_due()
            frame_data = FrameData(timestamp=scheduler.clock(),
                                   taps=input_layer.drain())

            # ---- draw to render_surface ----
            render_surface.fill(BACKGROUND)
            game.on_update(dt, frame_data)
            game.on_draw(render_surface)

            # ---- present to window ----
            if mirror:
                flipped = pygame.transform.flip(render_surface, True, False)
                screen.blit(flipped, (0, 0))

            pygame.display.flip()

    finally:
        scheduler.cancel_all()
        game.on_unload()
        pygame.quit()
