import pygame
from typing import Dict, Tuple

_FONTS: Dict[int, pygame.font.Font] = {}


def _font(size: int) -> pygame.font.Font:
    if size not in _FONTS:
        _FONTS[size] = pygame.font.SysFont(None, size)
    return _FONTS[size]


def draw_text(surface: pygame.Surface, text: str, pos: Tuple[int, int], color=(230, 230, 230), size=24):
    surface.blit(_font(size).render(text, True, color), pos)


def draw_text_centered(surface: pygame.Surface, text: str, center: Tuple[int, int], color=(230, 230, 230), size=24):
    img = _font(size).render(text, True, color)
    surface.blit(img, img.get_rect(center=center))


def draw_button(surface: pygame.Surface, rect: pygame.Rect, label: str,
                fg=(255, 255, 255), bg=(0, 0, 0), size=28, radius=10):
    """Filled rounded rectangle with a centered label."""
    pygame.draw.rect(surface, bg, rect, border_radius=radius)
    draw_text_centered(surface, label, rect.center, fg, size=size)
