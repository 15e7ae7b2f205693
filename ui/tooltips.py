"""Tooltip constants, text, and drawing for parameter panel."""

import pygame
from typing import Optional

TOOLTIP_BG = (24, 28, 34)
TOOLTIP_BORDER = (58, 66, 78)
TOOLTIP_TEXT = (236, 240, 244)
TOOLTIP_MINMAX = (146, 152, 160)
TOOLTIP_MAX_WIDTH = 220
TOOLTIP_PADDING = 6
TOOLTIP_OFFSET_Y = 8
TOOLTIP_DESC_MINMAX_GAP = 4

# (description, min_max_meaning). Key = param name matching panel _tooltip_rects.
PARAM_TOOLTIPS = {
    "gravity_rate": (
        "Most water a cell can pour into the cell straight below it in one tick. "
        "At 0.5 a full cell needs two ticks to drain downwards.",
        "Min = water hangs in the air; max = drops fall a whole cell per tick.",
    ),
    "lateral_coeff": (
        "Sideways spread once the cell below is a wall or more than half full. "
        "Each of the 3 cells to either side gets (difference x coefficient / distance), nearest first.",
        "Min = tall piles that never level out; max = surfaces flatten quickly.",
    ),
    "diagonal_rate": (
        "Most water a resting cell can slide into the down-left and down-right cells per tick.",
        "Min = water stacks on ledge edges; max = water pours off edges.",
    ),
    "source_interval": (
        "Ticks between refills of every tap cell.",
        "Min = continuous stream; max = occasional drips.",
    ),
}


def wrap_tooltip_text(text: str, font: pygame.font.Font, max_width: int) -> list[str]:
    lines = []
    current: list[str] = []
    for word in text.split():
        w, _ = font.size(" ".join(current + [word]))
        if current and w > max_width:
            lines.append(" ".join(current))
            current = [word]
        else:
            current.append(word)
    if current:
        lines.append(" ".join(current))
    return lines


def _box_width(font: pygame.font.Font, lines: list[str]) -> int:
    return min(
        TOOLTIP_MAX_WIDTH + 2 * TOOLTIP_PADDING,
        max((font.size(l)[0] for l in lines), default=0) + 2 * TOOLTIP_PADDING,
    )


def draw_tooltip(
    surface: pygame.Surface,
    font: pygame.font.Font,
    small_font: pygame.font.Font,
    tooltip_raw: Optional[tuple[str, Optional[str]] | str],
    mouse_pos: tuple[int, int],
) -> None:
    if not tooltip_raw:
        return
    if isinstance(tooltip_raw, tuple):
        desc, min_max = tooltip_raw[0], (tooltip_raw[1] if len(tooltip_raw) > 1 else None)
    else:
        desc, min_max = tooltip_raw, None
    if not desc:
        return
    mx, my = mouse_pos
    lines_desc = wrap_tooltip_text(desc, font, TOOLTIP_MAX_WIDTH)
    lines_mm = wrap_tooltip_text(min_max, small_font, TOOLTIP_MAX_WIDTH) if min_max else []
    box_w = max(_box_width(font, lines_desc), _box_width(small_font, lines_mm))
    box_h = len(lines_desc) * font.get_height() + 2 * TOOLTIP_PADDING
    if lines_mm:
        box_h += TOOLTIP_DESC_MINMAX_GAP + len(lines_mm) * small_font.get_height()
    tx = mx + 12
    ty = my + TOOLTIP_OFFSET_Y
    sw, sh = surface.get_size()
    if tx + box_w > sw:
        tx = mx - box_w - 12
    if ty + box_h > sh:
        ty = my - box_h - TOOLTIP_OFFSET_Y
    tx = max(0, min(tx, sw - box_w))
    ty = max(0, min(ty, sh - box_h))
    tooltip_rect = pygame.Rect(tx, ty, box_w, box_h)
    pygame.draw.rect(surface, TOOLTIP_BG, tooltip_rect)
    pygame.draw.rect(surface, TOOLTIP_BORDER, tooltip_rect, 1)
    y_off = ty + TOOLTIP_PADDING
    for line in lines_desc:
        surface.blit(font.render(line, True, TOOLTIP_TEXT), (tx + TOOLTIP_PADDING, y_off))
        y_off += font.get_height()
    if lines_mm:
        y_off += TOOLTIP_DESC_MINMAX_GAP
        for line in lines_mm:
            surface.blit(small_font.render(line, True, TOOLTIP_MINMAX), (tx + TOOLTIP_PADDING, y_off))
            y_off += small_font.get_height()
