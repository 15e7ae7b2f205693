"""Left panel: simulation grid with thin grey border; cell colors from fill level and walls."""

import pygame
import numpy as np

from ui.colors import water_to_rgb

BORDER_COLOR = (80, 80, 80)
BORDER_PX = 1
DOTS_BG = (0, 0, 0)
SQUIRCLE_EXPONENT = 2.6  # superellipse exponent > 2 (squircle; larger = closer to square)


def _bilinear_upsample(arr: np.ndarray, scale: int) -> np.ndarray:
    """Upsample 2D array by scale using bilinear interpolation. Returns (h*scale, w*scale)."""
    h, w = arr.shape
    if scale <= 1:
        return arr
    I = np.arange(h * scale, dtype=np.float64)
    J = np.arange(w * scale, dtype=np.float64)
    U = np.clip(I / scale, 0, max(0.0, h - 1.001))
    V = np.clip(J / scale, 0, max(0.0, w - 1.001))
    i0 = U.astype(np.int32)
    j0 = V.astype(np.int32)
    i1 = np.minimum(i0 + 1, h - 1)
    j1 = np.minimum(j0 + 1, w - 1)
    su = (U - i0).reshape(-1, 1)
    sv = (V - j0).reshape(1, -1)
    i0_ = i0[:, np.newaxis]
    j0_ = j0[np.newaxis, :]
    i1_ = i1[:, np.newaxis]
    j1_ = j1[np.newaxis, :]
    p00 = arr[i0_, j0_]
    p01 = arr[i0_, j1_]
    p10 = arr[i1_, j0_]
    p11 = arr[i1_, j1_]
    out = (1 - su) * (1 - sv) * p00 + (1 - su) * sv * p01 + su * (1 - sv) * p10 + su * sv * p11
    return out.astype(arr.dtype)


def _upsample_nearest(arr: np.ndarray, scale: int) -> np.ndarray:
    return np.repeat(np.repeat(arr, scale, axis=0), scale, axis=1)


def cell_size(rect: pygame.Rect, shape: tuple[int, int]) -> tuple[int, int]:
    h, w = shape
    return max(1, rect.width // w), max(1, rect.height // h)


def cell_at(rect: pygame.Rect, shape: tuple[int, int], pos: tuple[int, int]) -> tuple[int, int] | None:
    """(row, col) under a screen position, or None outside the drawn grid."""
    cell_w, cell_h = cell_size(rect, shape)
    col = (pos[0] - rect.x) // cell_w
    row = (pos[1] - rect.y) // cell_h
    if 0 <= row < shape[0] and 0 <= col < shape[1]:
        return int(row), int(col)
    return None


def _surface_from_rgb(rgb: np.ndarray) -> pygame.Surface:
    h, w = rgb.shape[0], rgb.shape[1]
    try:
        return pygame.image.fromstring(rgb.tobytes(), (w, h), "RGB")
    except TypeError:
        return pygame.image.frombytes(rgb.tobytes(), (w, h), "RGB")


def _draw_grid_into_rect(surface: pygame.Surface, rect: pygame.Rect, rgb: np.ndarray) -> None:
    """Draw rgb grid (h, w, 3) into rect; cell size from rect dimensions."""
    h, w = rgb.shape[0], rgb.shape[1]
    cell_w, cell_h = cell_size(rect, (h, w))
    for i in range(h):
        for j in range(w):
            color = (int(rgb[i, j, 0]), int(rgb[i, j, 1]), int(rgb[i, j, 2]))
            pygame.draw.rect(surface, color, (rect.x + j * cell_w, rect.y + i * cell_h, cell_w + 1, cell_h + 1))


def _squircle_mask(cell_h: int, cell_w: int, n: float, antialias: float, boundary: np.ndarray) -> np.ndarray:
    """Per-cell alpha (h, cell_h, w, cell_w). boundary (h, w) = size_scale**n."""
    r = max(0.5, min(cell_w, cell_h) * 0.5)
    pi = np.arange(cell_h, dtype=np.float64)[:, np.newaxis]
    pj = np.arange(cell_w, dtype=np.float64)[np.newaxis, :]
    x = (pj + 0.5 - cell_w * 0.5) / r
    y = (pi + 0.5 - cell_h * 0.5) / r
    g = np.abs(x) ** n + np.abs(y) ** n
    b = boundary[:, np.newaxis, :, np.newaxis]
    g4 = g[np.newaxis, :, np.newaxis, :]
    return np.clip((b + antialias - g4) / (2 * antialias), 0.0, 1.0)


def _draw_grid_dots(surface: pygame.Surface, rect: pygame.Rect, rgb: np.ndarray, size: np.ndarray) -> None:
    """One squircle per cell; dot size = 0.5 + 0.5*size (full cell at 1, half at 0)."""
    h, w = size.shape
    cell_w, cell_h = cell_size(rect, (h, w))
    boundary = np.clip(0.5 + 0.5 * size, 0.5, 1.0) ** SQUIRCLE_EXPONENT
    mask = _squircle_mask(cell_h, cell_w, SQUIRCLE_EXPONENT, 0.2, boundary)[:, :, :, :, np.newaxis]
    rgb5 = rgb[:, np.newaxis, :, np.newaxis, :]
    out = np.clip(rgb5 * mask, 0, 255).round().astype(np.uint8).reshape(h * cell_h, w * cell_w, 3)
    surface.fill(DOTS_BG, rect)
    surface.blit(_surface_from_rgb(out), rect.topleft)


def draw_grid(
    surface: pygame.Surface,
    grid_rect: pygame.Rect,
    level: np.ndarray,
    obstacle: np.ndarray,
    view_mode: str = "default",
    render_scale: int = 1,
) -> None:
    """Draw the grid into grid_rect. render_scale 2+ = bilinear upsample of the fill level
    (walls stay blocky), color map, then scale down to grid_rect for smoother water surfaces."""
    h, w = level.shape
    if h == 0 or w == 0:
        return
    scale = max(1, min(4, render_scale))
    if view_mode == "dots":
        rgb = water_to_rgb(level, obstacle, view_mode)
        size = np.where(obstacle, 1.0, np.clip(level, 0.0, 1.0))
        _draw_grid_dots(surface, grid_rect, rgb, size)
    elif scale == 1:
        _draw_grid_into_rect(surface, grid_rect, water_to_rgb(level, obstacle, view_mode))
    else:
        level_hr = _bilinear_upsample(level, scale)
        obstacle_hr = _upsample_nearest(obstacle, scale)
        rgb_hr = water_to_rgb(level_hr, obstacle_hr, view_mode)
        scaled = pygame.transform.smoothscale(_surface_from_rgb(rgb_hr), (grid_rect.width, grid_rect.height))
        surface.blit(scaled, grid_rect.topleft)
    pygame.draw.rect(surface, BORDER_COLOR, grid_rect, BORDER_PX)
