"""
Display-only color mapping. Fill level is absolute (0 = empty, capacity = full) so a
half cell always looks the same regardless of how much water is in the world.
Water runs a depth gradient from faint teal to deep blue; walls are flat grey.
"""

import numpy as np

BACKGROUND = np.array([0.0, 0.0, 0.0], dtype=np.float64)
WALL = np.array([0.42, 0.40, 0.38], dtype=np.float64)

# Depth: thin film → shallow teal → blue → deep navy
_WATER_STOPS = np.array([
    [0.0, 0.0, 0.0], [0.10, 0.30, 0.35], [0.15, 0.50, 0.75],
    [0.12, 0.38, 0.85], [0.06, 0.20, 0.65],
], dtype=np.float64)
_WATER_T = np.array([0.0, 0.05, 0.35, 0.75, 1.0], dtype=np.float64)

# Levels below this are drawn as background so residue does not tint empty air.
MIN_VISIBLE = 0.01

VIEW_MODES = ("default", "dots", "level_bw")


def _apply_gradient(t: np.ndarray, stops: np.ndarray, t_vals: np.ndarray) -> np.ndarray:
    """Map t in [0,1] to RGB via piecewise-linear stops. t 1D, returns (n, 3)."""
    t = np.clip(np.asarray(t, dtype=np.float64).reshape(-1), 0.0, 1.0)
    out = np.zeros((t.size, 3), dtype=np.float64)
    for i in range(len(t_vals) - 1):
        t0, t1 = t_vals[i], t_vals[i + 1]
        mask = (t >= t0) & (t < t1) if i < len(t_vals) - 2 else (t >= t0)
        s1 = ((t[mask] - t0) / max(1e-9, t1 - t0)).reshape(-1, 1)
        out[mask] = s1 * stops[i + 1] + (1.0 - s1) * stops[i]
    return out


def water_to_rgb(
    level: np.ndarray,
    obstacle: np.ndarray,
    view_mode: str = "default",
    capacity: float = 1.0,
) -> np.ndarray:
    """
    Returns (height, width, 3) uint8 RGB. view_mode: "default" / "dots" (depth gradient),
    "level_bw" (fill level as grey). Walls are grey in every mode.
    """
    h, w = level.shape
    t = np.clip(level / capacity, 0.0, 1.0)
    if view_mode == "level_bw":
        rgb = np.stack([t, t, t], axis=-1)
    else:
        rgb = _apply_gradient(t.reshape(-1), _WATER_STOPS, _WATER_T).reshape(h, w, 3)
        rgb[t < MIN_VISIBLE] = BACKGROUND
    rgb[obstacle] = WALL
    rgb = np.clip(rgb, 0, 1)
    return (rgb * 255).astype(np.uint8)
