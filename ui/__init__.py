"""UI: grid view and parameter panel."""

from ui.grid_view import cell_at, draw_grid
from ui.panel import ParamPanel
from ui.colors import water_to_rgb

__all__ = ["cell_at", "draw_grid", "ParamPanel", "water_to_rgb"]
