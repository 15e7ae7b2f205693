"""
App shell: display and main loop. Simulation is tick-driven from elapsed time and
tick_rate (independent of frame rate). Taps refill between ticks; the mouse paints
water, walls and empty cells directly into the current grid. World, UI, and config
are wired here.
"""

import logging

import pygame

from fluid import ConfigurationError, Grid, SourceInjector, step
from fluid.scenario import build_scenario
from ui.grid_view import cell_at, draw_grid
from ui.panel import ParamPanel
from logging_config import setup_logging
import config

logger = logging.getLogger(__name__)

TITLE = "Trickle"
WIDTH, HEIGHT = 1000, 640
BACKGROUND = (0, 0, 0)
GRID_PANEL_WIDTH = 640  # left panel for grid; parameter panel gets the rest


def _build(cfg: dict) -> tuple[dict, Grid, SourceInjector, int]:
    """Scenario from cfg, plus the config it was actually built from.

    A broken saved config falls back to the default world instead of crashing the window;
    the panel is then seeded from the defaults so its flow rules stay valid.
    """
    try:
        return (cfg, *build_scenario(cfg))
    except ConfigurationError:
        logger.warning("Falling back to default scenario")
        fallback = config._default_config()
        return (fallback, *build_scenario(fallback))


def _seed_for(params: dict, actual_seed_used: int) -> int:
    s = params.get("seed", -1)
    if s == -1 and params.get("lock_seed"):
        s = actual_seed_used
    return s


def _paint(grid: Grid, grid_rect: pygame.Rect) -> None:
    """Left = water, right = wall, middle = erase; applied to the current grid between ticks."""
    buttons = pygame.mouse.get_pressed()
    if not any(buttons):
        return
    cell = cell_at(grid_rect, grid.shape, pygame.mouse.get_pos())
    if cell is None:
        return
    if buttons[0]:
        grid.inject_source(*cell)
    elif buttons[2]:
        grid.set_obstacle(*cell)
    elif buttons[1]:
        grid.clear_cell(*cell)


def run() -> None:
    setup_logging()
    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption(TITLE)
    clock = pygame.time.Clock()
    config.refresh_index()

    cfg = config.load_config()
    if cfg.get("lock_seed") and cfg.get("seed", -1) == -1 and "actual_seed_used" in cfg:
        cfg = {**cfg, "seed": cfg["actual_seed_used"]}
    cfg, grid, injector, actual_seed_used = _build(cfg)

    total_ticks = int(cfg.get("tick_count", 0))
    last = config.get_last_config()
    state = config.load_state(last[0], last[1]) if last else None
    if state is not None and state["level"].shape == grid.shape:
        grid.level[:] = state["level"]
        grid.obstacle[:] = state["obstacle"]
        total_ticks = state["tick_count"]
        actual_seed_used = cfg.get("actual_seed_used", actual_seed_used)
    elif last:
        total_ticks = 0

    grid_rect = pygame.Rect(0, 0, GRID_PANEL_WIDTH, HEIGHT)
    panel_rect = pygame.Rect(GRID_PANEL_WIDTH, 0, WIDTH - GRID_PANEL_WIDTH, HEIGHT)

    def rebuild(scenario_cfg: dict) -> None:
        nonlocal grid, injector, actual_seed_used, total_ticks
        _, grid, injector, actual_seed_used = _build(scenario_cfg)
        total_ticks = 0

    def do_restart() -> None:
        params = panel.get_params()
        rebuild({**panel.scenario_config(), "seed": _seed_for(params, actual_seed_used)})

    def save_current_config() -> None:
        params = panel.get_params()
        name = (params.get("config_name") or "").strip() or "unnamed"
        cfg = panel.scenario_config()
        cfg["config_name"] = name
        state = {
            "level": grid.level.copy(),
            "obstacle": grid.obstacle.copy(),
            "tick_count": total_ticks,
        }
        config.save_config(cfg, actual_seed_used, name, tick_count=total_ticks, state=state)
        panel.set_selected_config(actual_seed_used, config._sanitize_name(name))

    def load_config_callback(seed_id: int, name: str) -> None:
        nonlocal grid, injector, total_ticks, actual_seed_used
        path = config.get_config_path(seed_id, name)
        if not path.exists():
            logger.warning("Config %s no longer on disk", path.name)
            return
        cfg = config.load_config(path)
        try:
            grid, injector, actual_seed_used = build_scenario({**cfg, "seed": cfg.get("actual_seed_used", seed_id)})
        except ConfigurationError:
            logger.warning("Not loading %s: invalid scenario", path.name)
            return
        total_ticks = 0
        panel.apply_config(cfg)
        panel.params["config_name"] = name
        state = config.load_state(seed_id, name)
        if state is not None and state["level"].shape == grid.shape:
            grid.level[:] = state["level"]
            grid.obstacle[:] = state["obstacle"]
            total_ticks = state["tick_count"]
            actual_seed_used = cfg.get("actual_seed_used", seed_id)

    panel = ParamPanel(
        panel_rect,
        {
            **cfg,
            "width": grid.width,
            "height": grid.height,
            "seed": cfg.get("actual_seed_used", cfg.get("seed", -1)),
            "config_name": last[1] if last else "",
            "selected_config": last,
            "on_load_config": load_config_callback,
        },
        on_save=save_current_config,
        on_restart=do_restart,
    )

    tick_accum = 0.0
    running = True

    while running:
        dt_ms = clock.tick(60)
        dt_s = dt_ms / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                break
            panel.handle_event(event)

        params = panel.get_params()
        # Live world size: rebuild from the panel; JSON-placed taps/walls belong to the old size
        if (params["height"], params["width"]) != grid.shape:
            panel.clear_layout()
            rebuild({**panel.scenario_config(), "seed": _seed_for(params, actual_seed_used)})

        _paint(grid, grid_rect)

        if not params["paused"]:
            tick_rate = max(1, min(60, params["tick_rate"]))
            tick_accum += dt_s * tick_rate
            # Cap ticks per frame so we never freeze when tick rate exceeds what we can do
            max_ticks_per_frame = max(4, tick_rate // 10)
            num_ticks = min(int(tick_accum), max_ticks_per_frame)
            tick_accum -= num_ticks
            tick_accum = min(tick_accum, max_ticks_per_frame)  # prevent unbounded backlog
            injector.interval = max(1, int(params["source_interval"]))
            injector.enabled = params["sources_enabled"]
            rules = panel.rules()
            for _ in range(num_ticks):
                injector.apply(grid, total_ticks)
                grid = step(grid, **rules)
                total_ticks += 1

        screen.fill(BACKGROUND)
        draw_grid(
            screen,
            grid_rect,
            grid.level,
            grid.obstacle,
            view_mode=params.get("view_mode", "default"),
            render_scale=params.get("render_scale", 1),
        )
        panel.draw(screen, tick_count=total_ticks, actual_used_seed=actual_seed_used, volume=grid.total_volume())
        panel.draw_tooltip(screen)
        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    run()
