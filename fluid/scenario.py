"""
Build a ready-to-run world from a config dict: grid size, walls (explicit rects/lines
plus optional seeded random ledges), taps and flow rules. Every authoring mistake is
raised as ConfigurationError here, before the first tick.
"""

import logging

from fluid.constants import (
    CAPACITY,
    DEFAULT_HEIGHT,
    DEFAULT_SOURCE_INTERVAL,
    DEFAULT_WIDTH,
    DIAGONAL_RATE,
    GRAVITY_RATE,
    LATERAL_COEFF,
    LATERAL_THRESHOLD,
    SPREAD_DISTANCE,
)
from fluid.flow import validate_rules
from fluid.grid import ConfigurationError, Grid
from fluid.seed_util import pick_ledges
from fluid.sources import SourceInjector

logger = logging.getLogger(__name__)

RULE_DEFAULTS = {
    "capacity": CAPACITY,
    "gravity_rate": GRAVITY_RATE,
    "lateral_coeff": LATERAL_COEFF,
    "lateral_threshold": LATERAL_THRESHOLD,
    "diagonal_rate": DIAGONAL_RATE,
    "spread_distance": SPREAD_DISTANCE,
}


def rules_from_config(cfg: dict) -> dict:
    """Step keyword arguments from top-level config keys; missing keys use the constants."""
    rules = {k: cfg.get(k, v) for k, v in RULE_DEFAULTS.items()}
    try:
        validate_rules(**rules)
    except TypeError as exc:
        raise ConfigurationError(f"flow rules must be numbers: {rules}") from exc
    rules["spread_distance"] = int(rules["spread_distance"])
    return rules


def _apply_obstacle(grid: Grid, entry: dict) -> None:
    if "rect" in entry:
        top, left, bottom, right = entry["rect"]
        grid.set_obstacle_rect(top, left, bottom, right)
    elif "line" in entry:
        r0, c0, r1, c1 = entry["line"]
        grid.set_obstacle_line(r0, c0, r1, c1)
    elif "cell" in entry:
        r, c = entry["cell"]
        grid.set_obstacle(r, c)
    else:
        raise ConfigurationError(f"obstacle entry needs 'rect', 'line' or 'cell': {entry!r}")


def build_scenario(cfg: dict) -> tuple[Grid, SourceInjector, int]:
    """Return (grid, injector, seed_used).

    Flow rules and sources are validated here; sources are not stamped, the first due tick does that.
    """
    world = cfg.get("world", {})
    try:
        width = int(world.get("width", DEFAULT_WIDTH))
        height = int(world.get("height", DEFAULT_HEIGHT))
        rules_from_config(cfg)
        grid = Grid(width, height)
        for entry in cfg.get("obstacles", []):
            _apply_obstacle(grid, entry)
        ledges, seed_used = pick_ledges(width, height, int(cfg.get("seed", -1)), int(cfg.get("ledges", 0)))
        for top, left, bottom, right in ledges:
            grid.set_obstacle_rect(top, left, bottom, right)
        injector = SourceInjector(
            [tuple(p) for p in cfg.get("sources", [])],
            interval=int(cfg.get("source_interval", DEFAULT_SOURCE_INTERVAL)),
            enabled=bool(cfg.get("sources_enabled", True)),
        )
        injector.validate(grid)
    except (ConfigurationError, TypeError, ValueError) as exc:
        logger.error("Invalid scenario: %s", exc)
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(str(exc)) from exc
    logger.info(
        "Scenario %dx%d: %d walls, %d ledges, %d sources every %d ticks (seed %d)",
        width, height, int(grid.obstacle.sum()), len(ledges), len(injector.points), injector.interval, seed_used,
    )
    return grid, injector, seed_used
