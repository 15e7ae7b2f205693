"""
Per-tick update: gravity, then sideways spread, then diagonal slide.

Double buffered: the returned grid starts as a copy of the input and every transfer
reads and writes that copy. Which cells act this tick is decided from the input
(pre-tick) levels only, so water that arrived in a cell during this tick does not
move again until the next one. Rows run bottom to top, columns left to right.
"""

import logging

import numpy as np

from fluid.constants import (
    CAPACITY,
    DIAGONAL_RATE,
    EPSILON,
    GRAVITY_RATE,
    LATERAL_COEFF,
    LATERAL_THRESHOLD,
    SPREAD_DISTANCE,
)
from fluid.grid import ConfigurationError, Grid
from fluid.transfer import transfer

logger = logging.getLogger(__name__)


def validate_rules(
    capacity: float = CAPACITY,
    gravity_rate: float = GRAVITY_RATE,
    lateral_coeff: float = LATERAL_COEFF,
    lateral_threshold: float = LATERAL_THRESHOLD,
    diagonal_rate: float = DIAGONAL_RATE,
    spread_distance: int = SPREAD_DISTANCE,
) -> None:
    if capacity <= 0:
        raise ConfigurationError(f"capacity must be positive, got {capacity}")
    for name, value in (
        ("gravity_rate", gravity_rate),
        ("lateral_coeff", lateral_coeff),
        ("lateral_threshold", lateral_threshold),
        ("diagonal_rate", diagonal_rate),
    ):
        if value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")
    if spread_distance < 0 or int(spread_distance) != spread_distance:
        raise ConfigurationError(f"spread_distance must be a non-negative integer, got {spread_distance}")


def _spread(
    level: np.ndarray,
    obstacle: np.ndarray,
    r: int,
    c: int,
    direction: int,
    lateral_coeff: float,
    spread_distance: int,
    capacity: float,
) -> float:
    """One sideways sweep, nearest cell first. Walls are skipped; the grid edge ends the sweep."""
    width = level.shape[1]
    moved = 0.0
    for distance in range(1, spread_distance + 1):
        cc = c + direction * distance
        if cc < 0 or cc >= width:
            break
        if obstacle[r, cc]:
            continue
        src, dst = level[r, c], level[r, cc]
        if dst < src:
            rate = (src - dst) * lateral_coeff / distance
            moved += transfer(level, (r, c), (r, cc), capacity, rate)
    return moved


def step(
    grid: Grid,
    *,
    capacity: float = CAPACITY,
    gravity_rate: float = GRAVITY_RATE,
    lateral_coeff: float = LATERAL_COEFF,
    lateral_threshold: float = LATERAL_THRESHOLD,
    diagonal_rate: float = DIAGONAL_RATE,
    spread_distance: int = SPREAD_DISTANCE,
) -> Grid:
    """One tick. Returns the next grid; the argument is left untouched."""
    validate_rules(capacity, gravity_rate, lateral_coeff, lateral_threshold, diagonal_rate, spread_distance)
    spread_distance = int(spread_distance)
    nxt = grid.copy()
    level, obstacle = nxt.level, nxt.obstacle
    height, width = grid.shape
    active = (grid.level > 0.0) & ~grid.obstacle
    moved = 0.0
    # Bottom row has nothing below it and never acts.
    for r in range(height - 2, -1, -1):
        below = r + 1
        for c in np.flatnonzero(active[r]).tolist():
            if not obstacle[below, c]:
                moved += transfer(level, (r, c), (below, c), capacity, gravity_rate)
            if level[r, c] <= 0.0:
                continue
            if not obstacle[below, c] and level[below, c] < capacity - EPSILON:
                # Still room straight down: keep falling next tick rather than spreading now.
                continue
            if obstacle[below, c] or level[below, c] > lateral_threshold:
                moved += _spread(level, obstacle, r, c, 1, lateral_coeff, spread_distance, capacity)
                moved += _spread(level, obstacle, r, c, -1, lateral_coeff, spread_distance, capacity)
            if level[r, c] <= 0.0:
                continue
            for cc in (c + 1, c - 1):
                if 0 <= cc < width and not obstacle[below, cc] and level[below, cc] < capacity - EPSILON:
                    moved += transfer(level, (r, c), (below, cc), capacity, diagonal_rate)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("step: %d active cells, moved %.6f, total %.6f", int(active.sum()), moved, nxt.total_volume())
    return nxt


def run(grid: Grid, ticks: int, injector=None, start_tick: int = 0, **rules) -> Grid:
    """Advance `ticks` ticks. The injector, if any, stamps sources into the current grid before each tick."""
    current = grid.copy() if injector is not None else grid
    for tick in range(start_tick, start_tick + ticks):
        if injector is not None:
            injector.apply(current, tick)
        current = step(current, **rules)
    return current
