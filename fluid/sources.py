"""Taps: cells refilled to full every `interval` ticks, applied to the current grid between ticks."""

import logging
from typing import Iterable

from fluid.constants import DEFAULT_SOURCE_INTERVAL
from fluid.grid import ConfigurationError, Grid

logger = logging.getLogger(__name__)


class SourceInjector:
    __slots__ = ("points", "interval", "enabled")

    def __init__(
        self,
        points: Iterable[tuple[int, int]] = (),
        interval: int = DEFAULT_SOURCE_INTERVAL,
        enabled: bool = True,
    ) -> None:
        if interval < 1:
            raise ConfigurationError(f"source interval must be >= 1, got {interval}")
        self.points = [(int(r), int(c)) for r, c in points]
        self.interval = int(interval)
        self.enabled = enabled

    def validate(self, grid: Grid) -> None:
        for r, c in self.points:
            if not grid.in_bounds(r, c):
                raise ConfigurationError(
                    f"source ({r}, {c}) outside {grid.width}x{grid.height} grid"
                )

    def due(self, tick: int) -> bool:
        return self.enabled and bool(self.points) and tick % self.interval == 0

    def apply(self, grid: Grid, tick: int) -> bool:
        """Fill every source cell if this tick is due. Returns True when something was stamped."""
        if not self.due(tick):
            return False
        for r, c in self.points:
            grid.inject_source(r, c)
        logger.debug("tick %d: injected %d source cells", tick, len(self.points))
        return True
