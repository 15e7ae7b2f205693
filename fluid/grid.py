"""2D grid of fill levels plus a static obstacle mask. Shape (height, width), row 0 at the top."""

from typing import NamedTuple

import numpy as np

from fluid.constants import CAPACITY, DEFAULT_HEIGHT, DEFAULT_WIDTH, EMPTY


class ConfigurationError(ValueError):
    """Scenario-authoring mistake: bad size, coordinate outside the grid, invalid rule value."""


class Cell(NamedTuple):
    level: float
    obstacle: bool


class Grid:
    """Fill level per cell in [0, CAPACITY]; obstacle cells always hold EMPTY."""

    __slots__ = ("shape", "level", "obstacle")

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        if width < 1 or height < 1:
            raise ConfigurationError(f"grid size must be positive, got {width}x{height}")
        self.shape = (height, width)
        self.level = np.zeros(self.shape, dtype=np.float64)
        self.obstacle = np.zeros(self.shape, dtype=bool)

    @property
    def width(self) -> int:
        return self.shape[1]

    @property
    def height(self) -> int:
        return self.shape[0]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.shape[0] and 0 <= col < self.shape[1]

    def _check(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise ConfigurationError(
                f"cell ({row}, {col}) outside {self.width}x{self.height} grid"
            )

    def get_cell(self, row: int, col: int) -> Cell:
        self._check(row, col)
        return Cell(float(self.level[row, col]), bool(self.obstacle[row, col]))

    def fill_level(self, row: int, col: int) -> float:
        self._check(row, col)
        return float(self.level[row, col])

    def is_obstacle(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.obstacle[row, col])

    def total_volume(self) -> float:
        return float(np.sum(self.level))

    def set_obstacle(self, row: int, col: int) -> None:
        self._check(row, col)
        self.obstacle[row, col] = True
        self.level[row, col] = EMPTY

    def set_obstacle_rect(self, top: int, left: int, bottom: int, right: int) -> None:
        """Mark the inclusive rectangle [top..bottom] x [left..right] as wall."""
        self._check(top, left)
        self._check(bottom, right)
        if bottom < top or right < left:
            raise ConfigurationError(f"empty rectangle ({top}, {left}) - ({bottom}, {right})")
        self.obstacle[top : bottom + 1, left : right + 1] = True
        self.level[top : bottom + 1, left : right + 1] = EMPTY

    def set_obstacle_line(self, r0: int, c0: int, r1: int, c1: int) -> None:
        """Bresenham line of wall cells between two inclusive endpoints."""
        self._check(r0, c0)
        self._check(r1, c1)
        dr, dc = abs(r1 - r0), abs(c1 - c0)
        sr = 1 if r1 >= r0 else -1
        sc = 1 if c1 >= c0 else -1
        err = dc - dr
        r, c = r0, c0
        while True:
            self.obstacle[r, c] = True
            self.level[r, c] = EMPTY
            if (r, c) == (r1, c1):
                break
            e2 = 2 * err
            if e2 > -dr:
                err -= dr
                c += sc
            if e2 < dc:
                err += dc
                r += sr

    def clear_cell(self, row: int, col: int) -> None:
        self._check(row, col)
        self.obstacle[row, col] = False
        self.level[row, col] = EMPTY

    def inject_source(self, row: int, col: int) -> None:
        """Set a cell full of water; an obstacle there is replaced."""
        self._check(row, col)
        self.obstacle[row, col] = False
        self.level[row, col] = CAPACITY

    def copy(self) -> "Grid":
        out = Grid.__new__(Grid)
        out.shape = self.shape
        out.level = self.level.copy()
        out.obstacle = self.obstacle.copy()
        return out
