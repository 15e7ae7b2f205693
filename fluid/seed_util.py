"""Reproducible random ledges from a seed. Seed -1 = new random each call.
Ledges are derived from 0-1 relative coords so the same seed gives the same relative
layout for any world size (width, height)."""

import random
from typing import List, Tuple

Rect = Tuple[int, int, int, int]


def resolve_seed(seed: int) -> int:
    if seed == -1:
        return random.randint(0, 2**31 - 1)
    return seed


def pick_ledges(width: int, height: int, seed: int, count: int) -> Tuple[List[Rect], int]:
    """
    Return (ledges, seed_used). Each ledge is a one-row (top, left, bottom, right) rect
    in the middle band of the world, leaving the top rows free for sources and the
    bottom row free for the floor.
    """
    seed_used = resolve_seed(seed)
    rng = random.Random(seed_used)
    ledges: List[Rect] = []
    if width < 3 or height < 4:
        return ledges, seed_used
    for _ in range(count):
        ry = 0.25 + 0.5 * rng.random()
        rx = rng.random()
        rlen = 0.1 + 0.25 * rng.random()
        row = min(max(int(ry * height), 2), height - 2)
        length = max(2, int(rlen * width))
        left = min(int(rx * width), width - length)
        ledges.append((row, left, row, left + length - 1))
    return ledges, seed_used
