"""
Single transfer primitive. Down, sideways and diagonal flow are all this call with a
different target and rate. The amount is bounded by target headroom, the rate, and
what the source actually holds, so no call can create volume or push a level out
of [0, capacity].
"""

import numpy as np


def transfer_amount(source_level: float, target_level: float, capacity: float, rate: float) -> float:
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    if rate < 0:
        raise ValueError(f"rate must be non-negative, got {rate}")
    headroom = capacity - target_level
    amount = min(headroom, rate, source_level)
    return amount if amount > 0.0 else 0.0


def transfer(
    level: np.ndarray,
    source: tuple[int, int],
    target: tuple[int, int],
    capacity: float,
    rate: float,
) -> float:
    """Move volume from source to target in place; returns the amount moved."""
    source_level, target_level = float(level[source]), float(level[target])
    amount = transfer_amount(source_level, target_level, capacity, rate)
    if not amount:
        return 0.0
    # The add may round past capacity; the source gives up only what the target gained.
    filled = min(target_level + amount, capacity)
    amount = filled - target_level
    level[target] = filled
    level[source] = max(source_level - amount, 0.0)
    return amount
