"""Simulation constants. Empty = 0, full = CAPACITY; volume conserved by every transfer."""

EMPTY = 0.0
CAPACITY = 1.0
# Straight down: half a cell per tick, so a full cell needs two ticks to empty.
GRAVITY_RATE = 0.5
# Sideways: (source - target) * LATERAL_COEFF / distance, up to SPREAD_DISTANCE cells each side.
LATERAL_COEFF = 0.1
LATERAL_THRESHOLD = 0.5
SPREAD_DISTANCE = 3
DIAGONAL_RATE = 0.25
EPSILON = 1e-9

DEFAULT_WIDTH, DEFAULT_HEIGHT = 64, 48
DEFAULT_TICK_RATE = 20
DEFAULT_SOURCE_INTERVAL = 4
