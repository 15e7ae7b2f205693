"""Fluid: grid of fill levels and tick-driven gravity / spread / slide flow."""

from fluid.grid import Cell, ConfigurationError, Grid
from fluid.flow import run, step, validate_rules
from fluid.sources import SourceInjector
from fluid.transfer import transfer, transfer_amount
from fluid.constants import CAPACITY, DEFAULT_HEIGHT, DEFAULT_WIDTH, EMPTY

__all__ = [
    "Cell", "ConfigurationError", "Grid", "run", "step", "validate_rules", "SourceInjector",
    "transfer", "transfer_amount", "CAPACITY", "DEFAULT_HEIGHT", "DEFAULT_WIDTH", "EMPTY",
]
