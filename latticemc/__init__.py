"""Lattice Monte Carlo microstructure simulation (Potts and Heisenberg models)."""

from .codec import load_grid, read_grid, save_grid, write
from .config import RunConfig
from .errors import (
    BoundaryError,
    ConfigError,
    FormatError,
    LatticeError,
    UnsupportedTypeError,
    UsageError,
)
from .grid import Grid
from .kernel import run_sweeps, update
from .sites import SCALAR_DOUBLE, SCALAR_INT, VECTOR_DOUBLE, SiteType, vector_double

__all__ = [
    "BoundaryError",
    "ConfigError",
    "FormatError",
    "Grid",
    "LatticeError",
    "RunConfig",
    "SCALAR_DOUBLE",
    "SCALAR_INT",
    "SiteType",
    "UnsupportedTypeError",
    "UsageError",
    "VECTOR_DOUBLE",
    "load_grid",
    "read_grid",
    "run_sweeps",
    "save_grid",
    "update",
    "vector_double",
    "write",
]
