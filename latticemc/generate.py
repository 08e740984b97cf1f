"""Random initial grids for the Potts and Heisenberg models."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .grid import Grid
from .heisenberg import unit_rows
from .sites import DEFAULT_VECTOR_ARITY, SCALAR_INT, vector_double
from .shapes import ensure_extents


def random_potts_grid(
    extents: Sequence[int],
    grains: int,
    rng: np.random.Generator,
    boundary: str | Sequence[str] = "periodic",
) -> Grid:
    """Grain ids drawn uniformly from ``[0, grains)``."""
    ext = ensure_extents(extents)
    if int(grains) < 1:
        raise ValueError(f"grains must be >= 1, got {grains}.")
    values = rng.integers(0, int(grains), size=ext)
    return Grid.from_array(values, SCALAR_INT, boundary=boundary)


def random_heisenberg_grid(
    extents: Sequence[int],
    rng: np.random.Generator,
    arity: int = DEFAULT_VECTOR_ARITY,
    boundary: str | Sequence[str] = "periodic",
) -> Grid:
    """Uniformly oriented unit spins."""
    ext = ensure_extents(extents)
    site_type = vector_double(arity)
    raw = rng.standard_normal((int(np.prod(ext)), site_type.arity))
    values = unit_rows(raw).reshape(ext + (site_type.arity,))
    return Grid.from_array(values, site_type, boundary=boundary)
