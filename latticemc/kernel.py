"""Metropolis Monte Carlo update kernel.

One sweep is ``grid.size`` attempted single-site updates. Per attempt:

1. select a site (sweep policy)
2. propose a new value (model)
3. compare local energies against the site's neighbors
4. accept if the energy does not rise, else with probability
   ``exp(-dE / kT)``

Sweep policies:
  - "random": ``grid.size`` independent uniform site picks per sweep
  - "raster": flat indices 0..N-1
  - "checkerboard": color classes in order, raster within a class; sites
    of one color share no neighborhood, so a class may be updated in any
    order without changing the result of the Metropolis rule

Random draws per attempt happen in a fixed order (site, proposal,
acceptance) from a single ``numpy.random.Generator``, so a seeded run is
reproducible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from .config.run_models import RunConfig
from .errors import UnsupportedTypeError
from .grid import Grid
from .sites import SiteType

logger = logging.getLogger(__name__)


class SiteModel(Protocol):
    name: str

    def accepts(self, site_type: SiteType) -> bool: ...

    def local_energy(self, value, neighbor_values: np.ndarray) -> float: ...

    def propose(self, current, neighbor_values: np.ndarray, rng: np.random.Generator): ...


@dataclass
class SweepStats:
    """Attempt/acceptance counters collected over a run."""

    attempts: int = 0
    accepted: int = 0
    per_sweep: list[float] = field(default_factory=list)

    def record(self, attempts: int, accepted: int) -> None:
        self.attempts += attempts
        self.accepted += accepted
        self.per_sweep.append(accepted / attempts if attempts else 0.0)

    @property
    def sweeps(self) -> int:
        return len(self.per_sweep)

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.attempts if self.attempts else 0.0


def default_model(site_type: SiteType, config: RunConfig | None = None) -> SiteModel:
    """Model matching a site type, from the registry's model table."""
    from .registry import factory_for_tag

    config = RunConfig() if config is None else config
    return factory_for_tag(site_type.tag)(config)


def metropolis_accept(delta_e: float, kT: float, rng: np.random.Generator) -> bool:
    """Metropolis criterion; draws a uniform only for uphill moves at kT > 0."""
    if delta_e <= 0.0:
        return True
    if kT <= 0.0:
        return False
    return bool(rng.random() < math.exp(-delta_e / kT))


def checkerboard_order(grid: Grid, stencil: str = "moore") -> np.ndarray:
    """Flat indices grouped by color class.

    von Neumann colors by parity of the coordinate sum (2 classes), Moore
    by per-axis parity (2^D classes). Odd periodic extents break the
    independence of classes across the wrap; the order stays fixed.
    """
    coords = np.indices(grid.extents).reshape(grid.dimension, grid.size)
    if str(stencil).lower() == "von_neumann":
        color = coords.sum(axis=0) % 2
    else:
        weights = (2 ** np.arange(grid.dimension))[:, None]
        color = ((coords % 2) * weights).sum(axis=0)
    return np.argsort(color, kind="stable")


def _fixed_order(grid: Grid, config: RunConfig) -> np.ndarray | None:
    if config.sweep == "raster":
        return np.arange(grid.size)
    if config.sweep == "checkerboard":
        return checkerboard_order(grid, config.stencil)
    if config.sweep == "random":
        return None
    raise ValueError(f"unknown sweep policy '{config.sweep}'.")


def _attempt(
    model: SiteModel,
    flat: np.ndarray,
    site: int,
    neighbors: np.ndarray,
    kT: float,
    rng: np.random.Generator,
) -> bool:
    neighbor_values = flat[neighbors]
    current = np.array(flat[site], copy=True)
    proposed = model.propose(current, neighbor_values, rng)
    if np.array_equal(proposed, current):
        return False

    delta_e = model.local_energy(proposed, neighbor_values) - model.local_energy(current, neighbor_values)
    if not metropolis_accept(delta_e, kT, rng):
        return False
    flat[site] = proposed
    return True


def run_sweeps(
    grid: Grid,
    steps: int,
    *,
    model: SiteModel | None = None,
    config: RunConfig | None = None,
    rng: np.random.Generator | None = None,
) -> SweepStats:
    """Perform ``steps`` sweeps in place and return acceptance statistics."""
    if int(steps) < 0:
        raise ValueError(f"steps must be >= 0, got {steps}.")
    config = RunConfig() if config is None else config
    if model is None:
        model = default_model(grid.site_type, config)
    elif not model.accepts(grid.site_type):
        raise UnsupportedTypeError(
            f"model '{model.name}' cannot update site type '{grid.site_type.tag}'."
        )
    if rng is None:
        rng = np.random.default_rng(config.seed)

    stats = SweepStats()
    if int(steps) == 0:
        return stats

    table = grid.neighbor_table(config.stencil)
    flat = grid.flat
    order = _fixed_order(grid, config)
    n_sites = grid.size
    kT = float(config.kT)

    for sweep in range(int(steps)):
        sites = rng.integers(0, n_sites, size=n_sites) if order is None else order
        accepted = 0
        for site in sites.tolist():
            neighbors = table[site]
            if neighbors.size == 0:
                continue
            if _attempt(model, flat, site, neighbors, kT, rng):
                accepted += 1
        stats.record(n_sites, accepted)
        logger.debug("sweep %d: accepted %d/%d", sweep + 1, accepted, n_sites)

    logger.info(
        "%s: %d sweeps on %s, acceptance %.4f",
        model.name,
        stats.sweeps,
        grid.extents,
        stats.acceptance_rate,
    )
    return stats


def update(
    grid: Grid,
    steps: int,
    *,
    model: SiteModel | None = None,
    config: RunConfig | None = None,
    rng: np.random.Generator | None = None,
) -> None:
    """Perform exactly ``steps`` sweeps, mutating ``grid`` in place."""
    run_sweeps(grid, steps, model=model, config=config, rng=rng)
