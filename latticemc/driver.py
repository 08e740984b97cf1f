"""Load -> update -> save orchestration used by the CLI and self-check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import numpy as np

from .codec import load_grid, peek_header, save_grid
from .config.run_models import RunConfig
from .grid import Grid
from .kernel import SiteModel, run_sweeps
from .metrics import total_energy
from .registry import ModelEntry, ModelRegistry, build_default_registry

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Summary of one load/update/save run."""

    model: str
    tag: str
    extents: tuple[int, ...]
    steps: int
    energy_before: float
    energy_after: float
    acceptance_rate: float
    output: Path | None = None


@dataclass
class LoadedRun:
    """Grid and model selected from a file's header."""

    grid: Grid
    entry: ModelEntry
    model: SiteModel


def _registry_for(registry: ModelRegistry | None, models: Iterable[str] | None) -> ModelRegistry:
    reg = build_default_registry() if registry is None else registry
    if models is not None:
        reg = reg.restricted(models)
    return reg


def load_for_run(
    input_path: str | Path,
    config: RunConfig | None = None,
    *,
    registry: ModelRegistry | None = None,
    models: Iterable[str] | None = None,
) -> LoadedRun:
    """Read the header, dispatch on (tag, dimension), then load the grid.

    The header is checked before any payload is read, so malformed or
    unsupported files are rejected before a grid is allocated.
    """
    config = RunConfig() if config is None else config
    reg = _registry_for(registry, models)

    header = peek_header(input_path)
    entry = reg.resolve(header.tag, header.dimension)
    model = entry.build(config)
    grid = load_grid(input_path, vector_arity=config.vector_arity)
    logger.info("Loaded %s grid %s from %s (%s)", grid.site_type.tag, grid.extents, input_path, entry.name)
    return LoadedRun(grid=grid, entry=entry, model=model)


def run_loaded(
    loaded: LoadedRun,
    steps: int,
    config: RunConfig | None = None,
    rng: np.random.Generator | None = None,
) -> RunResult:
    """Run ``steps`` sweeps on an already loaded grid."""
    config = RunConfig() if config is None else config
    grid = loaded.grid
    e0 = total_energy(grid, loaded.model, config.stencil)
    stats = run_sweeps(grid, steps, model=loaded.model, config=config, rng=rng)
    e1 = total_energy(grid, loaded.model, config.stencil)
    return RunResult(
        model=loaded.entry.name,
        tag=grid.site_type.tag,
        extents=grid.extents,
        steps=int(steps),
        energy_before=e0,
        energy_after=e1,
        acceptance_rate=stats.acceptance_rate,
    )


def save_run(loaded: LoadedRun, result: RunResult, output_path: str | Path) -> RunResult:
    """Write the updated grid and record the output path on ``result``."""
    result.output = save_grid(loaded.grid, output_path)
    logger.info("Wrote %s after %d sweeps", result.output, result.steps)
    return result


def run_file(
    input_path: str | Path,
    output_path: str | Path,
    steps: int,
    config: RunConfig | None = None,
    *,
    registry: ModelRegistry | None = None,
    models: Iterable[str] | None = None,
    rng: np.random.Generator | None = None,
) -> RunResult:
    """Construct a grid from ``input_path``, run ``steps`` sweeps, write ``output_path``."""
    loaded = load_for_run(input_path, config, registry=registry, models=models)
    result = run_loaded(loaded, steps, config, rng=rng)
    return save_run(loaded, result, output_path)
