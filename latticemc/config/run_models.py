"""Typed run configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal

from ..sites import DEFAULT_VECTOR_ARITY

SweepPolicy = Literal["random", "raster", "checkerboard"]

SWEEP_POLICIES: tuple[str, ...] = ("random", "raster", "checkerboard")


@dataclass(frozen=True)
class RunConfig:
    """Monte Carlo run parameters.

    ``kT <= 0`` is the zero-temperature limit: only moves that do not
    raise the local energy are accepted.
    """

    kT: float = 0.5
    coupling: float = 1.0
    seed: int | None = None
    sweep: SweepPolicy = "random"
    stencil: Literal["moore", "von_neumann"] = "moore"
    proposal: Literal["reorient", "perturb"] = "reorient"
    step_size: float = 0.3
    vector_arity: int = DEFAULT_VECTOR_ARITY

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))
