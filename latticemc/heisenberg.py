"""Heisenberg model for continuous spin relaxation.

Sites hold real vectors. Exchange energy uses unit vectors, so the
stored magnitude does not enter the energy and a zero vector couples to
nothing.
"""

from __future__ import annotations

from typing import Literal

import numpy as np

from .sites import TAG_VECTOR_DOUBLE, SiteType

Proposal = Literal["reorient", "perturb"]
PROPOSALS: tuple[str, ...] = ("reorient", "perturb")


def unit(vec: np.ndarray) -> np.ndarray:
    """``vec`` scaled to unit length; zero vectors stay zero."""
    vec = np.asarray(vec, dtype=float)
    norm = float(np.linalg.norm(vec))
    if norm == 0.0:
        return np.zeros_like(vec)
    return vec / norm


def unit_rows(rows: np.ndarray) -> np.ndarray:
    """Row-wise ``unit`` for an (n, arity) array."""
    rows = np.asarray(rows, dtype=float)
    norms = np.linalg.norm(rows, axis=-1, keepdims=True)
    safe = np.where(norms > 0.0, norms, 1.0)
    return np.where(norms > 0.0, rows / safe, 0.0)


def random_unit_vector(rng: np.random.Generator, arity: int) -> np.ndarray:
    """Uniformly distributed direction on the (arity-1)-sphere."""
    while True:
        vec = rng.standard_normal(arity)
        norm = float(np.linalg.norm(vec))
        if norm > 0.0:
            return vec / norm


class HeisenbergModel:
    """Exchange-energy model on vector spins.

    ``proposal``:
      - "reorient": a fresh uniformly random direction
      - "perturb": current direction plus ``step_size`` Gaussian noise,
        renormalized
    """

    name = "heisenberg"

    def __init__(
        self,
        coupling: float = 1.0,
        proposal: str = "reorient",
        step_size: float = 0.3,
    ) -> None:
        proposal = str(proposal).lower()
        if proposal not in PROPOSALS:
            raise ValueError(f"proposal must be one of: {', '.join(PROPOSALS)}. Got '{proposal}'.")
        if step_size < 0.0:
            raise ValueError(f"step_size must be >= 0, got {step_size}.")
        self.coupling = float(coupling)
        self.proposal = proposal
        self.step_size = float(step_size)

    def accepts(self, site_type: SiteType) -> bool:
        return site_type.tag == TAG_VECTOR_DOUBLE and site_type.kind == "vector"

    def local_energy(self, value: np.ndarray, neighbor_values: np.ndarray) -> float:
        """Exchange energy -J * sum(s . s_n) over unit vectors."""
        if len(neighbor_values) == 0:
            return 0.0
        return -self.coupling * float(np.sum(unit_rows(neighbor_values) @ unit(value)))

    def propose(
        self,
        current: np.ndarray,
        neighbor_values: np.ndarray,
        rng: np.random.Generator,
    ) -> np.ndarray:
        del neighbor_values
        arity = len(current)
        if self.proposal == "reorient":
            return random_unit_vector(rng, arity)

        trial = unit(current) + self.step_size * rng.standard_normal(arity)
        norm = float(np.linalg.norm(trial))
        if norm == 0.0:
            return random_unit_vector(rng, arity)
        return trial / norm
