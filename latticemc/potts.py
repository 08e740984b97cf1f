"""Potts model for grain growth.

Each site holds an integer grain id. The local energy of a site is the
number of neighbors carrying a different id, times the coupling J. A
proposal copies the id of a randomly chosen neighbor, so only ids
already present at a site's boundary can spread.
"""

from __future__ import annotations

import numpy as np

from .sites import SCALAR_INT, SiteType


class PottsModel:
    """Interfacial-energy Potts model on integer grain ids."""

    name = "potts"

    def __init__(self, coupling: float = 1.0) -> None:
        self.coupling = float(coupling)

    def accepts(self, site_type: SiteType) -> bool:
        return site_type.same_layout(SCALAR_INT)

    def local_energy(self, value: int | np.integer, neighbor_values: np.ndarray) -> float:
        """Interfacial energy of ``value`` against its neighbors."""
        return self.coupling * float(np.count_nonzero(neighbor_values != value))

    def propose(
        self,
        current: int | np.integer,
        neighbor_values: np.ndarray,
        rng: np.random.Generator,
    ) -> np.integer:
        """Grain id of a uniformly chosen neighbor."""
        del current
        return neighbor_values[int(rng.integers(len(neighbor_values)))]
