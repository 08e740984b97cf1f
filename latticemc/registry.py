"""(type-tag, dimension) -> model factory dispatch table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Iterable

from .config.run_models import RunConfig
from .errors import UnsupportedTypeError
from .heisenberg import HeisenbergModel
from .kernel import SiteModel
from .potts import PottsModel
from .sites import TAG_SCALAR_INT, TAG_VECTOR_DOUBLE, canonical_tag

ModelFactory = Callable[[RunConfig], SiteModel]


@dataclass(frozen=True)
class ModelEntry:
    """One supported (tag, dimension) combination."""

    name: str
    tag: str
    dimension: int
    factory: ModelFactory

    def build(self, config: RunConfig) -> SiteModel:
        return self.factory(config)


class ModelRegistry:
    """Registry keyed by canonical type-tag and dimension."""

    def __init__(self, entries: Iterable[ModelEntry] | None = None) -> None:
        self._entries: dict[tuple[str, int], ModelEntry] = {}
        for entry in entries or ():
            self.add(entry)

    def add(self, entry: ModelEntry) -> None:
        if not callable(entry.factory):
            raise TypeError(f"Factory for '{entry.name}' must be callable.")
        self._entries[(canonical_tag(entry.tag), int(entry.dimension))] = entry

    def register(self, name: str, tag: str, dimension: int, factory: ModelFactory) -> None:
        self.add(ModelEntry(name=name, tag=canonical_tag(tag), dimension=int(dimension), factory=factory))

    def resolve(self, tag: str, dimension: int) -> ModelEntry:
        entry = self._entries.get((canonical_tag(tag), int(dimension)))
        if entry is None:
            supported = ", ".join(f"{t} ({d}D)" for t, d in self.supported())
            raise UnsupportedTypeError(
                f"unsupported grid data type '{tag}' in {dimension}D. Use one of: {supported}."
            )
        return entry

    def supported(self) -> tuple[tuple[str, int], ...]:
        return tuple(self._entries)

    def model_names(self) -> tuple[str, ...]:
        return tuple(sorted({entry.name for entry in self._entries.values()}))

    def restricted(self, names: Iterable[str]) -> "ModelRegistry":
        """Copy holding only entries for the named models."""
        wanted = {str(n).lower() for n in names}
        return ModelRegistry(e for e in self._entries.values() if e.name in wanted)


def _build_potts(config: RunConfig) -> SiteModel:
    return PottsModel(coupling=config.coupling)


def _build_heisenberg(config: RunConfig) -> SiteModel:
    return HeisenbergModel(coupling=config.coupling, proposal=config.proposal, step_size=config.step_size)


MODEL_FACTORIES: dict[str, tuple[str, ModelFactory]] = {
    TAG_SCALAR_INT: ("potts", _build_potts),
    TAG_VECTOR_DOUBLE: ("heisenberg", _build_heisenberg),
}
MODEL_DIMENSIONS: tuple[int, ...] = (2, 3)


def factory_for_tag(tag: str) -> ModelFactory:
    """Model factory for a type-tag, independent of dimension."""
    try:
        return MODEL_FACTORIES[canonical_tag(tag)][1]
    except KeyError:
        raise UnsupportedTypeError(f"no Monte Carlo model for site type '{tag}'.") from None


def build_default_registry() -> ModelRegistry:
    """Potts on grid:scalar:int and Heisenberg on grid:vector:double, in 2D and 3D."""
    registry = ModelRegistry()
    for dimension in MODEL_DIMENSIONS:
        for tag, (name, factory) in MODEL_FACTORIES.items():
            registry.register(name, tag, dimension, factory)
    return registry
