"""Dimension-generic lattice grid.

A single run-time-dimension container: the extents are a tuple, site
values live in one numpy array of shape ``extents + value_shape`` and a
coordinate maps to storage through a row-major stride dot product.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Literal, Sequence

import numpy as np

from .errors import BoundaryError
from .sites import DEFAULT_VECTOR_ARITY, SCALAR_INT, SiteType

Boundary = Literal["periodic", "fixed"]
Stencil = Literal["moore", "von_neumann"]

BOUNDARIES: tuple[str, ...] = ("periodic", "fixed")
STENCILS: tuple[str, ...] = ("moore", "von_neumann")


def stencil_offsets(dimension: int, stencil: str = "moore") -> list[tuple[int, ...]]:
    """Neighbor offsets for a stencil.

    - ``moore``: every offset in {-1, 0, 1}^D except the origin (3^D - 1 sites)
    - ``von_neumann``: +-1 along each axis (2D sites)
    """
    if dimension < 1:
        raise ValueError(f"dimension must be >= 1, got {dimension}.")
    stencil_l = str(stencil).lower()
    if stencil_l == "moore":
        return [off for off in itertools.product((-1, 0, 1), repeat=dimension) if any(off)]
    if stencil_l == "von_neumann":
        offsets: list[tuple[int, ...]] = []
        for axis in range(dimension):
            for step in (-1, 1):
                off = [0] * dimension
                off[axis] = step
                offsets.append(tuple(off))
        return offsets
    raise ValueError(f"stencil must be one of: {', '.join(STENCILS)}. Got '{stencil}'.")


def normalize_boundaries(boundary: str | Sequence[str], dimension: int) -> tuple[str, ...]:
    """Expand a boundary tag (or per-axis tags) to one tag per axis."""
    if isinstance(boundary, str):
        tags = [boundary] * dimension
    else:
        tags = [str(b) for b in boundary]
    if len(tags) != dimension:
        raise ValueError(f"expected {dimension} boundary tags, got {len(tags)}.")
    out = tuple(t.lower() for t in tags)
    for tag in out:
        if tag not in BOUNDARIES:
            raise ValueError(f"boundary must be one of: {', '.join(BOUNDARIES)}. Got '{tag}'.")
    return out


def row_major_strides(extents: Sequence[int]) -> tuple[int, ...]:
    """Element strides for row-major (last axis fastest) storage."""
    strides = [1] * len(extents)
    for axis in range(len(extents) - 2, -1, -1):
        strides[axis] = strides[axis + 1] * int(extents[axis + 1])
    return tuple(strides)


@dataclass(frozen=True, eq=False)
class Grid:
    """Lattice of sites sharing one ``SiteType``.

    Shape, boundaries and site type are fixed after construction; only
    the site values in ``data`` change.
    """

    site_type: SiteType
    extents: tuple[int, ...]
    boundaries: tuple[str, ...]
    data: np.ndarray

    def __post_init__(self) -> None:
        if len(self.extents) < 1:
            raise ValueError("a grid needs at least one axis.")
        for axis, n in enumerate(self.extents):
            if int(n) < 1:
                raise ValueError(f"extent along axis {axis} must be >= 1, got {n}.")
        if len(self.boundaries) != len(self.extents):
            raise ValueError(
                f"expected {len(self.extents)} boundary tags, got {len(self.boundaries)}."
            )
        expected = tuple(self.extents) + self.site_type.value_shape
        if self.data.shape != expected:
            raise ValueError(f"data must have shape {expected}, got {self.data.shape}.")
        if self.data.dtype != self.site_type.native_dtype:
            raise ValueError(
                f"data dtype must be {self.site_type.native_dtype}, got {self.data.dtype}."
            )

    @classmethod
    def zeros(
        cls,
        extents: Sequence[int],
        site_type: SiteType = SCALAR_INT,
        boundary: str | Sequence[str] = "periodic",
    ) -> "Grid":
        """Construct a grid with every site at the type's zero value."""
        ext = tuple(int(n) for n in extents)
        shape = ext + site_type.value_shape
        return cls(
            site_type=site_type,
            extents=ext,
            boundaries=normalize_boundaries(boundary, len(ext)),
            data=np.zeros(shape, dtype=site_type.native_dtype),
        )

    @classmethod
    def from_array(
        cls,
        values: np.ndarray,
        site_type: SiteType,
        boundary: str | Sequence[str] = "periodic",
    ) -> "Grid":
        """Construct a grid owning a copy of ``values``."""
        arr = np.array(values, dtype=site_type.native_dtype, copy=True)
        n_value_axes = len(site_type.value_shape)
        ext = arr.shape[: arr.ndim - n_value_axes] if n_value_axes else arr.shape
        return cls(
            site_type=site_type,
            extents=tuple(int(n) for n in ext),
            boundaries=normalize_boundaries(boundary, len(ext)),
            data=arr,
        )

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        expected: SiteType | Iterable[SiteType] | None = None,
        *,
        boundary: str | Sequence[str] = "periodic",
        vector_arity: int = DEFAULT_VECTOR_ARITY,
    ) -> "Grid":
        """Decode a grid from a binary stream (see ``latticemc.codec``)."""
        from .codec import read_grid

        return read_grid(stream, expected=expected, boundary=boundary, vector_arity=vector_arity)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        expected: SiteType | Iterable[SiteType] | None = None,
        *,
        boundary: str | Sequence[str] = "periodic",
        vector_arity: int = DEFAULT_VECTOR_ARITY,
    ) -> "Grid":
        """Decode a grid from a file path."""
        with Path(path).open("rb") as f:
            return cls.from_stream(f, expected, boundary=boundary, vector_arity=vector_arity)

    @property
    def dimension(self) -> int:
        return len(self.extents)

    @property
    def size(self) -> int:
        """Total number of sites."""
        return int(math.prod(self.extents))

    @property
    def strides(self) -> tuple[int, ...]:
        return row_major_strides(self.extents)

    @property
    def flat(self) -> np.ndarray:
        """Mutable view with one row per site, in flat-index order."""
        return self.data.reshape((self.size,) + self.site_type.value_shape)

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the site values."""
        view = self.data.view()
        view.flags.writeable = False
        return view

    def wrap(self, coord: Sequence[int]) -> tuple[int, ...]:
        """Apply boundary conditions to a coordinate."""
        if len(coord) != self.dimension:
            raise ValueError(f"coordinate must have {self.dimension} entries, got {len(coord)}.")
        out: list[int] = []
        for axis, (c, n, bc) in enumerate(zip(coord, self.extents, self.boundaries)):
            c = int(c)
            if bc == "periodic":
                out.append(c % n)
            elif 0 <= c < n:
                out.append(c)
            else:
                raise BoundaryError(
                    f"coordinate {tuple(coord)} is outside fixed axis {axis} (extent {n})."
                )
        return tuple(out)

    def flat_index(self, coord: Sequence[int]) -> int:
        """Row-major flat index of a coordinate after boundary wrapping."""
        return sum(c * s for c, s in zip(self.wrap(coord), self.strides))

    def coord_of(self, index: int) -> tuple[int, ...]:
        """Inverse of ``flat_index`` for an in-range flat index."""
        return tuple(int(c) for c in np.unravel_index(int(index), self.extents))

    def get(self, coord: Sequence[int]) -> int | float | np.ndarray:
        """Site value at ``coord``; vectors are returned as copies."""
        value = self.flat[self.flat_index(coord)]
        if self.site_type.kind == "vector":
            return np.array(value, copy=True)
        return value.item()

    def set(self, coord: Sequence[int], value: int | float | Sequence[float] | np.ndarray) -> None:
        idx = self.flat_index(coord)
        if self.site_type.kind == "vector":
            arr = np.asarray(value, dtype=self.site_type.native_dtype)
            if arr.shape != (self.site_type.arity,):
                raise ValueError(
                    f"vector value must have shape ({self.site_type.arity},), got {arr.shape}."
                )
            self.flat[idx] = arr
        else:
            self.flat[idx] = value

    def neighbors(self, coord: Sequence[int], stencil: str = "moore") -> list[int]:
        """Flat indices of the neighbors of ``coord``."""
        return [int(i) for i in self.neighbor_table(stencil)[self.flat_index(coord)]]

    def neighbor_table(self, stencil: str = "moore") -> list[np.ndarray]:
        """Per-site neighbor flat indices.

        Neighbors across a fixed axis are dropped. A periodic wrap that
        lands on the site itself is dropped too; duplicates produced by
        short periodic axes are kept.
        """
        offsets = stencil_offsets(self.dimension, stencil)
        n_sites = self.size
        coords = np.indices(self.extents).reshape(self.dimension, n_sites)
        strides = np.asarray(self.strides, dtype=np.int64)
        own = np.arange(n_sites, dtype=np.int64)

        table = np.full((n_sites, len(offsets)), -1, dtype=np.int64)
        for k, off in enumerate(offsets):
            shifted = coords + np.asarray(off, dtype=np.int64)[:, None]
            valid = np.ones(n_sites, dtype=bool)
            for axis, (n, bc) in enumerate(zip(self.extents, self.boundaries)):
                if bc == "periodic":
                    shifted[axis] %= n
                else:
                    valid &= (shifted[axis] >= 0) & (shifted[axis] < n)
            idx = strides @ np.where(valid, shifted, 0)
            valid &= idx != own
            table[:, k] = np.where(valid, idx, -1)

        return [row[row >= 0] for row in table]

    def copy(self) -> "Grid":
        return Grid(
            site_type=self.site_type,
            extents=self.extents,
            boundaries=self.boundaries,
            data=self.data.copy(),
        )

    def same_as(self, other: "Grid") -> bool:
        """True if site type, shape, boundaries and all values match."""
        return (
            self.site_type.same_layout(other.site_type)
            and self.extents == other.extents
            and self.boundaries == other.boundaries
            and np.array_equal(self.data, other.data)
        )
