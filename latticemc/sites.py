"""Site value types and the type-tag table.

Every grid carries exactly one ``SiteType``. The set of site types is
closed: scalar int (Potts grain ids), scalar double, and vector double
(Heisenberg spins). Codec and kernel match on ``SiteType.kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

from .errors import UnsupportedTypeError

SiteKind = Literal["scalar", "vector"]

DEFAULT_VECTOR_ARITY = 3

TAG_SCALAR_INT = "grid:scalar:int"
TAG_SCALAR_DOUBLE = "grid:scalar:double"
TAG_VECTOR_DOUBLE = "grid:vector:double"

TAG_ALIASES: dict[str, str] = {"grid:int": TAG_SCALAR_INT}


@dataclass(frozen=True)
class SiteType:
    """Element type of a grid.

    ``dtype`` is the little-endian on-disk numpy dtype string. ``arity``
    is 1 for scalars and the number of components for vectors.
    """

    tag: str
    kind: SiteKind
    dtype: str
    arity: int = 1

    def __post_init__(self) -> None:
        if self.arity < 1:
            raise ValueError(f"arity must be >= 1, got {self.arity}.")
        if self.kind == "scalar" and self.arity != 1:
            raise ValueError(f"scalar site types have arity 1, got {self.arity}.")

    @property
    def itemsize(self) -> int:
        """Bytes per component."""
        return np.dtype(self.dtype).itemsize

    @property
    def native_dtype(self) -> np.dtype:
        """In-memory dtype (host byte order)."""
        return np.dtype(self.dtype).newbyteorder("=")

    @property
    def site_nbytes(self) -> int:
        """Bytes per site."""
        return self.itemsize * self.arity

    @property
    def value_shape(self) -> tuple[int, ...]:
        """Trailing array shape of a single site value."""
        return (self.arity,) if self.kind == "vector" else ()

    def same_layout(self, other: "SiteType") -> bool:
        return self.tag == other.tag and self.arity == other.arity


SCALAR_INT = SiteType(tag=TAG_SCALAR_INT, kind="scalar", dtype="<i4")
SCALAR_DOUBLE = SiteType(tag=TAG_SCALAR_DOUBLE, kind="scalar", dtype="<f8")


def vector_double(arity: int = DEFAULT_VECTOR_ARITY) -> SiteType:
    """Vector-of-double site type with the given number of components."""
    return SiteType(tag=TAG_VECTOR_DOUBLE, kind="vector", dtype="<f8", arity=int(arity))


VECTOR_DOUBLE = vector_double()


def canonical_tag(tag: str) -> str:
    """Resolve legacy aliases to the canonical tag."""
    tag = str(tag).strip()
    return TAG_ALIASES.get(tag, tag)


def known_tags() -> tuple[str, ...]:
    return (TAG_SCALAR_INT, TAG_SCALAR_DOUBLE, TAG_VECTOR_DOUBLE, *TAG_ALIASES)


def site_type_from_tag(tag: str, *, vector_arity: int = DEFAULT_VECTOR_ARITY) -> SiteType:
    """Return the site type for a header tag, honoring legacy aliases."""
    tag_c = canonical_tag(tag)
    if tag_c == TAG_SCALAR_INT:
        return SCALAR_INT
    if tag_c == TAG_SCALAR_DOUBLE:
        return SCALAR_DOUBLE
    if tag_c == TAG_VECTOR_DOUBLE:
        return vector_double(vector_arity)
    supported = ", ".join(known_tags())
    raise UnsupportedTypeError(f"unsupported grid data type '{tag}'. Use one of: {supported}.")
