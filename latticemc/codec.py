"""Grid file codec: text header followed by a binary payload.

Layout::

    grid:<kind>:<type>\\n        type-tag, e.g. grid:scalar:int
    <D>\\n                       dimension
    <n_0> <n_1> ... <n_D-1>\\n   extent along each axis
    <payload>                    prod(extents) sites, row-major, little-endian,
                                 vector components contiguous per site
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Sequence

import numpy as np

from .errors import FormatError
from .grid import Grid, normalize_boundaries
from .sites import DEFAULT_VECTOR_ARITY, SiteType, canonical_tag, site_type_from_tag

logger = logging.getLogger(__name__)

GRID_PREFIX = "grid"
SUPPORTED_DIMENSIONS: tuple[int, ...] = (1, 2, 3)
MAX_HEADER_LINE = 4096
MAX_SITES = 2**31 - 1


@dataclass(frozen=True)
class GridHeader:
    """Parsed header. ``tag`` is the text found in the file."""

    tag: str
    dimension: int
    extents: tuple[int, ...]

    @property
    def canonical_tag(self) -> str:
        return canonical_tag(self.tag)

    @property
    def size(self) -> int:
        return math.prod(self.extents)


@dataclass(frozen=True)
class DecodedGrid:
    """Header plus raw payload bytes, before a ``Grid`` is built."""

    header: GridHeader
    site_type: SiteType
    payload: bytes

    @property
    def tag(self) -> str:
        return self.header.canonical_tag

    @property
    def dimension(self) -> int:
        return self.header.dimension

    @property
    def extents(self) -> tuple[int, ...]:
        return self.header.extents


def _remaining(stream: BinaryIO) -> int | None:
    """Bytes left after the current position, or None for unseekable streams."""
    if not stream.seekable():
        return None
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return end - pos


def _read_line(stream: BinaryIO, what: str) -> str:
    raw = stream.readline(MAX_HEADER_LINE)
    if not raw.endswith(b"\n"):
        raise FormatError(f"truncated header: missing {what} line.")
    try:
        return raw[:-1].decode("ascii").rstrip("\r")
    except UnicodeDecodeError as exc:
        raise FormatError(f"header {what} line is not ASCII text.") from exc


def format_header(site_type: SiteType, extents: Sequence[int]) -> bytes:
    """Encode the three header lines."""
    lines = [site_type.tag, str(len(extents)), " ".join(str(int(n)) for n in extents)]
    return ("\n".join(lines) + "\n").encode("ascii")


def read_header(stream: BinaryIO) -> GridHeader:
    """Parse the header and leave the stream positioned at the payload."""
    tag = _read_line(stream, "type")
    if not tag.startswith(GRID_PREFIX):
        raise FormatError("file does not contain grid data.")

    dim_text = _read_line(stream, "dimension").strip()
    try:
        dimension = int(dim_text)
    except ValueError as exc:
        raise FormatError(f"grid dimension must be an integer, got {dim_text!r}.") from exc
    if dimension not in SUPPORTED_DIMENSIONS:
        supported = ", ".join(str(d) for d in SUPPORTED_DIMENSIONS)
        raise FormatError(f"grid dimension must be one of: {supported}. Got {dimension}.")

    ext_text = _read_line(stream, "extents")
    fields = ext_text.split()
    if len(fields) != dimension:
        raise FormatError(f"expected {dimension} extents, got {len(fields)}: {ext_text!r}.")
    try:
        extents = tuple(int(f) for f in fields)
    except ValueError as exc:
        raise FormatError(f"grid extents must be integers, got {ext_text!r}.") from exc
    if any(n < 1 for n in extents):
        raise FormatError(f"grid extents must be positive, got {extents}.")
    if math.prod(extents) > MAX_SITES:
        raise FormatError(f"grid extents {extents} exceed the limit of {MAX_SITES} sites.")

    header = GridHeader(tag=tag.strip(), dimension=dimension, extents=extents)
    logger.debug("Parsed grid header tag=%s dim=%d extents=%s", header.tag, dimension, extents)
    return header


def peek_header(path: str | Path) -> GridHeader:
    """Read only the header of a grid file."""
    with Path(path).open("rb") as f:
        return read_header(f)


def read(stream: BinaryIO, *, vector_arity: int = DEFAULT_VECTOR_ARITY) -> DecodedGrid:
    """Parse header and payload without building a grid.

    Raises ``UnsupportedTypeError`` for an unknown tag and ``FormatError``
    when the payload is shorter or longer than the header implies.
    """
    header = read_header(stream)
    site_type = site_type_from_tag(header.tag, vector_arity=vector_arity)

    expected = header.size * site_type.site_nbytes
    remaining = _remaining(stream)
    if remaining is not None and remaining < expected:
        raise FormatError(
            f"grid payload is truncated: expected {expected} bytes, got {remaining}."
        )
    payload = stream.read(expected)
    if len(payload) != expected:
        raise FormatError(
            f"grid payload is truncated: expected {expected} bytes, got {len(payload)}."
        )
    if stream.read(1):
        raise FormatError(f"grid payload is longer than the expected {expected} bytes.")

    return DecodedGrid(header=header, site_type=site_type, payload=payload)


def _check_expected(site_type: SiteType, expected: SiteType | Iterable[SiteType] | None) -> None:
    if expected is None:
        return
    allowed = [expected] if isinstance(expected, SiteType) else list(expected)
    if not any(site_type.same_layout(t) for t in allowed):
        names = ", ".join(t.tag for t in allowed)
        raise FormatError(f"grid data type '{site_type.tag}' does not match expected {names}.")


def decode(decoded: DecodedGrid, boundary: str | Sequence[str] = "periodic") -> Grid:
    """Build a grid from a decoded header and payload."""
    site_type = decoded.site_type
    flat = np.frombuffer(decoded.payload, dtype=site_type.dtype)
    data = flat.astype(site_type.native_dtype).reshape(decoded.extents + site_type.value_shape)
    return Grid(
        site_type=site_type,
        extents=decoded.extents,
        boundaries=normalize_boundaries(boundary, decoded.dimension),
        data=data,
    )


def read_grid(
    stream: BinaryIO,
    expected: SiteType | Iterable[SiteType] | None = None,
    *,
    boundary: str | Sequence[str] = "periodic",
    vector_arity: int = DEFAULT_VECTOR_ARITY,
) -> Grid:
    """Read a full grid from a stream."""
    decoded = read(stream, vector_arity=vector_arity)
    _check_expected(decoded.site_type, expected)
    return decode(decoded, boundary=boundary)


def load_grid(
    path: str | Path,
    expected: SiteType | Iterable[SiteType] | None = None,
    *,
    boundary: str | Sequence[str] = "periodic",
    vector_arity: int = DEFAULT_VECTOR_ARITY,
) -> Grid:
    """Read a full grid from a file."""
    with Path(path).open("rb") as f:
        return read_grid(f, expected, boundary=boundary, vector_arity=vector_arity)


def encode(grid: Grid) -> bytes:
    """Header and payload for ``grid`` as one bytes object."""
    payload = np.ascontiguousarray(grid.data, dtype=grid.site_type.dtype).tobytes()
    return format_header(grid.site_type, grid.extents) + payload


def write(grid: Grid, stream: BinaryIO) -> None:
    """Write ``grid`` to a binary stream; sink failures surface as ``OSError``."""
    stream.write(encode(grid))


def save_grid(grid: Grid, path: str | Path) -> Path:
    """Write ``grid`` to ``path`` and return it."""
    path = Path(path)
    with path.open("wb") as f:
        write(grid, f)
    logger.debug("Wrote %s grid %s to %s", grid.site_type.tag, grid.extents, path)
    return path


__all__ = [
    "DecodedGrid",
    "GridHeader",
    "MAX_SITES",
    "SUPPORTED_DIMENSIONS",
    "decode",
    "encode",
    "format_header",
    "load_grid",
    "peek_header",
    "read",
    "read_grid",
    "read_header",
    "save_grid",
    "write",
]
