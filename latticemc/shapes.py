"""Shape validation helpers."""

from __future__ import annotations

from typing import Sequence


def ensure_extents(extents: Sequence[int], dimensions: Sequence[int] = (1, 2, 3)) -> tuple[int, ...]:
    """Validate extents: supported length, every entry a positive int."""
    ext = tuple(int(n) for n in extents)
    if len(ext) not in dimensions:
        allowed = ", ".join(str(d) for d in dimensions)
        raise ValueError(f"extents must have one of {allowed} entries, got {len(ext)}.")
    for axis, n in enumerate(ext):
        if n < 1:
            raise ValueError(f"extent along axis {axis} must be >= 1, got {n}.")
    return ext
