from __future__ import annotations

import importlib
import tempfile
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .codec import load_grid, save_grid
from .config import RunConfig
from .driver import run_file
from .generate import random_heisenberg_grid, random_potts_grid


@dataclass
class CheckRow:
    name: str
    ok: bool
    detail: str


@dataclass
class SelfCheckReport:
    rows: list[CheckRow]

    @property
    def ok(self) -> bool:
        return all(row.ok for row in self.rows)

    def to_text(self) -> str:
        lines: list[str] = []
        for row in self.rows:
            status = "OK" if row.ok else "FAIL"
            lines.append(f"[{status}] {row.name}: {row.detail}")
        lines.append(f"overall: {'OK' if self.ok else 'FAIL'}")
        return "\n".join(lines)


def _smoke(tmp: Path) -> list[CheckRow]:
    rows: list[CheckRow] = []
    rng = np.random.default_rng(0)
    config = RunConfig(kT=0.5, seed=0)
    grids = {
        "potts": random_potts_grid((8, 8), 4, rng),
        "heisenberg": random_heisenberg_grid((4, 4, 4), rng),
    }
    for name, grid in grids.items():
        src = save_grid(grid, tmp / f"{name}_in.dat")
        if not load_grid(src).same_as(grid):
            rows.append(CheckRow(f"smoke.{name}", False, "round trip changed the grid"))
            continue
        result = run_file(src, tmp / f"{name}_out.dat", 2, config)
        out = load_grid(tmp / f"{name}_out.dat")
        ok = out.extents == grid.extents
        rows.append(
            CheckRow(
                f"smoke.{name}",
                ok,
                f"grid={out.extents}, energy={result.energy_before:.4g}->{result.energy_after:.4g}",
            )
        )
    return rows


def run_selfcheck(*, smoke: bool = True) -> SelfCheckReport:
    rows: list[CheckRow] = []

    for module_name in ("numpy", "yaml"):
        try:
            mod = importlib.import_module(module_name)
            version = getattr(mod, "__version__", "unknown")
            rows.append(CheckRow(module_name, True, f"version={version}"))
        except ImportError as exc:
            rows.append(CheckRow(module_name, False, str(exc)))

    if smoke and all(row.ok for row in rows):
        try:
            with tempfile.TemporaryDirectory(prefix="latticemc-selfcheck-") as tmp:
                rows.extend(_smoke(Path(tmp)))
        except Exception as exc:
            rows.append(CheckRow("smoke", False, str(exc)))

    return SelfCheckReport(rows=rows)
