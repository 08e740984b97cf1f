"""Run-config parsing from YAML files and flag overrides."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..errors import ConfigError
from ..grid import STENCILS
from ..heisenberg import PROPOSALS
from .run_models import SWEEP_POLICIES, RunConfig
from .validators import (
    as_mapping,
    ensure_choice,
    ensure_nonnegative,
    reject_unknown_keys,
    to_float,
    to_int,
)


def _parse_fields(payload: Mapping[str, Any], context: str) -> dict[str, Any]:
    reject_unknown_keys(payload, RunConfig.field_names(), context)
    out: dict[str, Any] = {}
    if "kT" in payload:
        out["kT"] = to_float(payload["kT"], "kT", context)
    if "coupling" in payload:
        out["coupling"] = to_float(payload["coupling"], "coupling", context)
    if payload.get("seed") is not None:
        out["seed"] = to_int(payload["seed"], "seed", context)
        ensure_nonnegative(f"{context}.seed", out["seed"])
    if "sweep" in payload:
        out["sweep"] = ensure_choice(f"{context}.sweep", payload["sweep"], SWEEP_POLICIES)
    if "stencil" in payload:
        out["stencil"] = ensure_choice(f"{context}.stencil", payload["stencil"], STENCILS)
    if "proposal" in payload:
        out["proposal"] = ensure_choice(f"{context}.proposal", payload["proposal"], PROPOSALS)
    if "step_size" in payload:
        out["step_size"] = ensure_nonnegative(
            f"{context}.step_size", to_float(payload["step_size"], "step_size", context)
        )
    if "vector_arity" in payload:
        arity = to_int(payload["vector_arity"], "vector_arity", context)
        ensure_nonnegative(f"{context}.vector_arity", arity, allow_zero=False)
        out["vector_arity"] = arity
    return out


def parse_run_config(payload: Mapping[str, Any] | None, base: RunConfig | None = None) -> RunConfig:
    """Build a RunConfig from a mapping layered over ``base``."""
    base = RunConfig() if base is None else base
    if payload is None:
        return base
    try:
        mapping = as_mapping(payload, "config")
        return replace(base, **_parse_fields(mapping, "config"))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def load_run_config(path: str | Path) -> RunConfig:
    """Load a YAML run config; an empty file yields the defaults."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML config: {path}") from exc
    return parse_run_config(payload)


def apply_overrides(config: RunConfig, **overrides: Any) -> RunConfig:
    """Layer non-None overrides (e.g. CLI flags) over ``config``."""
    given = {k: v for k, v in overrides.items() if v is not None}
    return parse_run_config(given, base=config)
