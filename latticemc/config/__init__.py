"""Typed run configuration and parsers."""

from .parser import apply_overrides, load_run_config, parse_run_config
from .run_models import SWEEP_POLICIES, RunConfig
from .validators import (
    as_mapping,
    ensure_choice,
    ensure_nonnegative,
    reject_unknown_keys,
    required,
    to_float,
    to_int,
)

__all__ = [
    "RunConfig",
    "SWEEP_POLICIES",
    "apply_overrides",
    "as_mapping",
    "ensure_choice",
    "ensure_nonnegative",
    "load_run_config",
    "parse_run_config",
    "reject_unknown_keys",
    "required",
    "to_float",
    "to_int",
]
