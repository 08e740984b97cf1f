"""Shared config validation helpers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence


def as_mapping(value: Any, context: str) -> dict[str, Any]:
    """Require a mapping value."""
    if not isinstance(value, Mapping):
        raise ValueError(f"{context} must be a mapping.")
    return dict(value)


def required(mapping: Mapping[str, Any], key: str, context: str) -> Any:
    """Require key existence."""
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context}.")
    return mapping[key]


def reject_unknown_keys(mapping: Mapping[str, Any], allowed: Iterable[str], context: str) -> None:
    """Fail on keys outside ``allowed``."""
    unknown = sorted(set(mapping) - set(allowed))
    if unknown:
        raise ValueError(f"{context} has unknown key(s): {', '.join(map(str, unknown))}.")


def to_float(value: Any, key: str, context: str) -> float:
    """Convert value to float with contextual error message."""
    if isinstance(value, bool):
        raise ValueError(f"{context}.{key} must be a number, got {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{context}.{key} must be a number, got {value!r}.") from exc


def to_int(value: Any, key: str, context: str) -> int:
    """Convert value to int; floats with a fractional part are rejected."""
    if isinstance(value, bool):
        raise ValueError(f"{context}.{key} must be an integer, got {value!r}.")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{context}.{key} must be an integer, got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{context}.{key} must be an integer, got {value!r}.") from exc


def ensure_choice(name: str, value: Any, allowed: Sequence[str]) -> str:
    """Validate a case-insensitive choice and return it lowercased."""
    val = str(value).lower()
    if val not in allowed:
        raise ValueError(f"{name} must be one of: {', '.join(allowed)}. Got '{value}'.")
    return val


def ensure_nonnegative(name: str, value: float, *, allow_zero: bool = True) -> float:
    """Validate scalar non-negativity (or positivity)."""
    x = float(value)
    if allow_zero and x < 0.0:
        raise ValueError(f"{name} must be >= 0, got {value}.")
    if not allow_zero and x <= 0.0:
        raise ValueError(f"{name} must be > 0, got {value}.")
    return x
