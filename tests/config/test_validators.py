"""Unit tests for config validators."""

from __future__ import annotations

import pytest

from latticemc.config.validators import (
    as_mapping,
    ensure_choice,
    ensure_nonnegative,
    reject_unknown_keys,
    required,
    to_float,
    to_int,
)


pytestmark = pytest.mark.unit


def test_as_mapping_and_required() -> None:
    payload = as_mapping({"a": 1}, "ctx")
    assert required(payload, "a", "ctx") == 1
    with pytest.raises(ValueError, match="ctx must be a mapping"):
        as_mapping([1, 2], "ctx")


def test_required_raises() -> None:
    with pytest.raises(ValueError, match="Missing required key"):
        required({}, "missing", "ctx")


def test_numeric_converters_raise_contextual_error() -> None:
    with pytest.raises(ValueError, match="ctx.x must be a number"):
        to_float("abc", "x", "ctx")
    with pytest.raises(ValueError, match="ctx.y must be an integer"):
        to_int("abc", "y", "ctx")
    with pytest.raises(ValueError, match="ctx.y must be an integer"):
        to_int(1.5, "y", "ctx")
    with pytest.raises(ValueError, match="ctx.z must be a number"):
        to_float(True, "z", "ctx")
    assert to_int(4.0, "y", "ctx") == 4


def test_choice_and_nonnegative() -> None:
    assert ensure_choice("sweep", "RASTER", ("random", "raster")) == "raster"
    with pytest.raises(ValueError, match="sweep must be one of"):
        ensure_choice("sweep", "spiral", ("random", "raster"))
    assert ensure_nonnegative("x", 0) == 0.0
    with pytest.raises(ValueError, match="x must be > 0"):
        ensure_nonnegative("x", 0, allow_zero=False)


def test_reject_unknown_keys() -> None:
    reject_unknown_keys({"a": 1}, ("a", "b"), "ctx")
    with pytest.raises(ValueError, match="unknown key"):
        reject_unknown_keys({"c": 1}, ("a", "b"), "ctx")
