"""Shared error types for latticemc."""

from __future__ import annotations


class LatticeError(Exception):
    """Base class for all latticemc errors."""


class UsageError(LatticeError):
    """Raised on a bad command-line invocation."""


class FormatError(LatticeError, ValueError):
    """Raised when a stream does not follow the grid file grammar."""


class UnsupportedTypeError(LatticeError):
    """Raised when a well-formed header names a type nothing implements."""


class BoundaryError(LatticeError, IndexError):
    """Raised on coordinate access outside a fixed-boundary axis."""


class ConfigError(LatticeError, ValueError):
    """Raised when a run configuration is invalid."""
