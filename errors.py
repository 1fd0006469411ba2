"""Exceptions raised at the construction and use boundaries of the packer."""

from __future__ import annotations


class PackingError(Exception):
    """Root of every error raised by this package."""


class ShapeError(PackingError, ValueError):
    """A shape or target violates the cell-set constraints."""


class EmptyShapeError(ShapeError):
    """Raised when a Template or Target is built from zero coordinates."""


class DuplicateCoordinateError(ShapeError):
    """Raised when the same coordinate appears twice in one shape."""


class DimensionMismatchError(ShapeError):
    """Raised when coordinates of different dimension are mixed."""


class CoordinateError(ShapeError):
    """Raised for coordinates with missing or non-integer components."""


class PlacementError(PackingError, ValueError):
    """Raised when a placement would break the exact-cover invariant."""


class FrozenSolutionError(PlacementError):
    """Raised when a solution snapshot is mutated."""


class OutOfStockError(PackingError, RuntimeError):
    """A template unit was taken from a bag that holds none.

    The search never does this for well-formed input; reaching it means an
    invariant was broken, so it is propagated and never handled.
    """


__all__ = [
    "PackingError",
    "ShapeError",
    "EmptyShapeError",
    "DuplicateCoordinateError",
    "DimensionMismatchError",
    "CoordinateError",
    "PlacementError",
    "FrozenSolutionError",
    "OutOfStockError",
]
