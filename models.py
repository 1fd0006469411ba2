
from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Iterable, Iterator, Tuple

from errors import (
    CoordinateError,
    DimensionMismatchError,
    DuplicateCoordinateError,
    EmptyShapeError,
    PlacementError,
)

if TYPE_CHECKING:  # pragma: no cover
    from solver.pieces import Template


class Coordinate(tuple):
    """One discrete cell. Hashes, compares and orders like a plain tuple.

    ``+`` keeps its tuple meaning (concatenation); use :meth:`translate` for
    vector addition.
    """

    __slots__ = ()

    def __new__(cls, *components) -> "Coordinate":
        if not components:
            raise CoordinateError("Coordinate needs at least one component")
        try:
            values = tuple(operator.index(c) for c in components)
        except TypeError as exc:
            raise CoordinateError(f"Coordinate components must be integers: {components!r}") from exc
        return tuple.__new__(cls, values)

    @classmethod
    def of(cls, value: Iterable[int]) -> "Coordinate":
        if isinstance(value, Coordinate):
            return value
        try:
            return cls(*value)
        except TypeError as exc:
            raise CoordinateError(f"Not a coordinate-like value: {value!r}") from exc

    @classmethod
    def origin(cls, dimensions: int) -> "Coordinate":
        return tuple.__new__(cls, (0,) * dimensions)

    @property
    def dimensions(self) -> int:
        return len(self)

    @property
    def x(self) -> int:
        return self[0]

    @property
    def y(self) -> int:
        return self[1]

    @property
    def z(self) -> int:
        return self[2]

    def translate(self, offset: Tuple[int, ...]) -> "Coordinate":
        if len(offset) != len(self):
            raise DimensionMismatchError(f"Cannot translate {self} by {tuple(offset)}")
        return tuple.__new__(Coordinate, map(operator.add, self, offset))

    def offset_to(self, other: Tuple[int, ...]) -> "Coordinate":
        """Translation that moves ``self`` onto ``other``."""
        if len(other) != len(self):
            raise DimensionMismatchError(f"Cannot relate {self} to {tuple(other)}")
        return tuple.__new__(Coordinate, map(operator.sub, other, self))

    def __repr__(self) -> str:
        return f"Coordinate{tuple.__repr__(self)}"

    def __str__(self) -> str:
        return tuple.__repr__(self)

    def __reduce__(self):
        return (Coordinate, tuple(self))


def normalize_shape(cells: Iterable[Iterable[int]], *, what: str = "Shape") -> Tuple[Coordinate, ...]:
    """Validate a cell collection and return it sorted in canonical order.

    Repeated cells are rejected rather than merged: silently dropping one would
    change how many cells the shape claims to cover.
    """
    coords = [Coordinate.of(c) for c in cells]
    if not coords:
        raise EmptyShapeError(f"{what} must contain at least one coordinate")

    dims = len(coords[0])
    seen: set = set()
    for c in coords:
        if len(c) != dims:
            raise DimensionMismatchError(
                f"{what} mixes {dims}-D and {len(c)}-D coordinates ({coords[0]} vs {c})"
            )
        if c in seen:
            raise DuplicateCoordinateError(f"{what} lists {c} more than once")
        seen.add(c)
    return tuple(sorted(coords))


class Target:
    """The fixed region that must be covered exactly."""

    __slots__ = ("_cells", "_ordered")

    def __init__(self, cells: Iterable[Iterable[int]]) -> None:
        ordered = normalize_shape(cells, what="Target")
        self._ordered: Tuple[Coordinate, ...] = ordered
        self._cells: FrozenSet[Coordinate] = frozenset(ordered)

    @property
    def cells(self) -> FrozenSet[Coordinate]:
        return self._cells

    @property
    def ordered(self) -> Tuple[Coordinate, ...]:
        return self._ordered

    @property
    def dimensions(self) -> int:
        return len(self._ordered[0])

    def contains_all(self, cells: Iterable[Coordinate]) -> bool:
        return all(c in self._cells for c in cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Target):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"Target({len(self)} cells)"


@dataclass(frozen=True)
class Placement:
    """One template instance fixed in space.

    ``orientation`` must be one of ``template.orientations`` (already normalized
    to the origin); ``offset`` moves it into place.
    """
    template: "Template"
    orientation: Tuple[Coordinate, ...]
    offset: Coordinate
    footprint: Tuple[Coordinate, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:  # type: ignore[override]
        if not self.template.has_orientation(self.orientation):
            raise PlacementError(
                f"Orientation {tuple(map(str, self.orientation))} does not belong to {self.template}"
            )
        offset = Coordinate.of(self.offset)
        object.__setattr__(self, "offset", offset)
        # Translation preserves the lexicographic order, so the footprint stays sorted.
        object.__setattr__(
            self, "footprint", tuple(cell.translate(offset) for cell in self.orientation)
        )

    @property
    def cells(self) -> FrozenSet[Coordinate]:
        return frozenset(self.footprint)

    @property
    def anchor(self) -> Coordinate:
        return self.footprint[0]

    def __str__(self) -> str:
        name = self.template.name or ""
        return "[" + name + "".join(str(c) for c in self.footprint) + "]"


__all__ = ["Coordinate", "normalize_shape", "Target", "Placement"]
