# solver/solution.py
from __future__ import annotations

from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from errors import FrozenSolutionError, PlacementError
from models import Coordinate, Placement, Target
from solver.pieces import Bag


class Solution:
    """Placements made so far, in discovery order, plus the covered cells.

    A solution starts unbound; :meth:`bind` attaches a target and derives the
    uncovered set.  While bound, ``covered | uncovered == target.cells`` and the
    two sets never intersect.  Snapshots handed out by the search are frozen.
    """

    __slots__ = ("_placements", "_owners", "_target", "_uncovered", "_bag", "_frozen")

    def __init__(self) -> None:
        self._placements: List[Placement] = []
        self._owners: Dict[Coordinate, int] = {}
        self._target: Optional[Target] = None
        self._uncovered: Optional[Set[Coordinate]] = None
        self._bag: Optional[Bag] = None
        self._frozen = False

    @classmethod
    def empty(cls) -> "Solution":
        """Starting point for a search."""
        return cls()

    # ---------------- binding ----------------

    def bind(self, target: Target) -> "Solution":
        self._check_mutable()
        outside = [c for c in self._owners if c not in target]
        if outside:
            raise PlacementError(
                f"Partial solution covers {len(outside)} cell(s) outside the target, e.g. {min(outside)}"
            )
        self._target = target
        self._uncovered = {c for c in target.ordered if c not in self._owners}
        return self

    @property
    def target(self) -> Optional[Target]:
        return self._target

    # ---------------- mutation ----------------

    def place(self, placement: Placement) -> None:
        self._check_mutable()
        footprint = placement.footprint
        for cell in footprint:
            if cell in self._owners:
                raise PlacementError(f"{cell} is already covered by {self._placements[self._owners[cell]]}")
            if self._target is not None and cell not in self._target:
                raise PlacementError(f"{cell} lies outside the target")
        idx = len(self._placements)
        self._placements.append(placement)
        for cell in footprint:
            self._owners[cell] = idx
        if self._uncovered is not None:
            self._uncovered.difference_update(footprint)

    def remove_last(self) -> Placement:
        self._check_mutable()
        if not self._placements:
            raise PlacementError("Solution has no placement to remove")
        placement = self._placements.pop()
        for cell in placement.footprint:
            del self._owners[cell]
        if self._uncovered is not None:
            self._uncovered.update(placement.footprint)
        return placement

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenSolutionError("Solution snapshots are read-only")

    # ---------------- read API ----------------

    @property
    def placements(self) -> Tuple[Placement, ...]:
        return tuple(self._placements)

    @property
    def covered(self) -> FrozenSet[Coordinate]:
        return frozenset(self._owners)

    @property
    def uncovered(self) -> FrozenSet[Coordinate]:
        if self._uncovered is None:
            raise PlacementError("Solution is not bound to a target")
        return frozenset(self._uncovered)

    @property
    def bag(self) -> Optional[Bag]:
        """Pieces left over when this snapshot was taken, or None."""
        return None if self._bag is None else self._bag.copy()

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def is_complete(self) -> bool:
        return self._uncovered is not None and not self._uncovered

    def is_covered(self, cell: Coordinate) -> bool:
        return cell in self._owners

    def owner(self, cell: Coordinate) -> Optional[Placement]:
        idx = self._owners.get(cell)
        return None if idx is None else self._placements[idx]

    def snapshot(self, bag: Optional[Bag] = None) -> "Solution":
        """Frozen copy, carrying a private copy of ``bag`` (the pieces left over) if given."""
        clone = Solution()
        clone._placements = list(self._placements)
        clone._owners = dict(self._owners)
        clone._target = self._target
        clone._uncovered = None if self._uncovered is None else set(self._uncovered)
        if bag is not None:
            clone._bag = bag.copy()
        elif self._bag is not None:
            clone._bag = self._bag.copy()
        clone._frozen = True
        return clone

    def __len__(self) -> int:
        return len(self._placements)

    def __iter__(self) -> Iterator[Placement]:
        return iter(tuple(self._placements))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Solution):
            return NotImplemented
        return self._placements == other._placements

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "<" + "".join(str(p) for p in self._placements) + ">"

    def __repr__(self) -> str:
        state = "complete" if self.is_complete else "partial"
        return f"<Solution {state} placements={len(self._placements)} covered={len(self._owners)}>"


__all__ = ["Solution"]
