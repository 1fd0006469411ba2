# solver/pieces.py
"""Piece templates and the bag of pieces still available to a search."""
from __future__ import annotations

import itertools
import threading
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from config import CFG
from errors import OutOfStockError
from models import Coordinate, normalize_shape
from solver.symmetry import Orientation, orientations as _orientations

_UID_LOCK = threading.Lock()
_UID_COUNTER = itertools.count(1)


def _next_uid() -> int:
    with _UID_LOCK:
        return next(_UID_COUNTER)


class Template:
    """A piece kind: its base shape plus every distinct orientation of it.

    Identity is the ``uid`` handed out at construction.  Two templates built
    from the same cells are different pieces; a pickled copy keeps its uid and
    therefore still compares equal to its source.
    """

    __slots__ = ("uid", "name", "shape", "reflections", "_orientations", "_orientation_set")

    def __init__(
        self,
        shape: Iterable[Iterable[int]],
        name: Optional[str] = None,
        *,
        reflections: Optional[bool] = None,
    ) -> None:
        cells = normalize_shape(shape, what="Template")
        mirror = bool(CFG.ALLOW_REFLECTIONS if reflections is None else reflections)
        found: Tuple[Orientation, ...] = _orientations(cells, mirror)
        object.__setattr__(self, "shape", cells)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "reflections", mirror)
        object.__setattr__(self, "_orientations", found)
        object.__setattr__(self, "_orientation_set", frozenset(found))
        object.__setattr__(self, "uid", _next_uid())

    def __setattr__(self, attr: str, value) -> None:
        raise AttributeError(f"Template is immutable; cannot set {attr!r}")

    def __delattr__(self, attr: str) -> None:
        raise AttributeError(f"Template is immutable; cannot delete {attr!r}")

    def with_name(self, name: str) -> "Template":
        return Template(self.shape, name, reflections=self.reflections)

    @property
    def orientations(self) -> Tuple[Orientation, ...]:
        return self._orientations

    @property
    def size(self) -> int:
        return len(self.shape)

    def has_orientation(self, cells: Sequence[Coordinate]) -> bool:
        return tuple(cells) in self._orientation_set

    def __iter__(self) -> Iterator[Orientation]:
        return iter(self._orientations)

    def __len__(self) -> int:
        return len(self._orientations)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Template):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __getstate__(self):
        return {slot: getattr(self, slot) for slot in self.__slots__}

    def __setstate__(self, state) -> None:
        for slot, value in state.items():
            object.__setattr__(self, slot, value)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Template #{self.uid}{label} cells={self.size} orientations={len(self)}>"


class Bag:
    """Multiset of templates, stored as counts in first-seen order.

    ``take`` and ``give_back`` mutate the bag in place; a ``give_back`` right
    after a successful ``take`` of the same template restores the bag exactly.
    """

    __slots__ = ("_counts",)

    def __init__(self, templates: Iterable[Template] = ()) -> None:
        self._counts: Dict[Template, int] = {}
        for template in templates:
            self._counts[template] = self._counts.get(template, 0) + 1

    @classmethod
    def from_counts(cls, entries: Iterable[Tuple[int, Template]]) -> "Bag":
        bag = cls()
        for count, template in entries:
            if int(count) < 0:
                raise ValueError(f"Bag count for {template!r} must be >= 0, got {count}")
            bag._counts[template] = bag._counts.get(template, 0) + int(count)
        return bag

    def templates(self) -> Tuple[Template, ...]:
        """Templates with at least one unit left, in first-seen order."""
        return tuple(t for t, n in self._counts.items() if n > 0)

    def count(self, template: Template) -> int:
        return self._counts.get(template, 0)

    def take(self, template: Template) -> None:
        current = self._counts.get(template, 0)
        if current <= 0:
            raise OutOfStockError(f"No unit of {template!r} left in the bag")
        self._counts[template] = current - 1

    def give_back(self, template: Template) -> None:
        self._counts[template] = self._counts.get(template, 0) + 1

    def copy(self) -> "Bag":
        clone = Bag()
        clone._counts = dict(self._counts)
        return clone

    def counts(self) -> List[Tuple[Template, int]]:
        return [(t, n) for t, n in self._counts.items() if n > 0]

    def is_empty(self) -> bool:
        return not any(n > 0 for n in self._counts.values())

    def __len__(self) -> int:
        return sum(self._counts.values())

    def __contains__(self, template: object) -> bool:
        return self._counts.get(template, 0) > 0  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bag):
            return NotImplemented
        return dict(self.counts()) == dict(other.counts())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{n}x{t.name or '#' + str(t.uid)}" for t, n in self.counts())
        return f"Bag({inner})"


__all__ = ["Template", "Bag"]
