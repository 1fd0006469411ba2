# solver/symmetry.py
"""Orientation generator.

The transform group is the set of signed axis permutations of the grid:
24 proper rotations for 3-D cells (48 with mirror images), 4/8 in 2-D.
Each transform is stored as ``(perm, signs)`` and maps a cell ``v`` to
``(signs[0] * v[perm[0]], signs[1] * v[perm[1]], ...)``.  Tables are built
once per dimension in a fixed order (identity first) so every run sees the
same orientation sequence.
"""
from __future__ import annotations

import itertools
from functools import lru_cache
from typing import Dict, Iterable, List, Sequence, Tuple

from models import Coordinate, normalize_shape

Transform = Tuple[Tuple[int, ...], Tuple[int, ...]]
Orientation = Tuple[Coordinate, ...]


def _perm_parity(perm: Sequence[int]) -> int:
    inversions = 0
    for i in range(len(perm)):
        for j in range(i + 1, len(perm)):
            if perm[i] > perm[j]:
                inversions += 1
    return 1 if inversions % 2 == 0 else -1


@lru_cache(maxsize=None)
def transforms(dimensions: int, reflections: bool = False) -> Tuple[Transform, ...]:
    """Return the constant transform table for ``dimensions``-D cells."""
    if dimensions < 1:
        raise ValueError(f"dimensions must be >= 1, got {dimensions}")
    table: List[Transform] = []
    for perm in itertools.permutations(range(dimensions)):
        parity = _perm_parity(perm)
        for signs in itertools.product((1, -1), repeat=dimensions):
            det = parity
            for s in signs:
                det *= s
            if det == 1 or reflections:
                table.append((tuple(perm), tuple(signs)))
    return tuple(table)


CUBE_ROTATIONS = transforms(3, False)
CUBE_SYMMETRIES = transforms(3, True)


def apply_transform(cell: Sequence[int], transform: Transform) -> Coordinate:
    perm, signs = transform
    return tuple.__new__(Coordinate, (s * cell[p] for p, s in zip(perm, signs)))


def normalize(cells: Iterable[Coordinate]) -> Orientation:
    """Sort ``cells`` and translate them so the smallest one sits on the origin."""
    ordered = sorted(cells)
    shift = ordered[0].offset_to(Coordinate.origin(len(ordered[0])))
    return tuple(c.translate(shift) for c in ordered)


def orientations(shape: Iterable[Iterable[int]], reflections: bool = False) -> Tuple[Orientation, ...]:
    """Distinct normalized orientations of ``shape`` in transform-table order.

    Transforms that produce an already-seen normalized cell set are skipped, so
    a symmetric shape yields fewer orientations than the table has entries.
    """
    cells = normalize_shape(shape)
    seen: Dict[Orientation, None] = {}
    for transform in transforms(len(cells[0]), reflections):
        oriented = normalize(apply_transform(c, transform) for c in cells)
        if oriented not in seen:
            seen[oriented] = None
    return tuple(seen)


__all__ = [
    "CUBE_ROTATIONS",
    "CUBE_SYMMETRIES",
    "apply_transform",
    "normalize",
    "orientations",
    "transforms",
]
