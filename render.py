import string
from typing import Dict, List

from models import Coordinate
from solver.solution import Solution

_LABELS = string.ascii_uppercase + string.ascii_lowercase + string.digits


def _label(idx: int) -> str:
    return _LABELS[idx % len(_LABELS)]


def render_layers(solution: Solution) -> str:
    """Text picture of a (possibly partial) solution, one block per z layer.

    Each placement gets a letter in discovery order; ``.`` marks a target cell
    nobody covers yet and a blank marks a cell outside the target.  Rows run
    along y, columns along x.  2-D solutions print as a single layer.
    """
    target = solution.target
    cells = set(solution.covered)
    if target is not None:
        cells |= target.cells
    if not cells:
        return ""

    dims = len(next(iter(cells)))
    if dims > 3:
        raise ValueError(f"Cannot draw {dims}-D cells as layers")
    owners: Dict[Coordinate, int] = {}
    for idx, placement in enumerate(solution.placements):
        for cell in placement.footprint:
            owners[cell] = idx

    def _pad(c: Coordinate) -> tuple:
        return tuple(c) + (0,) * (3 - dims)

    padded = {_pad(c): c for c in cells}
    xs = [p[0] for p in padded]
    ys = [p[1] for p in padded] if dims > 1 else [0]
    zs = sorted({p[2] for p in padded})

    blocks: List[str] = []
    for z in zs:
        rows = []
        for y in range(min(ys), max(ys) + 1):
            row = []
            for x in range(min(xs), max(xs) + 1):
                cell = padded.get((x, y, z))
                if cell is None:
                    row.append(" ")
                elif cell in owners:
                    row.append(_label(owners[cell]))
                else:
                    row.append(".")
            rows.append("".join(row).rstrip())
        header = f"z={z}" if dims >= 3 else ""
        blocks.append("\n".join(([header] if header else []) + rows))
    return "\n\n".join(blocks)
