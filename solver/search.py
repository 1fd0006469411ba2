# solver/search.py
"""Exhaustive exact-cover search by depth-first backtracking.

Each node picks the smallest uncovered target cell (canonical order) and tries
every template left in the bag, every orientation of it, at the one
translation that puts the orientation's smallest cell on that open cell.
Cells before the open cell are all covered, so a legal footprint containing
the open cell must start there; any other translation would overlap or leave
the target.  Because every packing has exactly one piece on the smallest open
cell at every depth, each packing is reached once and only once.

The bag and the solution are mutated in place and restored on every exit
path.  A complete solution is reported through ``on_solution`` as a frozen
snapshot; returning :data:`STOP` from the callback unwinds the whole search.
"""
from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from config import CFG
from errors import DimensionMismatchError
from models import Coordinate, Placement, Target
from solver.pieces import Bag
from solver.solution import Solution

logger = logging.getLogger(__name__)


class Signal(Enum):
    CONTINUE = "continue"
    STOP = "stop"


STOP = Signal.STOP
CONTINUE = Signal.CONTINUE

OnSolution = Callable[[Solution], Any]


@dataclass
class SearchStats:
    nodes: int = 0
    candidates: int = 0
    solutions: int = 0
    stopped: bool = False
    elapsed: float = 0.0

    def as_dict(self):
        return asdict(self)


class _Search:
    def __init__(
        self,
        target: Target,
        bag: Bag,
        solution: Solution,
        on_solution: OnSolution,
        track_progress: bool,
    ) -> None:
        self.target = target
        self.bag = bag
        self.solution = solution
        self.on_solution = on_solution
        self.ordered = target.ordered
        self.cells = target.cells
        self.stats = SearchStats()
        self.track_progress = track_progress
        self.report_every = max(1, int(CFG.PROGRESS_EVERY_NODES))
        self.depth = 0

    def run(self) -> SearchStats:
        t0 = time.time()
        if self.track_progress:
            _progress_start(len(self.target), len(self.bag))
        ok = False
        try:
            self.stats.stopped = self._descend(0)
            ok = True
        finally:
            self.stats.elapsed = time.time() - t0
            if self.track_progress:
                _progress_finish(self.stats, ok)
        logger.info(
            "Search finished: %d solution(s), %d node(s), %d candidate(s)%s in %.3fs",
            self.stats.solutions,
            self.stats.nodes,
            self.stats.candidates,
            " (stopped early)" if self.stats.stopped else "",
            self.stats.elapsed,
        )
        return self.stats

    def _emit(self) -> bool:
        snapshot = self.solution.snapshot(self.bag)
        self.stats.solutions += 1
        logger.debug("Solution #%d: %s", self.stats.solutions, snapshot)
        if self.track_progress:
            _progress_tick(self.stats, self.depth)
        return self.on_solution(snapshot) is STOP

    def _fits(self, orientation, offset: Coordinate) -> bool:
        cells = self.cells
        solution = self.solution
        for cell in orientation:
            moved = cell.translate(offset)
            if moved not in cells or solution.is_covered(moved):
                return False
        return True

    def _descend(self, cursor: int) -> bool:
        """Return True when the caller asked to stop."""
        stats = self.stats
        stats.nodes += 1
        if self.track_progress and stats.nodes % self.report_every == 0:
            _progress_tick(stats, self.depth)

        solution = self.solution
        if solution.is_complete:
            return self._emit()

        ordered = self.ordered
        while solution.is_covered(ordered[cursor]):
            cursor += 1
        open_cell = ordered[cursor]

        bag = self.bag
        for template in bag.templates():
            for orientation in template.orientations:
                offset = orientation[0].offset_to(open_cell)
                if not self._fits(orientation, offset):
                    continue
                placement = Placement(template, orientation, offset)
                bag.take(template)
                solution.place(placement)
                stats.candidates += 1
                self.depth += 1
                try:
                    stop = self._descend(cursor + 1)
                finally:
                    self.depth -= 1
                    solution.remove_last()
                    bag.give_back(template)
                if stop:
                    return True
        return False


def solve(
    target: Target,
    bag: Bag,
    partial: Optional[Solution],
    on_solution: OnSolution,
    *,
    track_progress: Optional[bool] = None,
) -> SearchStats:
    """Enumerate every exact packing of ``target`` with pieces from ``bag``.

    ``partial`` is the starting point (``None`` or :meth:`Solution.empty` for a
    fresh search); it is bound to ``target`` and handed back unchanged.  Pieces
    already placed in it must not also be counted in ``bag``.  Pieces left in
    the bag once the target is covered are allowed.

    ``on_solution`` is called once per packing, in search order, with a frozen
    snapshot.  Returning :data:`STOP` ends the enumeration.
    """
    if partial is None:
        partial = Solution.empty()
    _check_dimensions(target, bag)
    partial.bind(target)
    if track_progress is None:
        track_progress = bool(CFG.TRACK_PROGRESS)
    logger.info(
        "Search started: %d target cell(s), %d piece(s) of %d kind(s), %d already placed",
        len(target),
        len(bag),
        len(bag.templates()),
        len(partial),
    )
    return _Search(target, bag, partial, on_solution, track_progress).run()


def _check_dimensions(target: Target, bag: Bag) -> None:
    dims = target.dimensions
    for template in bag.templates():
        if len(template.shape[0]) != dims:
            raise DimensionMismatchError(
                f"{template!r} is {len(template.shape[0])}-D but the target is {dims}-D"
            )


def solve_all(
    target: Target,
    bag: Bag,
    partial: Optional[Solution] = None,
    limit: Optional[int] = None,
) -> List[Solution]:
    """Collect packings into a list, optionally stopping after ``limit``."""
    found: List[Solution] = []

    def _collect(solution: Solution):
        found.append(solution)
        if limit is not None and len(found) >= limit:
            return STOP
        return CONTINUE

    if limit is not None and limit <= 0:
        return found
    solve(target, bag, partial, _collect)
    return found


def count_solutions(target: Target, bag: Bag, partial: Optional[Solution] = None) -> int:
    return solve(target, bag, partial, lambda _solution: None).solutions


# ---------------- progress hooks ----------------

def _progress_start(cells: int, pieces: int) -> None:
    import progress

    progress.reset()
    progress.start_timer()
    progress.set_status("Solving")
    progress.set_message(f"{cells} cells, {pieces} pieces")


def _progress_tick(stats: SearchStats, depth: int) -> None:
    import progress

    progress.set_nodes(stats.nodes)
    progress.set_solutions(stats.solutions)
    progress.set_depth(depth)


def _progress_finish(stats: SearchStats, ok: bool) -> None:
    import progress

    progress.set_nodes(stats.nodes)
    progress.set_solutions(stats.solutions)
    if not ok:
        progress.set_done(False, reason="search aborted")
    elif stats.stopped:
        progress.set_done(True, reason="stopped by caller")
    else:
        progress.set_done(True)


__all__ = [
    "CONTINUE",
    "STOP",
    "SearchStats",
    "Signal",
    "count_solutions",
    "solve",
    "solve_all",
]
