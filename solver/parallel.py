# solver/parallel.py
"""Fork the search at the first open cell and run the branches in workers.

Each branch is one legal placement on the smallest open cell, tried in the
same order as the sequential search.  Workers receive a private copy of the
target, bag and partial solution, collect every packing of their branch, and
send back plain tuples ``(template uid, orientation index, offset)`` per
placement.  The parent rebuilds the solutions against its own templates and
replays them to ``on_solution`` branch by branch, so the emitted sequence is
identical to :func:`solver.search.solve`.
"""
from __future__ import annotations

import logging
import multiprocessing as mp
import time
from typing import Dict, List, Optional, Sequence, Tuple

from config import CFG
from models import Coordinate, Placement, Target
from solver.pieces import Bag, Template
from solver.search import STOP, OnSolution, SearchStats, solve
from solver.solution import Solution

logger = logging.getLogger(__name__)

PlacementKey = Tuple[int, int, Tuple[int, ...]]
Branch = Tuple[Target, Bag, Tuple[Template, ...], Tuple[PlacementKey, ...]]


def _placement_key(placement: Placement) -> PlacementKey:
    template = placement.template
    return (template.uid, template.orientations.index(placement.orientation), tuple(placement.offset))


def _rebuild(
    target: Target,
    keys: Sequence[PlacementKey],
    templates: Dict[int, Template],
) -> Solution:
    solution = Solution.empty().bind(target)
    for uid, orientation_idx, offset in keys:
        template = templates[uid]
        solution.place(Placement(template, template.orientations[orientation_idx], Coordinate(*offset)))
    return solution


def top_level_branches(target: Target, bag: Bag, partial: Solution) -> List[Placement]:
    """Legal placements on the smallest open cell, in search order."""
    uncovered = partial.uncovered
    if not uncovered:
        return []
    open_cell = min(uncovered)
    branches: List[Placement] = []
    for template in bag.templates():
        for orientation in template.orientations:
            offset = orientation[0].offset_to(open_cell)
            footprint = [cell.translate(offset) for cell in orientation]
            if all(cell in target and not partial.is_covered(cell) for cell in footprint):
                branches.append(Placement(template, orientation, offset))
    return branches


# Worker must be top-level (picklable under spawn)
def _solve_branch(branch: Branch) -> List[Tuple[PlacementKey, ...]]:
    target, bag, known, keys = branch
    partial = _rebuild(target, keys, {t.uid: t for t in known})
    found: List[Tuple[PlacementKey, ...]] = []

    def _collect(solution: Solution) -> None:
        found.append(tuple(_placement_key(p) for p in solution.placements))

    solve(target, bag, partial, _collect, track_progress=False)
    return found


def solve_parallel(
    target: Target,
    bag: Bag,
    on_solution: OnSolution,
    partial: Optional[Solution] = None,
    workers: Optional[int] = None,
) -> SearchStats:
    """Parallel counterpart of :func:`solver.search.solve`.

    ``workers`` defaults to ``CFG.WORKERS``; one worker (or fewer than two
    branches) runs the sequential search in-process.  Node counts are not
    collected from workers, so ``SearchStats.nodes`` only covers the parent.
    """
    if partial is None:
        partial = Solution.empty()
    partial.bind(target)
    n_workers = int(CFG.WORKERS if workers is None else workers)

    branches = top_level_branches(target, bag, partial) if not partial.is_complete else []
    if n_workers <= 1 or len(branches) < 2:
        return solve(target, bag, partial, on_solution)

    t0 = time.time()
    stats = SearchStats(nodes=1, candidates=len(branches))
    templates: Dict[int, Template] = {t.uid: t for t, _ in bag.counts()}
    templates.update({p.template.uid: p.template for p in partial.placements})
    known = tuple(templates.values())
    base_keys = tuple(_placement_key(p) for p in partial.placements)
    placed_before = len(partial)

    jobs: List[Branch] = []
    for placement in branches:
        branch_bag = bag.copy()
        branch_bag.take(placement.template)
        jobs.append((target, branch_bag, known, base_keys + (_placement_key(placement),)))

    logger.info("Parallel search: %d branch(es) on %d worker(s)", len(jobs), n_workers)
    ctx = mp.get_context("spawn")
    pool = ctx.Pool(processes=min(n_workers, len(jobs)))
    finished = False
    try:
        for found in pool.imap(_solve_branch, jobs):
            for keys in found:
                rebuilt = _rebuild(target, keys, templates)
                leftover = bag.copy()
                for placement in rebuilt.placements[placed_before:]:
                    leftover.take(placement.template)
                solution = rebuilt.snapshot(leftover)
                stats.solutions += 1
                if on_solution(solution) is STOP:
                    stats.stopped = True
                    break
            if stats.stopped:
                break
        finished = not stats.stopped
    finally:
        if finished:
            pool.close()
        else:
            pool.terminate()
        pool.join()

    stats.elapsed = time.time() - t0
    logger.info(
        "Parallel search finished: %d solution(s)%s in %.3fs",
        stats.solutions,
        " (stopped early)" if stats.stopped else "",
        stats.elapsed,
    )
    return stats


__all__ = ["solve_parallel", "top_level_branches"]
