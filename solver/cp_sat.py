import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Coordinate, Placement, Target
from solver.pieces import Bag, Template
from solver.solution import Solution

logger = logging.getLogger(__name__)

# ---------------- helpers ----------------

def build_candidates(target: Target, bag: Bag) -> List[Placement]:
    """Every placement of a bag template whose footprint lies inside ``target``.

    Ordered by template (bag order), orientation, then anchor cell, so the
    model and its variable names are reproducible.
    """
    out: List[Placement] = []
    cells = target.cells
    for template in bag.templates():
        for orientation in template.orientations:
            anchor = orientation[0]
            for cell in target.ordered:
                offset = anchor.offset_to(cell)
                if all(c.translate(offset) in cells for c in orientation):
                    out.append(Placement(template, orientation, offset))
    return out


def _configure(solver: _cp.CpSolver, max_seconds: float, *, enumerate_all: bool) -> None:
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.log_search_progress = False
    if enumerate_all:
        # Full enumeration needs a single worker and no presolve reductions.
        solver.parameters.enumerate_all_solutions = True
        solver.parameters.num_workers = 1
        solver.parameters.cp_model_presolve = False
    else:
        solver.parameters.num_workers = int(getattr(CFG, "CP_SAT_WORKERS", 1))


def _build_model(
    target: Target, bag: Bag
) -> Tuple[Optional[_cp.CpModel], List[Placement], List[_cp.IntVar], Optional[str]]:
    """Exact-cover model: each target cell once, each template at most its count."""
    candidates = build_candidates(target, bag)
    m = _cp.CpModel()
    p = [m.new_bool_var(f"p_{k}") for k in range(len(candidates))]

    cell_to_vars: Dict[Coordinate, List[_cp.IntVar]] = defaultdict(list)
    template_to_vars: Dict[Template, List[_cp.IntVar]] = defaultdict(list)
    for k, placement in enumerate(candidates):
        for cell in placement.footprint:
            cell_to_vars[cell].append(p[k])
        template_to_vars[placement.template].append(p[k])

    for cell in target.ordered:
        vars_here = cell_to_vars.get(cell)
        if not vars_here:
            return None, candidates, p, f"No piece can cover {cell}"
        m.add_exactly_one(vars_here)

    for template, count in bag.counts():
        vars_t = template_to_vars.get(template)
        if vars_t and count < len(vars_t):
            m.add(sum(vars_t) <= count)

    return m, candidates, p, None


def _to_solution(target: Target, chosen: List[Placement]) -> Solution:
    solution = Solution.empty().bind(target)
    # Replay in canonical anchor order, the order the backtracking search uses.
    for placement in sorted(chosen, key=lambda pl: pl.anchor):
        solution.place(placement)
    return solution.snapshot()


class _CountingCallback(_cp.CpSolverSolutionCallback):
    def __init__(self) -> None:
        super().__init__()
        self.count = 0

    def on_solution_callback(self) -> None:
        self.count += 1


# ---------------- main entry points ----------------

def try_pack_exact_cover(
    target: Target,
    bag: Bag,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, Optional[Solution], Optional[str]]:
    """Find one exact packing with CP-SAT.

    Returns ``(ok, solution, reason)``; ``reason`` explains a failure.
    """
    seconds = CFG.CP_SAT_MAX_SECONDS if max_seconds is None else max_seconds
    m, candidates, p, reason = _build_model(target, bag)
    if m is None:
        return False, None, reason

    solver = _cp.CpSolver()
    _configure(solver, seconds, enumerate_all=False)
    res = solver.solve(m)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        chosen = [candidates[k] for k in range(len(candidates)) if solver.boolean_value(p[k])]
        return True, _to_solution(target, chosen), None
    if res == _cp.INFEASIBLE:
        return False, None, "Proven infeasible"
    if res == _cp.MODEL_INVALID:
        return False, None, "Model invalid (configuration error)"
    return False, None, "Stopped before solution (timebox)"


def count_exact_covers(
    target: Target,
    bag: Bag,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, int, Optional[str]]:
    """Count every exact packing with CP-SAT's full solution enumeration.

    Returns ``(ok, count, reason)``.  ``ok`` is False when the time limit cut
    the enumeration short; ``count`` then holds the packings seen so far.
    """
    seconds = CFG.CP_SAT_MAX_SECONDS if max_seconds is None else max_seconds
    m, candidates, _p, reason = _build_model(target, bag)
    if m is None:
        return True, 0, reason

    solver = _cp.CpSolver()
    _configure(solver, seconds, enumerate_all=True)
    callback = _CountingCallback()
    res = solver.solve(m, callback)
    logger.info(
        "CP-SAT enumeration: %d packing(s) over %d candidate placement(s), status %s",
        callback.count,
        len(candidates),
        solver.status_name(res),
    )

    if res == _cp.OPTIMAL:
        return True, callback.count, None
    if res == _cp.INFEASIBLE:
        return True, 0, "Proven infeasible"
    if res == _cp.MODEL_INVALID:
        return False, callback.count, "Model invalid (configuration error)"
    return False, callback.count, "Stopped before enumeration finished (timebox)"


__all__ = ["build_candidates", "count_exact_covers", "try_pack_exact_cover"]
