from solver.pieces import Bag, Template
from solver.search import CONTINUE, STOP, SearchStats, Signal, count_solutions, solve, solve_all
from solver.solution import Solution
from solver.symmetry import orientations

__all__ = [
    "Bag",
    "CONTINUE",
    "STOP",
    "SearchStats",
    "Signal",
    "Solution",
    "Template",
    "count_solutions",
    "orientations",
    "solve",
    "solve_all",
]
