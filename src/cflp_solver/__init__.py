"""Heuristic solvers for the Capacitated Facility Location Problem (CFLP)."""

from cflp_solver.exceptions import (
    InfeasibleProblemError,
    ParseError,
    UnknownStrategyError,
)
from cflp_solver.io import parse_problem, read_problem
from cflp_solver.problem import Problem
from cflp_solver.solution import Solution
from cflp_solver.solvers import (
    ALGORITHMS,
    BruteForceSolver,
    GreedySolver,
    SimulatedAnnealingSolver,
    Solver,
    get_solver,
    iter_open_vectors,
    solve,
)

__all__ = [
    "ALGORITHMS",
    "BruteForceSolver",
    "GreedySolver",
    "InfeasibleProblemError",
    "ParseError",
    "Problem",
    "SimulatedAnnealingSolver",
    "Solution",
    "Solver",
    "UnknownStrategyError",
    "get_solver",
    "iter_open_vectors",
    "parse_problem",
    "read_problem",
    "solve",
]
