import itertools
import math
import time
from collections.abc import Iterator
from typing import Any

import numpy as np

from cflp_solver.exceptions import InfeasibleProblemError, UnknownStrategyError
from cflp_solver.operators import random_area_operate, shuffle
from cflp_solver.problem import Problem
from cflp_solver.solution import Solution


def iter_open_vectors(n: int) -> Iterator[np.ndarray]:
    """Yields every open/closed vector of length ``n``.

    Vectors come in the order of the bit patterns ``0 .. 2**n - 1`` with
    facility 0 as the least significant bit. The sequence is lazy and every
    call starts a new one, so ``n`` is not bounded by machine integer width.
    """
    for bits in itertools.product((False, True), repeat=n):
        yield np.array(bits[::-1], dtype=bool)


def _check_solvable(problem: Problem) -> None:
    if not problem.is_solvable:
        error_msg = (
            f"Total capacity {problem.total_capacity} cannot cover "
            f"total demand {problem.total_demand}."
        )
        raise InfeasibleProblemError(error_msg)


class Solver:
    """Base class of the solving strategies."""

    name = ""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def solve(self, problem: Problem) -> Solution:
        """Solves ``problem`` and records the elapsed wall-clock time.

        Args:
            problem: The problem to solve.

        Returns:
            The solution found, with ``run_time`` set in seconds.

        Raises:
            InfeasibleProblemError: If no feasible solution exists.
        """
        start = time.perf_counter()
        solution = self._solve(problem)
        solution.run_time = time.perf_counter() - start

        if self.debug:
            print(
                f"\n{self.name} finished in {solution.run_time:.5f}s "
                f"with cost {solution.cost()}"
            )

        return solution

    def _solve(self, problem: Problem) -> Solution:
        raise NotImplementedError


class GreedySolver(Solver):
    """Opens facilities from the cheapest fixed cost until demand is covered."""

    name = "greedy"

    def _solve(self, problem: Problem) -> Solution:
        _check_solvable(problem)
        solution = Solution(problem)

        # Stable sort keeps the lowest index first among equal fixed costs
        order = np.argsort(problem.fixed_costs, kind="stable")

        solution.open(int(order[0]))
        for i in order[1:]:
            if solution.valid():
                break
            solution.open(int(i))

        if self.debug:
            print(f"Greedy opened {int(solution.open_facilities.sum())} facilities.")

        solution.assign()
        return solution


class BruteForceSolver(Solver):
    """Tries every open/closed combination and keeps the cheapest."""

    name = "brute-force"

    def __init__(self, progress_interval: int = 10000, debug: bool = False) -> None:
        """Initializes the brute-force solver.

        Args:
            progress_interval: Number of combinations between progress reports.
            debug: Whether to print progress.
        """
        super().__init__(debug=debug)
        self.progress_interval = progress_interval

    def _solve(self, problem: Problem) -> Solution:
        _check_solvable(problem)

        best: Solution | None = None
        best_cost = math.inf
        total = 2**problem.num_facilities

        for k, open_facilities in enumerate(iter_open_vectors(problem.num_facilities)):
            if self.debug and k % self.progress_interval == 0:
                print(f"Brute force: {k}/{total} combinations, best cost {best_cost}")

            candidate = Solution(problem)
            candidate.open_facilities[:] = open_facilities
            if not candidate.valid():
                continue

            candidate.assign()
            cost = candidate.cost()
            if cost < best_cost:
                best, best_cost = candidate, cost

        return best


class SimulatedAnnealingSolver(Solver):
    """Simulated annealing over the open/closed vector.

    Each move copies the held solution, applies random neighborhood operators
    until it is feasible and reassigns demand. The candidate replaces the held
    solution when a uniform draw falls below
    ``min(1, exp((held_cost - candidate_cost) / T))``; cheaper candidates are
    therefore always taken. The held solution is returned at the end, even if
    a cheaper one was replaced along the way.
    """

    name = "sa"

    def __init__(
        self,
        outer_iterations: int = 1000,
        inner_iterations: int = 1000,
        initial_temperature: float = 100.0,
        cooling_rate: float = 0.99,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        debug: bool = False,
    ) -> None:
        """Initializes the annealing schedule.

        Args:
            outer_iterations: Number of temperature steps.
            inner_iterations: Number of moves per temperature step.
            initial_temperature: Starting temperature.
            cooling_rate: Factor applied to the temperature after each step.
            seed: Seed for a new random generator, ignored if ``rng`` is given.
            rng: Random generator to draw from.
            debug: Whether to enable debug printing.
        """
        super().__init__(debug=debug)
        self.outer_iterations = outer_iterations
        self.inner_iterations = inner_iterations
        self.initial_temperature = initial_temperature
        self.cooling_rate = cooling_rate
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        if self.debug:
            print("\nSimulatedAnnealingSolver initialized with the following parameters:")
            print(f"Outer Iterations: {self.outer_iterations}")
            print(f"Inner Iterations: {self.inner_iterations}")
            print(f"Initial Temperature: {self.initial_temperature}")
            print(f"Cooling Rate: {self.cooling_rate}")

    def _initial_solution(self, problem: Problem) -> Solution:
        solution = Solution(problem)
        shuffle(solution, self.rng)
        while not solution.valid():
            shuffle(solution, self.rng)
        solution.assign()
        return solution

    def _neighbor(self, solution: Solution) -> Solution:
        candidate = solution.copy()
        random_area_operate(candidate, self.rng)
        while not candidate.valid():
            random_area_operate(candidate, self.rng)
        candidate.assign()
        return candidate

    def _accept(self, best_cost: float, candidate_cost: float, temperature: float) -> bool:
        draw = self.rng.random()
        if candidate_cost <= best_cost:
            return True
        # A frozen schedule only takes improvements
        if temperature <= 0:
            return False
        return draw < math.exp((best_cost - candidate_cost) / temperature)

    def _solve(self, problem: Problem) -> Solution:
        _check_solvable(problem)

        best = self._initial_solution(problem)
        best_cost = best.cost()
        temperature = self.initial_temperature

        if self.debug:
            print(f"Initial cost: {best_cost}")

        for step in range(self.outer_iterations):
            for _ in range(self.inner_iterations):
                candidate = self._neighbor(best)
                candidate_cost = candidate.cost()
                if self._accept(best_cost, candidate_cost, temperature):
                    best, best_cost = candidate, candidate_cost

            temperature *= self.cooling_rate

            if self.debug:
                print(f"Step {step}: T = {temperature:.4f}, cost = {best_cost}")

        return best


ALGORITHMS: dict[str, type[Solver]] = {
    GreedySolver.name: GreedySolver,
    BruteForceSolver.name: BruteForceSolver,
    SimulatedAnnealingSolver.name: SimulatedAnnealingSolver,
}


def get_solver(name: str, **options: Any) -> Solver:
    """Creates the solver registered under ``name``.

    Args:
        name: One of ``greedy``, ``brute-force`` or ``sa``.
        options: Keyword arguments for the solver constructor.

    Returns:
        The solver instance.

    Raises:
        UnknownStrategyError: If no solver is registered under ``name``.
    """
    try:
        solver_class = ALGORITHMS[name]
    except KeyError as error:
        error_msg = (
            f"Unknown algorithm {name!r}, expected one of {', '.join(ALGORITHMS)}."
        )
        raise UnknownStrategyError(error_msg) from error

    return solver_class(**options)


def solve(problem: Problem, algorithm: str, **options: Any) -> Solution:
    """Solves ``problem`` with the algorithm registered under ``algorithm``."""
    return get_solver(algorithm, **options).solve(problem)
