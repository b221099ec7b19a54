import numpy as np
import pulp
import pytest

from cflp_solver import (
    ALGORITHMS,
    BruteForceSolver,
    GreedySolver,
    InfeasibleProblemError,
    Problem,
    SimulatedAnnealingSolver,
    Solution,
    UnknownStrategyError,
    get_solver,
    iter_open_vectors,
    solve,
)


def solve_cflp_milp(problem: Problem) -> float:
    """Helper function to bound the CFLP from below with a MILP in PuLP.

    Facilities are binary and every customer's demand may be split into
    continuous fractions, so any solution of the heuristics is feasible here
    with the same objective value.
    """
    facilities = range(problem.num_facilities)
    customers = [j for j in range(problem.num_customers) if problem.demands[j] > 0]

    model = pulp.LpProblem("CFLP", pulp.LpMinimize)

    # Decision variables
    y = pulp.LpVariable.dicts("y", facilities, 0, 1, cat="Binary")
    x = pulp.LpVariable.dicts(
        "x", ((i, j) for i in facilities for j in customers), 0, 1
    )

    # Objective
    facility_term = pulp.lpSum(int(problem.fixed_costs[i]) * y[i] for i in facilities)
    service_term = pulp.lpSum(
        int(problem.costs[i, j]) * x[(i, j)] for i in facilities for j in customers
    )

    model += facility_term + service_term

    # Constraints
    for j in customers:
        model += pulp.lpSum(x[(i, j)] for i in facilities) == 1

    for i in facilities:
        model += (
            pulp.lpSum(int(problem.demands[j]) * x[(i, j)] for j in customers)
            <= int(problem.capacities[i]) * y[i]
        )

    for i in facilities:
        for j in customers:
            model += x[(i, j)] <= y[i]

    model.solve(pulp.PULP_CBC_CMD(msg=False))

    assert pulp.LpStatus[model.status] == "Optimal"

    return pulp.value(model.objective)


def random_problem(seed: int, n: int = 6, m: int = 5) -> Problem:
    """Helper function to build a random solvable problem."""
    rng = np.random.default_rng(seed)
    demands = rng.integers(1, 10, size=m)
    capacities = rng.integers(5, 25, size=n)
    capacities[0] = max(int(capacities[0]), int(demands.sum()))

    return Problem(
        capacities=capacities,
        fixed_costs=rng.integers(10, 60, size=n),
        demands=demands,
        costs=rng.integers(1, 20, size=(n, m)),
    )


def assert_feasible(solution: Solution) -> None:
    """Helper function to check the assignment constraints."""
    problem = solution.problem
    assignment = solution.assignment

    assert solution.valid()
    assert assignment.sum(axis=0).tolist() == problem.demands.tolist()
    assert (assignment.sum(axis=1) <= problem.capacities).all()
    assert (assignment[~solution.open_facilities] == 0).all()
    assert solution.run_time is not None and solution.run_time >= 0


def test_iter_open_vectors():
    """Test case for the enumeration order of open/closed vectors."""
    vectors = [v.tolist() for v in iter_open_vectors(3)]

    assert len(vectors) == 8
    assert vectors[0] == [False, False, False]
    assert vectors[1] == [True, False, False]
    assert vectors[2] == [False, True, False]
    assert vectors[3] == [True, True, False]
    assert vectors[-1] == [True, True, True]
    assert len({tuple(v) for v in vectors}) == 8

    # Restartable
    assert len(list(iter_open_vectors(3))) == 8


def test_greedy_and_brute_force_example():
    """Test case for the two-facility, one-customer example."""
    problem = Problem([5, 5], [10, 20], [4], [[1], [2]])

    greedy = GreedySolver(debug=True).solve(problem)

    assert greedy.open_facilities.tolist() == [True, False]
    assert greedy.assignment.tolist() == [[4], [0]]
    assert greedy.cost() == pytest.approx(11.0)
    assert_feasible(greedy)

    brute = BruteForceSolver(progress_interval=1, debug=True).solve(problem)

    assert brute.open_facilities.tolist() == [True, False]
    assert brute.cost() == pytest.approx(11.0)
    assert_feasible(brute)


def test_greedy_opens_until_valid():
    """Test case for greedy opening by ascending fixed cost."""
    problem = Problem(
        capacities=[10, 3, 4, 5],
        fixed_costs=[40, 5, 5, 1],
        demands=[6, 5],
        costs=[[1, 1], [2, 2], [3, 3], [4, 4]],
    )

    solution = GreedySolver().solve(problem)

    # 3 (cost 1), then 1 and 2 (cost 5, lowest index first): 5 + 3 + 4 >= 11
    assert solution.open_facilities.tolist() == [False, True, True, True]
    assert_feasible(solution)


def test_brute_force_keeps_first_minimum():
    """Test case for ties on the minimal cost."""
    problem = Problem([5, 5], [10, 10], [4], [[1], [1]])

    solution = BruteForceSolver().solve(problem)

    assert solution.open_facilities.tolist() == [True, False]
    assert solution.cost() == pytest.approx(11.0)


def test_zero_demand_problem():
    """Test case for a problem without demand."""
    problem = Problem([5, 5], [3, 1], [0], [[2], [2]])

    brute = BruteForceSolver().solve(problem)
    greedy = GreedySolver().solve(problem)

    assert brute.open_facilities.tolist() == [False, False]
    assert brute.cost() == 0.0
    assert greedy.open_facilities.tolist() == [False, True]
    assert brute.cost() <= greedy.cost()


def test_infeasible_problem():
    """Test case for problems whose total capacity is below total demand."""
    problem = Problem([1, 1], [1, 1], [5], [[1], [1]])

    for solver in (
        GreedySolver(),
        BruteForceSolver(),
        SimulatedAnnealingSolver(outer_iterations=1, inner_iterations=1, seed=0),
    ):
        with pytest.raises(InfeasibleProblemError):
            solver.solve(problem)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_solvers_against_milp_bound(seed):
    """Test case comparing every strategy with the exact lower bound."""
    problem = random_problem(seed)
    bound = solve_cflp_milp(problem)

    greedy = GreedySolver().solve(problem)
    brute = BruteForceSolver().solve(problem)
    annealing = SimulatedAnnealingSolver(
        outer_iterations=10, inner_iterations=20, seed=seed
    ).solve(problem)

    for solution in (greedy, brute, annealing):
        assert_feasible(solution)
        assert solution.cost() >= bound - 1e-6

    assert brute.cost() <= greedy.cost() + 1e-9
    assert brute.cost() <= annealing.cost() + 1e-9


def test_simulated_annealing_is_reproducible():
    """Test case for seeded annealing runs."""
    problem = random_problem(11, n=8, m=6)

    first = SimulatedAnnealingSolver(
        outer_iterations=5, inner_iterations=10, seed=42, debug=True
    ).solve(problem)
    second = SimulatedAnnealingSolver(
        outer_iterations=5, inner_iterations=10, rng=np.random.default_rng(42)
    ).solve(problem)

    assert_feasible(first)
    assert np.array_equal(first.open_facilities, second.open_facilities)
    assert np.array_equal(first.assignment, second.assignment)
    assert first.cost() == pytest.approx(second.cost())


def test_simulated_annealing_acceptance():
    """Test case for the acceptance rule."""
    solver = SimulatedAnnealingSolver(seed=0)

    assert solver._accept(10.0, 9.0, 100.0) is True
    assert solver._accept(10.0, 10.0, 0.5) is True
    assert not any(solver._accept(0.0, 1e6, 1.0) for _ in range(100))
    assert sum(solver._accept(0.0, 1.0, 1e6) for _ in range(100)) > 90


def test_get_solver():
    """Test case for looking up strategies by name."""
    assert set(ALGORITHMS) == {"greedy", "brute-force", "sa"}
    assert isinstance(get_solver("greedy"), GreedySolver)
    assert isinstance(get_solver("brute-force"), BruteForceSolver)

    annealing = get_solver("sa", outer_iterations=2, inner_iterations=3, seed=5)
    assert isinstance(annealing, SimulatedAnnealingSolver)
    assert annealing.outer_iterations == 2

    with pytest.raises(UnknownStrategyError):
        get_solver("tabu")

    problem = Problem([5, 5], [10, 20], [4], [[1], [2]])
    assert solve(problem, "greedy").cost() == pytest.approx(11.0)


class ScriptedAnnealing(SimulatedAnnealingSolver):
    """Helper solver replaying preset neighbors and acceptance decisions."""

    def __init__(self, neighbors, decisions, **options):
        super().__init__(**options)
        self.neighbors = iter(neighbors)
        self.decisions = iter(decisions)
        self.calls = []

    def _neighbor(self, solution):
        return next(self.neighbors)

    def _accept(self, best_cost, candidate_cost, temperature):
        self.calls.append((best_cost, candidate_cost, temperature))
        return next(self.decisions)


def opened(problem: Problem, facilities: list[int]) -> Solution:
    """Helper function to build an assigned solution."""
    solution = Solution(problem)
    for i in facilities:
        solution.open(i)
    solution.assign()
    return solution


def test_simulated_annealing_cools_geometrically():
    """Test case for the temperature schedule across outer steps."""
    problem = Problem([5, 5], [10, 20], [4], [[1], [2]])
    neighbors = [opened(problem, [0]) for _ in range(6)]
    solver = ScriptedAnnealing(
        neighbors,
        [False] * 6,
        outer_iterations=3,
        inner_iterations=2,
        initial_temperature=100.0,
        cooling_rate=0.5,
        seed=0,
    )

    solver.solve(problem)

    temperatures = [t for _, _, t in solver.calls]
    assert temperatures == [100.0, 100.0, 50.0, 50.0, 25.0, 25.0]


def test_simulated_annealing_returns_held_solution():
    """Test case for accepted candidates replacing the held solution."""
    problem = Problem([5, 5], [10, 20], [4], [[1], [2]])
    cheap = opened(problem, [0])
    expensive = opened(problem, [1])
    solver = ScriptedAnnealing(
        [cheap, expensive],
        [True, True],
        outer_iterations=1,
        inner_iterations=2,
        seed=0,
    )

    solution = solver.solve(problem)

    # The second move is compared against the first accepted candidate
    assert solver.calls[1][0] == pytest.approx(11.0)
    assert solver.calls[1][1] == pytest.approx(22.0)
    assert solution is expensive
    assert solution.cost() > cheap.cost()


def test_simulated_annealing_frozen_temperature():
    """Test case for a zero temperature rejecting worse candidates."""
    solver = SimulatedAnnealingSolver(seed=0)

    assert solver._accept(10.0, 11.0, 0.0) is False
    assert solver._accept(10.0, 9.0, 0.0) is True

    problem = random_problem(5)
    for options in ({"initial_temperature": 0.0}, {"cooling_rate": 0.0}):
        solution = SimulatedAnnealingSolver(
            outer_iterations=3, inner_iterations=5, seed=1, **options
        ).solve(problem)
        assert_feasible(solution)
