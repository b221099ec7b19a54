import sys
from typing import TextIO

import numpy as np

from cflp_solver.problem import Problem


class Solution:
    """Candidate answer to a CFLP: open facilities and demand assignment."""

    def __init__(self, problem: Problem) -> None:
        """Initializes an empty solution with every facility closed.

        Args:
            problem: The problem this solution answers. It is shared, never
                copied or modified.
        """
        self.problem = problem
        self.open_facilities = np.zeros(problem.num_facilities, dtype=bool)
        self.assignment = np.zeros(
            (problem.num_facilities, problem.num_customers), dtype=np.int64
        )
        self.run_time: float | None = None

    def copy(self) -> "Solution":
        """Returns a copy owning its own arrays and sharing the problem."""
        other = Solution.__new__(Solution)
        other.problem = self.problem
        other.open_facilities = self.open_facilities.copy()
        other.assignment = self.assignment.copy()
        other.run_time = self.run_time
        return other

    def valid(self) -> bool:
        """Whether the open facilities can cover the total demand."""
        open_capacity = self.problem.capacities[self.open_facilities].sum()
        return bool(open_capacity >= self.problem.total_demand)

    def open(self, i: int) -> None:
        """Opens facility ``i``."""
        self.open_facilities[i] = True

    def assign(self) -> None:
        """Assigns all customer demand to the open facilities.

        The cheapest (facility, customer) unit cost among open facilities with
        spare capacity and customers with unmet demand is served first, as much
        as the two allow. Equal costs are resolved in facility-then-customer
        order. The previous assignment is discarded.

        The caller must ensure ``valid()`` holds; on an infeasible solution
        this method does not terminate.
        """
        problem = self.problem
        self.assignment[:] = 0

        remaining_capacity = np.where(self.open_facilities, problem.capacities, 0)
        remaining_demand = problem.demands.copy()
        unmet = problem.total_demand
        unit_costs = problem.costs.astype(float)

        while unmet > 0:
            # Only open, non-full facilities and unsatisfied customers compete
            available = np.outer(remaining_capacity > 0, remaining_demand > 0)
            candidates = np.where(available, unit_costs, np.inf)

            # argmin returns the first minimum in row-major order
            i, j = np.unravel_index(np.argmin(candidates), candidates.shape)

            fill = min(remaining_capacity[i], remaining_demand[j])
            remaining_capacity[i] -= fill
            remaining_demand[j] -= fill
            unmet -= fill
            self.assignment[i, j] += fill

    def cost(self) -> float:
        """Computes fixed plus transportation cost.

        Transportation for customer ``j`` is charged as the served fraction
        ``assignment[i][j] / demands[j]`` times the unit cost ``costs[i][j]``.
        Customers with zero demand contribute nothing. Terms are accumulated
        one cell at a time in facility-then-customer order, so the printed
        total does not depend on numpy's summation order.
        """
        problem = self.problem
        cost = float(problem.fixed_costs[self.open_facilities].sum())

        served = (self.assignment > 0) & (problem.demands > 0)[np.newaxis, :]
        # nonzero lists cells in row-major order
        for i, j in zip(*np.nonzero(served)):
            cost += (
                float(self.assignment[i, j]) / float(problem.demands[j])
            ) * float(problem.costs[i, j])

        return cost

    def display(self, stream: TextIO | None = None) -> None:
        """Writes the cost, open facilities and assignment matrix.

        Args:
            stream: Output stream, standard output by default.
        """
        if stream is None:
            stream = sys.stdout

        print(self.cost(), file=stream)
        print(" ".join("1" if x else "0" for x in self.open_facilities), file=stream)
        for row in self.assignment:
            print("\t".join(str(int(y)) for y in row), file=stream)

    def __repr__(self) -> str:
        opened = np.flatnonzero(self.open_facilities).tolist()
        return f"Solution(open={opened}, run_time={self.run_time})"
