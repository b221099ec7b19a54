from typing import Any

import numpy as np


def _as_int_array(values: Any, name: str) -> np.ndarray:
    try:
        return np.array(values, dtype=np.int64)
    except (TypeError, ValueError, OverflowError) as error:
        error_msg = f"Cannot read {name} as 64-bit integers."
        raise ValueError(error_msg) from error


class Problem:
    """Capacitated Facility Location Problem (CFLP) instance data."""

    def __init__(
        self,
        capacities: Any,
        fixed_costs: Any,
        demands: Any,
        costs: Any,
        debug: bool = False,
    ) -> None:
        """Initializes the Problem instance with facility and customer data.

        Args:
            capacities: Capacity of each facility (length N).
            fixed_costs: Fixed opening cost of each facility (length N).
            demands: Demand of each customer (length M).
            costs: Unit transportation costs, one row per facility (N x M).
            debug: Whether to enable debug printing.

        Raises:
            ValueError: If the arrays have inconsistent shapes, there is no
                facility, or any entry is negative.
        """
        self.capacities = _as_int_array(capacities, "capacities").reshape(-1)
        self.fixed_costs = _as_int_array(fixed_costs, "fixed costs").reshape(-1)
        self.demands = _as_int_array(demands, "demands").reshape(-1)

        self.num_facilities = len(self.capacities)
        self.num_customers = len(self.demands)

        # Accept nested rows or a flat row-major sequence
        costs = _as_int_array(costs, "costs")
        shape = (self.num_facilities, self.num_customers)
        if costs.ndim == 1 and costs.size == shape[0] * shape[1]:
            costs = costs.reshape(shape)
        if costs.shape != shape:
            error_msg = (
                f"Cost matrix must be {shape[0]}x{shape[1]}, got shape {costs.shape}."
            )
            raise ValueError(error_msg)
        self.costs = costs

        self._validate()

        self.total_demand = int(self.demands.sum())
        self.total_capacity = int(self.capacities.sum())

        for array in (self.capacities, self.fixed_costs, self.demands, self.costs):
            array.flags.writeable = False

        if debug:
            print(
                f"\nProblem loaded (n={self.num_facilities}, m={self.num_customers})"
            )
            print(f"Capacities: {self.capacities.tolist()}")
            print(f"Fixed Costs: {self.fixed_costs.tolist()}")
            print(f"Demands: {self.demands.tolist()}")
            print(f"Total Demand: {self.total_demand}")
            print(f"Costs:\n{self.costs}")

    def _validate(self) -> None:
        if self.num_facilities < 1:
            raise ValueError("A problem needs at least one facility")

        if len(self.fixed_costs) != self.num_facilities:
            error_msg = (
                f"Expected {self.num_facilities} fixed costs, "
                f"got {len(self.fixed_costs)}."
            )
            raise ValueError(error_msg)

        for name, array in (
            ("capacities", self.capacities),
            ("fixed costs", self.fixed_costs),
            ("demands", self.demands),
            ("costs", self.costs),
        ):
            if (array < 0).any():
                raise ValueError(f"Negative entries in {name}")

    @property
    def is_solvable(self) -> bool:
        """Whether opening every facility covers the total demand."""
        return self.total_capacity >= self.total_demand

    def __repr__(self) -> str:
        return (
            f"Problem(num_facilities={self.num_facilities}, "
            f"num_customers={self.num_customers}, "
            f"total_demand={self.total_demand})"
        )
