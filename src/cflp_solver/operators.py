"""Neighborhood operators on the open/closed facility vector.

Every operator mutates ``solution.open_facilities`` in place and draws its
randomness from the ``numpy.random.Generator`` it is given. None of them keep
the solution feasible; callers retry until ``Solution.valid()`` holds.
"""

import numpy as np

from cflp_solver.solution import Solution


def _pick_range(n: int, rng: np.random.Generator) -> tuple[int, int]:
    a, b = rng.integers(0, n, size=2)
    return int(min(a, b)), int(max(a, b))


def flip(solution: Solution, rng: np.random.Generator) -> None:
    """Toggles one facility chosen uniformly at random."""
    i = int(rng.integers(0, solution.problem.num_facilities))
    solution.open_facilities[i] = not solution.open_facilities[i]


def range_flip(solution: Solution, rng: np.random.Generator) -> None:
    """Toggles every facility in a random inclusive range ``[x, y]``."""
    x, y = _pick_range(solution.problem.num_facilities, rng)
    solution.open_facilities[x : y + 1] = ~solution.open_facilities[x : y + 1]


def reverse(solution: Solution, rng: np.random.Generator) -> None:
    """Mirrors the facilities of a random range ``[x, y]`` onto its front.

    Positions ``x .. y // 2 - 1`` take the value of their mirror ``x + y - i``;
    the back half is left as it was, so this is not a full reversal.
    """
    x, y = _pick_range(solution.problem.num_facilities, rng)
    reverse_range(solution.open_facilities, x, y)


def reverse_range(bits: np.ndarray, x: int, y: int) -> None:
    """Applies the ``reverse`` move to ``bits`` for a given range."""
    for i in range(x, y // 2):
        bits[i] = bits[x + y - i]


OPERATORS = (flip, range_flip, reverse)


def random_area_operate(solution: Solution, rng: np.random.Generator) -> None:
    """Applies one of ``flip``, ``range_flip`` or ``reverse`` chosen uniformly."""
    operator = OPERATORS[int(rng.integers(0, len(OPERATORS)))]
    operator(solution, rng)


def shuffle(solution: Solution, rng: np.random.Generator) -> None:
    """Opens or closes every facility independently with probability 1/2."""
    solution.open_facilities[:] = rng.integers(
        0, 2, size=solution.problem.num_facilities
    ).astype(bool)
