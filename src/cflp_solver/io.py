"""Reading CFLP instances from the whitespace-separated numeric layout.

The layout is, in order: the facility count ``N`` and customer count ``M``;
``N`` pairs of ``capacity fixed_cost``; ``M`` demands; and the ``N x M`` unit
transportation costs, facility by facility. Demands and costs may be written
as floats and are truncated toward zero.
"""

from collections.abc import Iterator
from pathlib import Path

from cflp_solver.exceptions import ParseError
from cflp_solver.problem import Problem


def _next_token(tokens: Iterator[str], section: str) -> str:
    try:
        return next(tokens)
    except StopIteration as error:
        error_msg = f"Unexpected end of input while reading {section}."
        raise ParseError(error_msg) from error


def _read_int(tokens: Iterator[str], section: str) -> int:
    token = _next_token(tokens, section)
    try:
        return int(token)
    except ValueError as error:
        error_msg = f"Expected an integer in {section}, got {token!r}."
        raise ParseError(error_msg) from error


def _read_truncated(tokens: Iterator[str], section: str) -> int:
    token = _next_token(tokens, section)
    try:
        return int(float(token))
    except (ValueError, OverflowError) as error:
        error_msg = f"Expected a number in {section}, got {token!r}."
        raise ParseError(error_msg) from error


def parse_problem(text: str, debug: bool = False) -> Problem:
    """Parses a CFLP instance from its textual representation.

    Args:
        text: The instance contents.
        debug: Whether to enable debug printing.

    Returns:
        The parsed Problem.

    Raises:
        ParseError: If a token is missing or non-numeric, or the values do not
            form a valid problem.
    """
    tokens = iter(text.split())

    n = _read_int(tokens, "the facility count")
    m = _read_int(tokens, "the customer count")
    if n < 1 or m < 0:
        error_msg = f"Invalid problem size (n={n}, m={m})."
        raise ParseError(error_msg)

    capacities = []
    fixed_costs = []
    for i in range(n):
        capacities.append(_read_int(tokens, f"the capacity of facility {i}"))
        fixed_costs.append(_read_int(tokens, f"the fixed cost of facility {i}"))

    demands = [_read_truncated(tokens, f"the demand of customer {j}") for j in range(m)]

    costs = [
        [_read_truncated(tokens, f"the cost c[{i}][{j}]") for j in range(m)]
        for i in range(n)
    ]

    try:
        return Problem(capacities, fixed_costs, demands, costs, debug=debug)
    except (ValueError, OverflowError) as error:
        raise ParseError(str(error)) from error


def read_problem(path: str | Path, debug: bool = False) -> Problem:
    """Reads a CFLP instance file.

    Args:
        path: Path of the instance file.
        debug: Whether to enable debug printing.

    Returns:
        The parsed Problem.

    Raises:
        ParseError: If the file cannot be read or is malformed.
    """
    path = Path(path)

    if debug:
        print(f"\nLoading {path}...")

    try:
        text = path.read_text()
    except (OSError, UnicodeDecodeError) as error:
        error_msg = f"Cannot read instance file {path}."
        raise ParseError(error_msg) from error

    return parse_problem(text, debug=debug)
