import argparse
import sys
from pathlib import Path

from cflp_solver.exceptions import (
    InfeasibleProblemError,
    ParseError,
    UnknownStrategyError,
)
from cflp_solver.io import read_problem
from cflp_solver.solution import Solution
from cflp_solver.solvers import ALGORITHMS, SimulatedAnnealingSolver, get_solver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cflp-solve",
        description="Solve a capacitated facility location problem.",
    )
    parser.add_argument(
        "-i",
        "--input",
        required=True,
        help='path of a problem, like "res/instances/p1", or "all" for a batch run',
    )
    parser.add_argument(
        "-a",
        "--alg",
        required=True,
        help=f"the algorithm, from {{{', '.join(ALGORITHMS)}}}",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for sa")
    parser.add_argument(
        "--outer-iterations", type=int, default=1000, help="temperature steps for sa"
    )
    parser.add_argument(
        "--inner-iterations", type=int, default=1000, help="moves per step for sa"
    )
    parser.add_argument(
        "--instances-dir",
        type=Path,
        default=Path("res/instances"),
        help="directory of p1..pN for a batch run",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=Path("res/results"),
        help="directory receiving <alg>/p1..pN and <alg>/tbl",
    )
    parser.add_argument(
        "--count", type=int, default=71, help="number of instances in a batch run"
    )
    parser.add_argument("--debug", action="store_true", help="print diagnostics")
    return parser


def _solve_file(path: Path, args: argparse.Namespace) -> Solution:
    options = {"debug": args.debug}
    if args.alg == SimulatedAnnealingSolver.name:
        options["seed"] = args.seed
        options["outer_iterations"] = args.outer_iterations
        options["inner_iterations"] = args.inner_iterations

    solver = get_solver(args.alg, **options)
    problem = read_problem(path, debug=args.debug)
    return solver.solve(problem)


def run_batch(args: argparse.Namespace) -> None:
    """Solves p1..p<count> and writes one result file per instance plus a table."""
    # Unknown algorithm names fail before the results directory is created
    get_solver(args.alg)

    out_dir = args.results_dir / args.alg
    out_dir.mkdir(parents=True, exist_ok=True)

    with open(out_dir / "tbl", "w") as table:
        table.write(",Result,Time(s)\n")
        for k in range(1, args.count + 1):
            name = f"p{k}"
            solution = _solve_file(args.instances_dir / name, args)

            with open(out_dir / name, "w") as out:
                solution.display(out)

            table.write(f"{name},{solution.cost():.3f},{solution.run_time:.5f}\n")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.input == "all":
            run_batch(args)
        else:
            solution = _solve_file(Path(args.input), args)
            solution.display(sys.stdout)
            print(f"time: {solution.run_time:.5f}")
    except (ParseError, UnknownStrategyError, InfeasibleProblemError) as error:
        print(f"cflp-solve: {error}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
