"""
Command line entry point: read a JSON problem file, solve it, print the report.

Usage:
    jsonlp-solve problem.json
    jsonlp-solve --timing problem.json
    jsonlp-solve --mps-output problem.mps problem.json
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .builder import load_problem
from .exceptions import JSONLPError
from .parameters import Parameters
from .solver import Solver

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonlp-solve",
        description="Read an LP/MIP problem from a JSON file and solve it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The JSON file should contain LP or MIP problem data: a CSR constraint matrix,
objective coefficients, and optional constraint bounds, variable bounds and
variable types.

Examples:
  # Solve with default settings
  jsonlp-solve problem.json

  # Print the duration of every phase
  jsonlp-solve --timing problem.json

  # Also write the problem to an MPS file
  jsonlp-solve --mps-output problem.mps problem.json
        """,
    )
    parser.add_argument("json_file", type=Path, help="Problem file in JSON format")
    parser.add_argument("-t", "--timing", action="store_true",
                        help="Enable detailed performance timing output")
    parser.add_argument("--mps-output", metavar="FILE", default=None,
                        help="Write problem to MPS file")
    parser.add_argument("--time-limit", type=float, default=Parameters.time_limit,
                        help="Solver time limit in seconds (default: %(default)s)")
    parser.add_argument("--tolerance", type=float, default=Parameters.absolute_primal_tolerance,
                        help="Absolute primal tolerance (default: %(default)s)")
    parser.add_argument("--strict", action="store_true",
                        help="Reject malformed numbers and unknown constraint types")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging and engine console output")
    return parser


def run(json_file: Path, parameters: Parameters) -> int:
    """Load, solve and report. Returns the process exit code."""
    print("JSON LP Solver")
    print("==============")
    print(f"Reading JSON file: {json_file}")

    try:
        model = load_problem(json_file, parameters)
    except JSONLPError as exc:
        print(f"Error: {exc}")
        print("Failed to parse JSON file")
        return 1
    print("Successfully parsed JSON file")

    print("Creating and solving problem...")
    print(f"Problem size: {model.num_constraints} constraints, "
          f"{model.num_variables} variables, {model.nnz} nonzeros")

    try:
        results = Solver(parameters=parameters).solve(model)
    except JSONLPError as exc:
        print(f"\nSolver failed: {exc}")
        return 1

    if results.problem_file:
        print(f"MPS file written to: {results.problem_file}")
    elif parameters.user_problem_file:
        print(f"Warning: Could not write MPS file: {parameters.user_problem_file}")

    print()
    print(results.format_report())
    print("\nSolver completed successfully!")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    parameters = Parameters(
        absolute_primal_tolerance=args.tolerance,
        time_limit=args.time_limit,
        user_problem_file=args.mps_output,
        timing=args.timing,
        strict_parsing=args.strict,
        verbose=args.verbose,
    )
    logger.debug("Running with %r", parameters)

    try:
        return run(args.json_file, parameters)
    except ImportError as exc:
        print(f"Error: {exc}")
        print("\nPlease install the HiGHS bindings first:")
        print("  python -m pip install highspy")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
