"""
Example: Solving a MIP from a JSON file with jsonlp

This example demonstrates how to load a problem file, write it out in
MPS format alongside the solve, and drive the solve lifecycle step by step.
"""

import logging
import sys
from pathlib import Path

import jsonlp


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    print()
    print("=" * 70)
    print("jsonlp Example: Solving a JSON problem file - Python")
    print("=" * 70)
    print()

    # Get JSON file path
    if len(sys.argv) > 1:
        json_file = Path(sys.argv[1])
    else:
        # Use default example file
        json_file = Path(__file__).parent / "data" / "production_mip.json"

    if not json_file.exists():
        print(f"Error: JSON file not found: {json_file}")
        print()
        print("Usage:")
        print(f"  python {sys.argv[0]} <path_to_json_file>")
        print()
        return 1

    print(f"JSON file: {json_file.absolute()}")
    print()

    param = jsonlp.Parameters(
        time_limit=60.0,
        user_problem_file=str(json_file.with_suffix(".mps")),
        timing=True,
    )

    # Step 1: Load model from JSON file
    print("Loading model from JSON file...")
    model = jsonlp.load_problem(json_file, param)
    print(f"Model loaded: {model!r}")
    print()

    # Step 2: Drive the lifecycle explicitly; tokens are released on exit
    with jsonlp.SolveSession(model, jsonlp.HighsEngine(), param) as session:
        session.create_problem()
        session.configure()
        session.solve()
        result = session.extract()

    print(result.format_report())
    print()
    print(f"Session state: {session.state.value}")

    return 0 if result.complete else 1


if __name__ == "__main__":
    try:
        exit_code = main()
        sys.exit(exit_code)
    except ImportError as e:
        print(f"Error: {e}")
        print("\nPlease install jsonlp first:")
        print("  python -m pip install .")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
