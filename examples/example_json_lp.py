"""
Example: Solving an LP from an in-memory JSON document with jsonlp

This example demonstrates how to build a problem model from a decoded
JSON document and solve it.

Problem:
    minimize    -3*x1 - 5*x2
    subject to   x1 + 2*x2 <= 10
                3*x1 +  x2 <= 12
                 x1, x2 >= 0
"""

import jsonlp


def main():
    print()
    print("=" * 70)
    print("jsonlp Example: LP from a JSON document - Python")
    print("=" * 70)
    print()

    print("Problem: minimize -3*x1 - 5*x2")
    print("         subject to x1 + 2*x2 <= 10")
    print("                    3*x1 + x2 <= 12")
    print("                    x1, x2 >= 0")
    print()

    # Constraint matrix in CSR format, explicit ranged constraint bounds
    doc = {
        "csr_constraint_matrix": {
            "offsets": [0, 2, 4],
            "indices": [0, 1, 0, 1],
            "values": [1.0, 2.0, 3.0, 1.0],
        },
        "objective_data": {"coefficients": [-3.0, -5.0]},
        "constraint_bounds": {
            "lower_bounds": ["-inf", "-inf"],
            "upper_bounds": [10.0, 12.0],
        },
        "variable_bounds": {
            "lower_bounds": [0.0, 0.0],
            "upper_bounds": ["infinity", "infinity"],
        },
    }

    # Step 1: Build the model
    model = jsonlp.build_problem(doc)
    print(f"Model built: {model.num_constraints} constraints, "
          f"{model.num_variables} variables, {model.nnz} nonzeros")
    print()

    # Step 2: Set solver parameters
    param = jsonlp.Parameters(absolute_primal_tolerance=1e-9, time_limit=60.0)

    # Step 3: Solve the model
    result = jsonlp.solve(model, param)

    # Step 4: Display results
    print("=" * 70)
    print("Solution Summary")
    print("=" * 70)
    print(f"Status: {result.status.label}")
    print(f"Time: {result.solve_time:.2f} seconds")
    print(f"Objective: {result.objective_value:.12e}")
    print()
    print("Primal solution:")
    print(f"  x1 = {result.x[0]:.6f}")
    print(f"  x2 = {result.x[1]:.6f}")
    print()
    print("=" * 70)
    print()


if __name__ == "__main__":
    try:
        main()
    except ImportError as e:
        print(f"Error: {e}")
        print("\nPlease install jsonlp first:")
        print("  python -m pip install .")
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
