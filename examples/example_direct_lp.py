"""
Example: Solving an LP from arrays with highslp

This example demonstrates how to solve a linear programming problem
by creating a model from constraint arrays.

Problem:
    minimize    2*x0 + 3*x1
    subject to          x1 <= 6
               10 <= x0 + 2*x1 <= 14
                8 <= 2*x0 + x1
                0 <= x0 <= 3
                1 <= x1
"""

import numpy as np
from scipy import sparse
import highslp


def main():
    print()
    print("=" * 70)
    print("highslp Example: Direct LP from Arrays")
    print("=" * 70)
    print()

    # Constraint matrix in CSR format
    A = sparse.csr_matrix([
        [0.0, 1.0],  # x1 <= 6
        [1.0, 2.0],  # 10 <= x0 + 2*x1 <= 14
        [2.0, 1.0],  # 8 <= 2*x0 + x1
    ])

    # Constraint bounds
    AL = np.array([-np.inf, 10.0, 8.0])
    AU = np.array([6.0, 14.0, np.inf])

    # Variable bounds
    l = np.array([0.0, 1.0])
    u = np.array([3.0, np.inf])

    # Objective coefficients
    c = np.array([2.0, 3.0])

    # Step 1: Create model from arrays
    model = highslp.Model.from_arrays(A, AL, AU, l, u, c)
    print(f"Model created: {model.num_row} constraints, {model.num_col} variables")

    # Step 2: Set solver parameters
    param = highslp.Parameters()
    param.solver = 'simplex'

    # Step 3: Solve the model
    result = model.solve(param)

    # Step 4: Display results
    print()
    print(result)
    if result.is_optimal():
        solution = result.solution
        print()
        print("Row activities:", solution.row_primal)
        print("Row duals:     ", solution.row_dual)

    # Step 5: Free the model
    model.free()


if __name__ == "__main__":
    main()
