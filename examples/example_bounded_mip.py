"""
Example: Solving a MIP whose rows carry their own bounds

Each row is written as [lower bound, coefficients..., upper bound].
The same problem is solved twice, once per objective sense.
"""

from highslp import INFINITY, Integrality, Model, Sense


def main():
    costs = [2.0, 3.0]
    bounds = [(0.0, 3.0), (1.0, INFINITY)]
    bounded_rows = [
        [-INFINITY, 0.0, 1.0, 6.0],
        [10.0, 1.0, 2.0, 14.0],
        [8.0, 2.0, 1.0, INFINITY],
    ]

    with Model.from_bounded_rows(
        costs, bounds, bounded_rows,
        integrality=[Integrality.Integer, Integrality.Integer],
    ) as model:
        for sense in (Sense.Minimize, Sense.Maximize):
            model.set_objective_sense(sense)
            result = model.solve()
            print(result)
            print()
            if not result.is_optimal():
                print(f"No optimal solution: {result.error}")


if __name__ == "__main__":
    main()
