"""
End-to-end tests against the real HiGHS engine.

Skipped when highspy is not installed.
"""

import numpy as np
import pytest
from scipy import sparse

highspy = pytest.importorskip("highspy")

from highslp import (
    INFINITY,
    HighsEngine,
    HighsSolver,
    Integrality,
    Model,
    ModelStatus,
    Parameters,
    Sense,
    SolveError,
    solve,
)


@pytest.fixture
def model(example_data):
    with Model(**example_data) as m:
        yield m


# =============================================================================
# LP
# =============================================================================

class TestLP:

    def test_example_optimum(self, model):
        results = model.solve()

        assert results.status == ModelStatus.Optimal
        solution = results.unwrap()
        np.testing.assert_allclose(solution.col_primal, [2.0, 4.0], atol=1e-6)
        np.testing.assert_allclose(solution.row_primal, [4.0, 10.0, 8.0], atol=1e-6)
        assert solution.objective_value == pytest.approx(16.0)
        assert not results.is_mip

    def test_duals_present(self, model):
        solution = model.solve().unwrap()
        assert solution.row_dual.shape == (3,)
        assert solution.col_dual.shape == (2,)

    def test_bounded_rows_match(self, example_data, bounded_rows):
        with Model.from_bounded_rows(example_data['costs'], example_data['bounds'],
                                     bounded_rows) as m:
            solution = m.solve().unwrap()
        np.testing.assert_allclose(solution.col_primal, [2.0, 4.0], atol=1e-6)

    def test_maximize(self):
        # max x0 + x1 subject to x0 + x1 <= 4, 0 <= x <= 3
        with Model(costs=[1.0, 1.0], bounds=[(0.0, 3.0), (0.0, 3.0)],
                   rows=[[1.0, 1.0]], row_lower=[-INFINITY], row_upper=[4.0],
                   sense=Sense.Maximize) as m:
            results = m.solve()
        assert results.sense == Sense.Maximize
        assert results.unwrap().objective_value == pytest.approx(4.0)

    def test_infeasible(self):
        with Model(costs=[1.0], bounds=[(0.0, 1.0)], rows=[[1.0]],
                   row_lower=[5.0], row_upper=[INFINITY]) as m:
            results = m.solve()

        assert results.status in (ModelStatus.Infeasible, ModelStatus.UnboundedOrInfeasible)
        assert results.solution is None
        with pytest.raises(SolveError):
            results.unwrap()

    def test_resolve_after_edit(self, model):
        first = model.solve().unwrap()
        model.set_costs([2.0, 1.0])
        second = model.solve().unwrap()

        assert first.objective_value == pytest.approx(16.0)
        assert second.objective_value != pytest.approx(16.0)
        assert model.tracker.outstanding == 8

    def test_sparse_input(self):
        A = sparse.csr_matrix([[0.0, 1.0], [1.0, 2.0], [2.0, 1.0]])
        results = solve(A, [-np.inf, 10.0, 8.0], [6.0, 14.0, np.inf],
                        [0.0, 1.0], [3.0, np.inf], [2.0, 3.0])
        np.testing.assert_allclose(results.unwrap().col_primal, [2.0, 4.0], atol=1e-6)


# =============================================================================
# MIP
# =============================================================================

class TestMIP:

    def test_integral_optimum(self, example_data, integer_flags):
        with Model(integrality=integer_flags, **example_data) as m:
            results = m.solve()

        assert results.is_mip
        assert results.status == ModelStatus.Optimal
        solution = results.unwrap()
        np.testing.assert_allclose(solution.col_primal, np.round(solution.col_primal), atol=1e-6)
        assert solution.objective_value == pytest.approx(16.0)

    def test_integrality_changes_optimum(self):
        # max x subject to 2x <= 3: LP gives 1.5, MIP gives 1
        kwargs = dict(costs=[1.0], bounds=[(0.0, 10.0)], rows=[[2.0]],
                      row_lower=[-INFINITY], row_upper=[3.0], sense=Sense.Maximize)
        solver = HighsSolver()
        lp = solver.solve([[2.0]], [-INFINITY], [3.0], [0.0], [10.0], [1.0],
                          sense=Sense.Maximize)
        with Model(integrality=[Integrality.Integer], **kwargs) as m:
            mip = m.solve()

        assert lp.unwrap().col_primal[0] == pytest.approx(1.5)
        assert mip.unwrap().col_primal[0] == pytest.approx(1.0)


# =============================================================================
# Sense and options
# =============================================================================

class TestEngineSettings:

    def test_sense_round_trip(self, model):
        assert model.get_objective_sense() == Sense.Minimize
        model.native_handle()
        model.set_objective_sense(Sense.Maximize)
        assert model.get_objective_sense() == Sense.Maximize

    def test_string_option(self, model):
        model.set_string_option("solver", "ipm")
        assert model.get_string_option("solver") == "ipm"

    def test_bool_option(self, model):
        model.set_bool_option("output_flag", False)
        assert model.get_bool_option("output_flag") is False

    def test_parameters(self, model):
        results = model.solve(Parameters(solver='simplex', time_limit=30.0))
        assert results.is_optimal()
        assert model.get_string_option("solver") == "simplex"

    def test_engine_version(self):
        engine = HighsEngine()
        handle = engine.create()
        try:
            assert engine.version(handle)
        finally:
            engine.destroy(handle)
