"""
Shared pytest fixtures for highslp tests.
"""

import pytest

from highslp import INFINITY, CallStatus, Integrality, ModelStatus, Sense


class FakeEngine:
    """
    Scripted stand-in for HighsEngine.

    Records every call in ``calls`` and answers with the configured
    statuses and solution vectors.
    """

    def __init__(self, model_status=ModelStatus.Optimal, load_status=CallStatus.Ok,
                 run_status=CallStatus.Ok, solution_status=CallStatus.Ok,
                 sense_status=CallStatus.Ok,
                 col_primal=None, col_dual=None, row_primal=None, row_dual=None,
                 objective_value=0.0):
        self.model_status = model_status
        self.load_status = load_status
        self.run_status = run_status
        self.solution_status = solution_status
        self.sense_status = sense_status
        self.col_primal = col_primal
        self.col_dual = col_dual
        self.row_primal = row_primal
        self.row_dual = row_dual
        self.objective_value = objective_value
        self.calls = []
        self.loaded = None
        self.created = 0
        self.destroyed = 0
        self._handles = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def call_names(self):
        return [c[0] for c in self.calls]

    def create(self):
        self.created += 1
        handle = {'id': self.created, 'sense': Sense.Minimize, 'options': {}}
        self._handles[self.created] = handle
        self._record('create')
        return handle

    def destroy(self, handle):
        self.destroyed += 1
        self._record('destroy')

    def version(self, handle):
        return "fake"

    def load_lp(self, handle, num_col, num_row, num_nz, col_cost, col_lower, col_upper,
                row_lower, row_upper, ar_start, ar_index, ar_value):
        self._record('load_lp', num_col, num_row, num_nz)
        self.loaded = {
            'num_col': num_col, 'num_row': num_row, 'num_nz': num_nz,
            'col_cost': col_cost.copy(), 'col_lower': col_lower.copy(),
            'col_upper': col_upper.copy(), 'row_lower': row_lower.copy(),
            'row_upper': row_upper.copy(), 'ar_start': ar_start.copy(),
            'ar_index': ar_index.copy(), 'ar_value': ar_value.copy(),
            'integrality': None,
        }
        handle['sense'] = Sense.Minimize
        return self.load_status

    def load_mip(self, handle, num_col, num_row, num_nz, col_cost, col_lower, col_upper,
                 row_lower, row_upper, ar_start, ar_index, ar_value, integrality):
        self.load_lp(handle, num_col, num_row, num_nz, col_cost, col_lower, col_upper,
                     row_lower, row_upper, ar_start, ar_index, ar_value)
        self.calls[-1] = ('load_mip', num_col, num_row, num_nz)
        self.loaded['integrality'] = integrality.copy()
        return self.load_status

    def run(self, handle):
        self._record('run', handle['sense'])
        return self.run_status

    def get_model_status(self, handle):
        self._record('get_model_status')
        return self.model_status

    def get_solution(self, handle, out_col_primal, out_col_dual, out_row_primal, out_row_dual):
        self._record('get_solution', len(out_col_primal), len(out_row_primal))
        for out, values in ((out_col_primal, self.col_primal), (out_col_dual, self.col_dual),
                            (out_row_primal, self.row_primal), (out_row_dual, self.row_dual)):
            if values is not None:
                out[:] = values
        return self.solution_status

    def get_objective_value(self, handle):
        return self.objective_value

    def change_objective_sense(self, handle, sense):
        self._record('change_objective_sense', Sense(sense))
        handle['sense'] = Sense(sense)
        return self.sense_status

    def get_objective_sense(self, handle):
        return handle['sense']

    def set_option(self, handle, name, value):
        self._record('set_option', name, value)
        handle['options'][name] = value
        return CallStatus.Ok

    def get_option(self, handle, name):
        return handle['options'][name]

    set_string_option = set_option
    set_bool_option = set_option
    set_int_option = set_option
    set_double_option = set_option
    get_string_option = get_option
    get_bool_option = get_option


@pytest.fixture
def fake_engine():
    return FakeEngine(col_primal=[2.0, 4.0], col_dual=[0.0, 0.0],
                      row_primal=[4.0, 10.0, 8.0], row_dual=[0.0, 1.33, 0.33],
                      objective_value=16.0)


@pytest.fixture
def example_data():
    """The two-column, three-row example problem."""
    return {
        'costs': [2.0, 3.0],
        'bounds': [(0.0, 3.0), (1.0, INFINITY)],
        'rows': [[0.0, 1.0], [1.0, 2.0], [2.0, 1.0]],
        'row_lower': [-INFINITY, 10.0, 8.0],
        'row_upper': [6.0, 14.0, INFINITY],
    }


@pytest.fixture
def bounded_rows():
    return [
        [-INFINITY, 0.0, 1.0, 6.0],
        [10.0, 1.0, 2.0, 14.0],
        [8.0, 2.0, 1.0, INFINITY],
    ]


@pytest.fixture
def integer_flags():
    return [Integrality.Integer, Integrality.Integer]
