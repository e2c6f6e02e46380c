"""
Tests for engine enumerations and the error hierarchy.
"""

import pytest

from highslp import (
    AllocationFailure,
    CallStatus,
    EngineCallError,
    HighsError,
    Integrality,
    ModelFreedError,
    ModelStatus,
    Sense,
    SolveError,
    ValidationError,
)


class TestModelStatus:

    def test_ordinals(self):
        assert ModelStatus.NotSet == 0
        assert ModelStatus.Optimal == 7
        assert ModelStatus.Infeasible == 8
        assert ModelStatus.Unknown == 15
        assert len(ModelStatus) == 16

    @pytest.mark.parametrize("status,label", [
        (ModelStatus.Optimal, "Model Optimal"),
        (ModelStatus.UnboundedOrInfeasible, "Model Unbounded or Infeasible"),
        (ModelStatus.TimeLimit, "Model Time Limit"),
        (ModelStatus.NotSet, "Model Not Set"),
    ])
    def test_labels(self, status, label):
        assert status.label == label
        assert str(status) == label

    def test_every_status_has_label(self):
        assert all(s.label.startswith("Model ") for s in ModelStatus)

    def test_unknown_codes(self):
        assert ModelStatus.from_code(16) is ModelStatus.Unknown
        assert ModelStatus.from_code(-3) is ModelStatus.Unknown
        assert ModelStatus.from_code(8) is ModelStatus.Infeasible


class TestFlags:

    def test_sense(self):
        assert Sense.Minimize == 1
        assert Sense.Maximize == -1

    def test_integrality(self):
        assert [int(f) for f in Integrality] == [0, 1, 2]

    def test_call_status(self):
        assert CallStatus.Ok.ok
        assert CallStatus.Warning.ok
        assert not CallStatus.Error.ok


class TestErrors:

    def test_hierarchy(self):
        assert issubclass(ValidationError, ValueError)
        assert issubclass(AllocationFailure, MemoryError)
        for cls in (ValidationError, AllocationFailure, EngineCallError,
                    SolveError, ModelFreedError):
            assert issubclass(cls, HighsError)

    def test_solve_error_message(self):
        err = SolveError(ModelStatus.Infeasible)
        assert str(err) == "solver error: Model Infeasible"
        assert err.status is ModelStatus.Infeasible

    def test_engine_call_error(self):
        err = EngineCallError('load_lp')
        assert err.call == 'load_lp'
        assert err.status is CallStatus.Error
        assert "load_lp" in str(err)

    def test_model_freed_error(self):
        assert "freed" in str(ModelFreedError("solve"))
