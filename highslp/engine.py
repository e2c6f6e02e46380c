"""
Adapter over the HiGHS engine

``HighsEngine`` exposes the narrow call surface the rest of the package
relies on: create/destroy, load, run, status, solution, objective sense and
options. Every method takes the opaque engine handle returned by
``create()`` as its first argument and reports failures through
``CallStatus`` return codes rather than exceptions, mirroring the engine's
own C interface.
"""
from typing import Any

import numpy as np

try:
    import highspy
    HIGHS_AVAILABLE = True
except ImportError:
    HIGHS_AVAILABLE = False

from .constants import CallStatus, Integrality, ModelStatus, Sense
from .errors import EngineCallError
from .logging import get_logger

logger = get_logger(__name__)

_EMPTY_INT = np.empty(0, dtype=np.int32)
_EMPTY_DOUBLE = np.empty(0, dtype=np.float64)


def _call_status(result) -> CallStatus:
    """Convert a HighsStatus into a CallStatus."""
    try:
        return CallStatus(int(result))
    except ValueError:
        return CallStatus.Error


def _unwrap(call: str, result) -> Any:
    """Strip the leading HighsStatus some highspy getters return."""
    if isinstance(result, tuple) and len(result) == 2:
        status, value = result
        if not _call_status(status).ok:
            raise EngineCallError(call)
        return value
    return result


class HighsEngine:
    """
    HiGHS, reached through the highspy bindings.

    Examples
    --------
    >>> engine = HighsEngine()
    >>> handle = engine.create()
    >>> engine.set_bool_option(handle, "output_flag", False)
    <CallStatus.Ok: 0>
    >>> engine.destroy(handle)
    """

    def __init__(self):
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )

    # Lifecycle

    def create(self):
        handle = highspy.Highs()
        # Keep the engine quiet unless a caller asks for output
        handle.setOptionValue('output_flag', False)
        return handle

    def destroy(self, handle) -> None:
        handle.clear()

    def version(self, handle) -> str:
        return handle.version()

    # Loading

    def add_columns(self, handle, num_col, col_cost, col_lower, col_upper) -> CallStatus:
        return _call_status(handle.addCols(
            num_col, col_cost, col_lower, col_upper,
            0, _EMPTY_INT, _EMPTY_INT, _EMPTY_DOUBLE,
        ))

    def add_rows(self, handle, num_row, row_lower, row_upper,
                 num_nz, ar_start, ar_index, ar_value) -> CallStatus:
        return _call_status(handle.addRows(
            num_row, row_lower, row_upper, num_nz, ar_start, ar_index, ar_value,
        ))

    def load_lp(self, handle, num_col, num_row, num_nz,
                col_cost, col_lower, col_upper, row_lower, row_upper,
                ar_start, ar_index, ar_value) -> CallStatus:
        """Replace the engine's model with a row-wise LP."""
        handle.clearModel()
        status = self.add_columns(handle, num_col, col_cost, col_lower, col_upper)
        if not status.ok:
            return status
        row_status = self.add_rows(handle, num_row, row_lower, row_upper,
                                   num_nz, ar_start, ar_index, ar_value)
        if not row_status.ok:
            return row_status
        return max(status, row_status)

    def load_mip(self, handle, num_col, num_row, num_nz,
                 col_cost, col_lower, col_upper, row_lower, row_upper,
                 ar_start, ar_index, ar_value, integrality) -> CallStatus:
        """Replace the engine's model with a row-wise MIP."""
        status = self.load_lp(handle, num_col, num_row, num_nz,
                              col_cost, col_lower, col_upper, row_lower, row_upper,
                              ar_start, ar_index, ar_value)
        if not status.ok:
            return status
        for col, flag in enumerate(integrality):
            col_status = _call_status(
                handle.changeColIntegrality(col, _var_type(flag))
            )
            if not col_status.ok:
                return col_status
            status = max(status, col_status)
        return status

    # Solving

    def run(self, handle) -> CallStatus:
        return _call_status(handle.run())

    def get_model_status(self, handle) -> ModelStatus:
        return ModelStatus.from_code(int(handle.getModelStatus()))

    def get_solution(self, handle, out_col_primal, out_col_dual,
                     out_row_primal, out_row_dual) -> CallStatus:
        """
        Fill the caller's buffers with the current solution.

        Vectors the engine has not computed (duals after a MIP solve) leave
        their buffer untouched and downgrade the result to Warning.
        """
        solution = handle.getSolution()
        status = CallStatus.Ok
        pairs = (
            (out_col_primal, solution.col_value, solution.value_valid),
            (out_row_primal, solution.row_value, solution.value_valid),
            (out_col_dual, solution.col_dual, solution.dual_valid),
            (out_row_dual, solution.row_dual, solution.dual_valid),
        )
        for out, values, valid in pairs:
            values = np.asarray(values, dtype=np.float64)
            if not valid or len(values) != len(out):
                if valid:
                    logger.warning("engine returned %d values for a %d-element buffer",
                                   len(values), len(out))
                    return CallStatus.Error
                status = CallStatus.Warning
                continue
            out[:] = values
        return status

    def get_objective_value(self, handle) -> float:
        return float(handle.getObjectiveValue())

    def change_objective_sense(self, handle, sense: Sense) -> CallStatus:
        if Sense(sense) == Sense.Minimize:
            obj_sense = highspy.ObjSense.kMinimize
        else:
            obj_sense = highspy.ObjSense.kMaximize
        return _call_status(handle.changeObjectiveSense(obj_sense))

    def get_objective_sense(self, handle) -> Sense:
        sense = _unwrap('getObjectiveSense', handle.getObjectiveSense())
        return Sense(int(sense))

    # Options

    def set_option(self, handle, name: str, value) -> CallStatus:
        return _call_status(handle.setOptionValue(name, value))

    def get_option(self, handle, name: str):
        return _unwrap('getOptionValue', handle.getOptionValue(name))

    def set_string_option(self, handle, name: str, value: str) -> CallStatus:
        if not isinstance(value, str):
            raise TypeError(f"option '{name}' expects a string, got {type(value).__name__}")
        return self.set_option(handle, name, value)

    def get_string_option(self, handle, name: str) -> str:
        return str(self.get_option(handle, name))

    def set_bool_option(self, handle, name: str, value: bool) -> CallStatus:
        if not isinstance(value, (bool, np.bool_)):
            raise TypeError(f"option '{name}' expects a bool, got {type(value).__name__}")
        return self.set_option(handle, name, bool(value))

    def get_bool_option(self, handle, name: str) -> bool:
        return bool(self.get_option(handle, name))

    def set_int_option(self, handle, name: str, value: int) -> CallStatus:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise TypeError(f"option '{name}' expects an int, got {type(value).__name__}")
        return self.set_option(handle, name, int(value))

    def set_double_option(self, handle, name: str, value: float) -> CallStatus:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise TypeError(f"option '{name}' expects a float, got {type(value).__name__}")
        return self.set_option(handle, name, float(value))


def _var_type(flag):
    flag = Integrality(int(flag))
    if flag == Integrality.Integer:
        return highspy.HighsVarType.kInteger
    if flag == Integrality.ImplicitInteger:
        return highspy.HighsVarType.kImplicitInteger
    return highspy.HighsVarType.kContinuous
