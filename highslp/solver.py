"""
Solve dispatch and solution extraction
"""
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse

from .allocations import AllocationTracker
from .constants import CallStatus, ModelStatus, Sense
from .encoder import DOUBLE, encode
from .errors import EngineCallError, ModelFreedError
from .logging import get_logger
from .model import Model, SolveState
from .parameters import Parameters
from .results import Results, Solution

logger = get_logger(__name__)


def extract(engine, handle, tracker: AllocationTracker,
            num_col: int, num_row: int) -> Solution:
    """
    Copy the engine's current solution into an owned ``Solution``.

    The four output buffers are scratch allocations: they are released
    before this function returns, whatever the outcome.

    Raises
    ------
    EngineCallError
        If the engine reports a failure while filling the buffers.
    """
    with tracker.scratch(num_col, DOUBLE) as col_primal, \
            tracker.scratch(num_col, DOUBLE) as col_dual, \
            tracker.scratch(num_row, DOUBLE) as row_primal, \
            tracker.scratch(num_row, DOUBLE) as row_dual:
        status = CallStatus(int(engine.get_solution(
            handle,
            col_primal.buffer, col_dual.buffer,
            row_primal.buffer, row_dual.buffer,
        )))
        if not status.ok:
            raise EngineCallError('get_solution', status)
        return Solution(
            col_primal=col_primal.read(),
            col_dual=col_dual.read(),
            row_primal=row_primal.read(),
            row_dual=row_dual.read(),
            objective_value=engine.get_objective_value(handle),
        )


def _abandon(model: Model, call: str, status: CallStatus, model_status: ModelStatus):
    """Release the encoded buffers and fail the solve after a rejected engine call."""
    released = model.tracker.release_all()
    model._mark(SolveState.UNSOLVED, model_status)
    logger.debug("engine call %s failed; released %d buffers", call, released)
    raise EngineCallError(call, status)


def dispatch(model: Model) -> Results:
    """
    Encode, load, run and read back one model.

    The MIP entry point is used when the model has integrality flags, the
    LP entry point otherwise. The model's objective sense is applied after
    loading and before running. The whole call holds the model's lock.

    Returns
    -------
    Results
        Carries a ``Solution`` only when the engine reports Optimal. Any
        other status comes back as ``Results.error``, a SolveError.

    Raises
    ------
    ModelFreedError
        If the model has been freed. Nothing is allocated.
    ValidationError
        Before any buffer is allocated, if the model is inconsistent.
    EngineCallError
        If the engine rejects the problem while loading it or while
        setting the objective sense. Every encoded buffer is released.
    """
    with model._lock:
        if model.is_freed:
            raise ModelFreedError("solve")

        tracker = model.tracker
        encoded = encode(model, tracker)

        engine = model.engine
        handle = model.native_handle()

        if encoded.is_mip:
            call = 'load_mip'
            status = engine.load_mip(handle, *encoded.lp_args(), encoded.integrality)
        else:
            call = 'load_lp'
            status = engine.load_lp(handle, *encoded.lp_args())
        status = CallStatus(int(status))
        if not status.ok:
            _abandon(model, call, status, ModelStatus.LoadError)
        model._mark(SolveState.LOADED)

        sense = model.sense
        sense_status = CallStatus(int(engine.change_objective_sense(handle, sense)))
        if not sense_status.ok:
            _abandon(model, 'change_objective_sense', sense_status, ModelStatus.Error)

        run_status = CallStatus(int(engine.run(handle)))
        if not run_status.ok:
            logger.warning("engine run returned %s", run_status.name)
        model._mark(SolveState.RUN)

        model_status = ModelStatus.from_code(engine.get_model_status(handle))
        model._mark(SolveState.TERMINAL, model_status)

        if model_status != ModelStatus.Optimal:
            logger.info("solve finished without an optimal solution: %s", model_status.label)
            return Results.failed(model_status, sense=sense, is_mip=encoded.is_mip)

        solution = extract(engine, handle, tracker, encoded.num_col, encoded.num_row)
        logger.debug("optimal objective %.6g", solution.objective_value)
        return Results.optimal(solution, sense=sense, is_mip=encoded.is_mip)


class HighsSolver:
    """
    High-level interface for the HiGHS LP/MIP engine.

    Each call builds a temporary ``Model``, solves it and frees it, so no
    native resources outlive the call.

    Parameters
    ----------
    param : Parameters, optional
        Engine options. If None, default parameters are used.
    engine : object, optional
        Engine adapter; defaults to ``HighsEngine()``.

    Examples
    --------
    >>> import numpy as np
    >>> from highslp import HighsSolver
    >>>
    >>> solver = HighsSolver()
    >>> A = np.array([[0.0, 1.0], [1.0, 2.0], [2.0, 1.0]])
    >>> AL = np.array([-np.inf, 10.0, 8.0])
    >>> AU = np.array([6.0, 14.0, np.inf])
    >>> l = np.array([0.0, 1.0])
    >>> u = np.array([3.0, np.inf])
    >>> c = np.array([2.0, 3.0])
    >>> result = solver.solve(A, AL, AU, l, u, c)
    >>> result.unwrap().col_primal
    array([2., 4.])
    """

    def __init__(self, param: Optional[Parameters] = None, engine=None):
        self.param = param if param is not None else Parameters()
        if engine is None:
            from .engine import HighsEngine
            engine = HighsEngine()
        self._engine = engine

    def solve(
        self,
        A: Union[np.ndarray, sparse.spmatrix],
        AL: Sequence[float],
        AU: Sequence[float],
        l: Sequence[float],
        u: Sequence[float],
        c: Sequence[float],
        integrality: Optional[Sequence[int]] = None,
        sense: Sense = Sense.Minimize,
        param: Optional[Parameters] = None,
    ) -> Results:
        """
        Solve a problem given as arrays.

        Parameters
        ----------
        A : np.ndarray, sequence of rows, or scipy.sparse matrix
            Constraint matrix (m x n)
        AL, AU : array-like
            Constraint bounds (length m)
        l, u : array-like
            Variable bounds (length n)
        c : array-like
            Objective coefficients (length n)
        integrality : array-like, optional
            Integrality flags; omit for an LP
        sense : Sense
            Objective sense
        param : Parameters, optional
            Overrides the solver's parameters for this call

        Returns
        -------
        Results
        """
        with Model.from_arrays(A, AL, AU, l, u, c, integrality=integrality,
                               sense=sense, engine=self._engine) as model:
            return model.solve(param if param is not None else self.param)

    def solve_bounded(
        self,
        costs: Sequence[float],
        bounds: Sequence[Tuple[float, float]],
        bounded_rows: Sequence[Sequence[float]],
        integrality: Optional[Sequence[int]] = None,
        sense: Sense = Sense.Minimize,
        param: Optional[Parameters] = None,
    ) -> Results:
        """Solve a problem whose rows are given as ``[lb, coeffs..., ub]``."""
        with Model.from_bounded_rows(costs, bounds, bounded_rows,
                                     integrality=integrality, sense=sense,
                                     engine=self._engine) as model:
            return model.solve(param if param is not None else self.param)


def solve(
    A: Union[np.ndarray, sparse.spmatrix],
    AL: Sequence[float],
    AU: Sequence[float],
    l: Sequence[float],
    u: Sequence[float],
    c: Sequence[float],
    integrality: Optional[Sequence[int]] = None,
    sense: Sense = Sense.Minimize,
    param: Optional[Parameters] = None,
) -> Results:
    """
    Convenience function to solve without creating a solver object.

    Solves:
        minimize (or maximize)  c'*x
        subject to              AL <= A*x <= AU
                                l <= x <= u

    Examples
    --------
    >>> from scipy import sparse
    >>> from highslp import solve, Integrality
    >>>
    >>> A = sparse.csr_matrix([[0.0, 1.0], [1.0, 2.0], [2.0, 1.0]])
    >>> result = solve(A, [-np.inf, 10, 8], [6, 14, np.inf],
    ...                [0, 1], [3, np.inf], [2, 3],
    ...                integrality=[Integrality.Integer] * 2)
    >>> result.status.label
    'Model Optimal'
    """
    solver = HighsSolver(param=param)
    return solver.solve(A, AL, AU, l, u, c, integrality=integrality, sense=sense)
