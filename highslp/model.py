"""
Model class for highslp
"""
import threading
from enum import Enum
from functools import wraps
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse

from .allocations import AllocationTracker
from .constants import CallStatus, Integrality, ModelStatus, Sense
from .errors import EngineCallError, ModelFreedError, ValidationError
from .logging import get_logger
from .packing import _ensure_contiguous_float64, separate_bounds

logger = get_logger(__name__)


class SolveState(Enum):
    """Progress of the most recent solve on a model"""
    UNSOLVED = "unsolved"
    LOADED = "loaded"
    RUN = "run"
    TERMINAL = "terminal"


def _locked(method):
    """Run ``method`` under the model's lock"""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _mutates(method):
    """Locked mutator; invalidates the last solve"""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            result = method(self, *args, **kwargs)
            self._invalidate()
            return result
    return wrapper


class Model:
    """
    LP/MIP model solved by the HiGHS engine.

    The model represents a problem of the form:
        minimize (or maximize)  c'*x
        subject to              row_lower <= A*x <= row_upper
                                lower <= x <= upper
                                x[j] integer where integrality[j] is Integer

    A model stores the problem data and owns the native resources used to
    solve it: one allocation tracker and one engine handle. Release them
    with ``free()`` or by using the model as a context manager; the
    destructor only catches models that were never freed.

    Every public method runs under the model's own re-entrant lock, so a
    model may be shared between threads. Distinct models share no state.

    Examples
    --------
    >>> from highslp import Model, INFINITY
    >>> with Model.from_bounded_rows(
    ...     costs=[2.0, 3.0],
    ...     bounds=[(0.0, 3.0), (1.0, INFINITY)],
    ...     bounded_rows=[[-INFINITY, 0.0, 1.0, 6.0],
    ...                   [10.0, 1.0, 2.0, 14.0],
    ...                   [8.0, 2.0, 1.0, INFINITY]],
    ... ) as model:
    ...     result = model.solve()
    ...     x = result.unwrap().col_primal
    """

    def __init__(
        self,
        costs: Optional[Sequence[float]] = None,
        bounds: Optional[Sequence[Tuple[float, float]]] = None,
        rows=None,
        row_lower: Optional[Sequence[float]] = None,
        row_upper: Optional[Sequence[float]] = None,
        integrality: Optional[Sequence[int]] = None,
        sense: Sense = Sense.Minimize,
        engine=None,
    ):
        """
        Parameters
        ----------
        costs : sequence of float, optional
            Objective coefficient of each column
        bounds : sequence of (lb, ub), optional
            Bounds of each column
        rows : sequence of sequences of float or scipy.sparse matrix, optional
            Constraint coefficients, one row per constraint
        row_lower, row_upper : sequence of float, optional
            Bounds of each row (both required when ``rows`` is given)
        integrality : sequence of Integrality, optional
            Empty or None for an LP
        sense : Sense
            Objective sense (default: Minimize)
        engine : object, optional
            Engine adapter; defaults to ``HighsEngine()`` on first use
        """
        self._lock = threading.RLock()
        self._freed = False

        self._costs = np.empty(0, dtype=np.float64)
        self._bounds = []
        self._rows = []
        self._row_lower = np.empty(0, dtype=np.float64)
        self._row_upper = np.empty(0, dtype=np.float64)
        self._integrality = []
        self._sense = Sense(sense)

        self._tracker = AllocationTracker()
        self._engine = engine
        self._handle = None
        self._state = SolveState.UNSOLVED
        self._status = ModelStatus.NotSet

        if costs is not None:
            self.set_costs(costs)
        if bounds is not None:
            self.set_bounds(bounds)
        if rows is not None:
            if row_lower is None or row_upper is None:
                raise ValidationError("row_lower and row_upper are required with rows")
            self.set_rows(rows, row_lower, row_upper)
        if integrality is not None:
            self.set_integrality(integrality)

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @staticmethod
    def from_arrays(
        A: Union[np.ndarray, sparse.spmatrix],
        AL: Sequence[float],
        AU: Sequence[float],
        l: Sequence[float],
        u: Sequence[float],
        c: Sequence[float],
        integrality: Optional[Sequence[int]] = None,
        sense: Sense = Sense.Minimize,
        engine=None,
    ) -> 'Model':
        """
        Create model from constraint matrix and bounds arrays.

        Parameters
        ----------
        A : np.ndarray, sequence of rows, or scipy.sparse matrix
            Constraint matrix (m x n)
        AL : array-like
            Lower bounds for constraints (length m)
        AU : array-like
            Upper bounds for constraints (length m)
        l : array-like
            Lower bounds for variables (length n)
        u : array-like
            Upper bounds for variables (length n)
        c : array-like
            Objective coefficients (length n)
        integrality : array-like, optional
            Integrality flag per variable; omit for an LP

        Returns
        -------
        Model
        """
        l = _ensure_contiguous_float64(l)
        u = _ensure_contiguous_float64(u)
        if len(l) != len(u):
            raise ValidationError(
                f"l and u must have equal length, got {len(l)} and {len(u)}"
            )
        return Model(
            costs=c,
            bounds=list(zip(l.tolist(), u.tolist())),
            rows=A,
            row_lower=AL,
            row_upper=AU,
            integrality=integrality,
            sense=sense,
            engine=engine,
        )

    @staticmethod
    def from_bounded_rows(
        costs: Sequence[float],
        bounds: Sequence[Tuple[float, float]],
        bounded_rows: Sequence[Sequence[float]],
        integrality: Optional[Sequence[int]] = None,
        sense: Sense = Sense.Minimize,
        engine=None,
    ) -> 'Model':
        """
        Create model from rows that carry their own bounds.

        Each row is ``[lb, coeff_0, ..., coeff_{n-1}, ub]``.
        """
        model = Model(costs=costs, bounds=bounds, integrality=integrality,
                      sense=sense, engine=engine)
        model.set_bounded_rows(bounded_rows)
        return model

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    @_mutates
    def set_costs(self, costs: Sequence[float]) -> None:
        self._costs = _ensure_contiguous_float64(costs).ravel().copy()

    @_mutates
    def set_bounds(self, bounds: Sequence[Tuple[float, float]]) -> None:
        self._bounds = [tuple(b) if np.iterable(b) else b for b in bounds]

    @_mutates
    def set_rows(self, rows, row_lower: Sequence[float], row_upper: Sequence[float]) -> None:
        if sparse.issparse(rows):
            self._rows = sparse.csr_matrix(rows, dtype=np.float64, copy=True)
        else:
            self._rows = [_ensure_contiguous_float64(r).ravel().copy() for r in rows]
        self._row_lower = _ensure_contiguous_float64(row_lower).ravel().copy()
        self._row_upper = _ensure_contiguous_float64(row_upper).ravel().copy()

    def set_bounded_rows(self, bounded_rows: Sequence[Sequence[float]]) -> None:
        """Set rows given as ``[lb, coeffs..., ub]``"""
        rows, lower, upper = separate_bounds(bounded_rows)
        self.set_rows(rows, lower, upper)

    @_mutates
    def set_integrality(self, integrality: Sequence[int]) -> None:
        self._integrality = list(integrality)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def num_col(self) -> int:
        """Number of columns"""
        return len(self._costs)

    @property
    def num_row(self) -> int:
        """Number of rows"""
        if sparse.issparse(self._rows):
            return self._rows.shape[0]
        return len(self._rows)

    @property
    def costs(self) -> np.ndarray:
        return self._costs.copy()

    @property
    def bounds(self):
        return list(self._bounds)

    @property
    def lower_bounds(self) -> np.ndarray:
        return np.array([b[0] for b in self._bounds], dtype=np.float64)

    @property
    def upper_bounds(self) -> np.ndarray:
        return np.array([b[1] for b in self._bounds], dtype=np.float64)

    @property
    def rows(self):
        """Constraint rows: a list of arrays, or a CSR matrix"""
        if sparse.issparse(self._rows):
            return self._rows.copy()
        return [r.copy() for r in self._rows]

    @property
    def row_lower(self) -> np.ndarray:
        return self._row_lower.copy()

    @property
    def row_upper(self) -> np.ndarray:
        return self._row_upper.copy()

    @property
    def integrality(self):
        return list(self._integrality)

    @property
    def is_mip(self) -> bool:
        return len(self._integrality) > 0

    @property
    def sense(self) -> Sense:
        """Objective sense stored on the model"""
        return self._sense

    @property
    def status(self) -> ModelStatus:
        """Model status of the last solve, NotSet after any change"""
        return self._status

    @property
    def state(self) -> SolveState:
        return self._state

    @property
    def tracker(self) -> AllocationTracker:
        return self._tracker

    @property
    def engine(self):
        if self._engine is None:
            from .engine import HighsEngine
            self._engine = HighsEngine()
        return self._engine

    @property
    def is_freed(self) -> bool:
        return self._freed

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @_locked
    def validate(self, require_rows: bool = False) -> None:
        """
        Check that costs, bounds, rows and integrality agree in shape.

        No feasibility checks are made: inverted bounds are reported by the
        engine's status, not here.

        Raises
        ------
        ValidationError
        """
        n = self.num_col
        if n < len(self._bounds):
            raise ValidationError(
                f"columns are over bounded: {len(self._bounds)} bounds for {n} columns"
            )
        if n > len(self._bounds):
            raise ValidationError(
                f"columns are under bounded: {len(self._bounds)} bounds for {n} columns"
            )
        for j, b in enumerate(self._bounds):
            if not isinstance(b, tuple) or len(b) != 2:
                raise ValidationError(f"bound {j} must be a (lower, upper) pair, got {b!r}")

        if self._integrality:
            if len(self._integrality) != n:
                raise ValidationError(
                    f"integrality has {len(self._integrality)} entries for {n} columns"
                )
            for j, flag in enumerate(self._integrality):
                try:
                    Integrality(int(flag))
                except (TypeError, ValueError):
                    raise ValidationError(
                        f"integrality {j} is not a valid flag: {flag!r}"
                    ) from None

        if sparse.issparse(self._rows):
            if self._rows.shape[1] != n:
                raise ValidationError(
                    f"row size mismatch: matrix has {self._rows.shape[1]} columns, "
                    f"expected {n}"
                )
        else:
            for i, row in enumerate(self._rows):
                if len(row) != n:
                    raise ValidationError(
                        f"row size mismatch: row {i} has {len(row)} coefficients, "
                        f"expected {n}"
                    )

        m = self.num_row
        if len(self._row_lower) != m or len(self._row_upper) != m:
            raise ValidationError(
                f"an upper and lower bound must be given for every row: "
                f"{m} rows, {len(self._row_lower)} lower, {len(self._row_upper)} upper"
            )

        if require_rows and m == 0:
            raise ValidationError("rows are empty: at least one row is required")

    # ------------------------------------------------------------------
    # Native resources
    # ------------------------------------------------------------------

    @_locked
    def native_handle(self):
        """The engine handle, created on first use"""
        if self._freed:
            raise ModelFreedError("access engine")
        if self._handle is None:
            engine = self.engine
            self._handle = engine.create()
            self._check(engine.change_objective_sense(self._handle, self._sense),
                        'change_objective_sense')
            logger.debug("created engine handle for %r", self)
        return self._handle

    @_locked
    def encode(self):
        """Encode the model into tracker buffers (see ``highslp.encoder``)"""
        from .encoder import encode

        if self._freed:
            raise ModelFreedError("encode")
        return encode(self, self._tracker)

    @_locked
    def solve(self, param=None):
        """
        Solve the model.

        Parameters
        ----------
        param : Parameters, optional
            Engine options applied before running.

        Returns
        -------
        Results
            ``solution`` is set only when the status is Optimal; otherwise
            ``error`` holds a SolveError with the status label.

        Raises
        ------
        ValidationError
            The model's shapes are inconsistent.
        EngineCallError
            The engine rejected the problem while loading it.
        ModelFreedError
            The model has been freed.
        """
        from .solver import dispatch

        if self._freed:
            raise ModelFreedError("solve")
        self.validate(require_rows=True)
        if param is not None:
            self.apply_parameters(param)
        return dispatch(self)

    @_locked
    def _mark(self, state: SolveState, status: Optional[ModelStatus] = None) -> None:
        logger.debug("model state %s -> %s", self._state.value, state.value)
        self._state = state
        if status is not None:
            self._status = status

    def _invalidate(self) -> None:
        self._state = SolveState.UNSOLVED
        self._status = ModelStatus.NotSet

    def _check(self, status, call: str) -> CallStatus:
        status = CallStatus(int(status))
        if not status.ok:
            raise EngineCallError(call, status)
        return status

    # ------------------------------------------------------------------
    # Objective sense
    # ------------------------------------------------------------------

    @_mutates
    def set_objective_sense(self, sense: Sense) -> None:
        """Set the objective sense; any previous solution is stale afterwards"""
        self._sense = Sense(sense)
        if self._handle is not None:
            self._check(self._engine.change_objective_sense(self._handle, self._sense),
                        'change_objective_sense')

    @_locked
    def get_objective_sense(self) -> Sense:
        """Objective sense as the engine sees it"""
        if self._handle is None:
            return self._sense
        return self._engine.get_objective_sense(self._handle)

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @_locked
    def set_option(self, name: str, value) -> None:
        """Set an engine option, dispatching on the value's type"""
        engine = self.engine
        handle = self.native_handle()
        if isinstance(value, (bool, np.bool_)):
            status = engine.set_bool_option(handle, name, bool(value))
        elif isinstance(value, str):
            status = engine.set_string_option(handle, name, value)
        elif isinstance(value, (int, np.integer)):
            status = engine.set_int_option(handle, name, int(value))
        else:
            status = engine.set_double_option(handle, name, float(value))
        self._check(status, f'set_option({name})')

    @_locked
    def get_option(self, name: str):
        return self.engine.get_option(self.native_handle(), name)

    @_locked
    def set_string_option(self, name: str, value: str) -> None:
        self._check(self.engine.set_string_option(self.native_handle(), name, value),
                    f'set_string_option({name})')

    @_locked
    def get_string_option(self, name: str) -> str:
        return self.engine.get_string_option(self.native_handle(), name)

    @_locked
    def set_bool_option(self, name: str, value: bool) -> None:
        self._check(self.engine.set_bool_option(self.native_handle(), name, value),
                    f'set_bool_option({name})')

    @_locked
    def get_bool_option(self, name: str) -> bool:
        return self.engine.get_bool_option(self.native_handle(), name)

    @_locked
    def set_int_option(self, name: str, value: int) -> None:
        self._check(self.engine.set_int_option(self.native_handle(), name, value),
                    f'set_int_option({name})')

    @_locked
    def set_double_option(self, name: str, value: float) -> None:
        self._check(self.engine.set_double_option(self.native_handle(), name, value),
                    f'set_double_option({name})')

    @_locked
    def apply_parameters(self, param) -> None:
        """Apply every option of a ``Parameters`` object"""
        for name, value in param.to_options().items():
            self.set_option(name, value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def free(self):
        """
        Release every buffer and the engine handle.

        After calling this method, the model cannot be solved anymore.
        Calling it again does nothing.
        """
        with self._lock:
            if self._freed:
                return
            released = self._tracker.release_all()
            if self._handle is not None:
                self._engine.destroy(self._handle)
                self._handle = None
            self._freed = True
            logger.debug("freed model (%d buffers released)", released)

    def __del__(self):
        """Backstop for models that were never freed explicitly"""
        if not getattr(self, '_freed', True):
            logger.debug("model garbage collected without free()")
            self.free()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - automatically free model"""
        self.free()
        return False

    def __repr__(self):
        if self._freed:
            return "<highslp.Model (freed)>"
        kind = "MIP" if self.is_mip else "LP"
        return f"<highslp.Model {kind} rows={self.num_row} cols={self.num_col}>"
