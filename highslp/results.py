"""
Solution and Results classes for solver output
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from .constants import ModelStatus, Sense
from .errors import SolveError


def _owned(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Solution:
    """
    Primal and dual values at the optimum.

    Every vector is an owned, read-only copy: nothing here aliases engine
    or allocation-tracker memory.

    Attributes
    ----------
    col_primal : np.ndarray
        Column values (length = number of columns)
    col_dual : np.ndarray
        Column reduced costs
    row_primal : np.ndarray
        Row activities (length = number of rows)
    row_dual : np.ndarray
        Row duals
    objective_value : float
        Objective at ``col_primal``
    """
    col_primal: np.ndarray
    col_dual: np.ndarray
    row_primal: np.ndarray
    row_dual: np.ndarray
    objective_value: float = 0.0

    def __post_init__(self):
        for name in ('col_primal', 'col_dual', 'row_primal', 'row_dual'):
            object.__setattr__(self, name, _owned(getattr(self, name)))
        object.__setattr__(self, 'objective_value', float(self.objective_value))

    @property
    def num_col(self) -> int:
        return len(self.col_primal)

    @property
    def num_row(self) -> int:
        return len(self.row_primal)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'col_primal': self.col_primal.tolist(),
            'col_dual': self.col_dual.tolist(),
            'row_primal': self.row_primal.tolist(),
            'row_dual': self.row_dual.tolist(),
            'objective_value': self.objective_value,
        }

    def __repr__(self):
        return (f"Solution(objective_value={self.objective_value:.6g}, "
                f"num_col={self.num_col}, num_row={self.num_row})")


@dataclass
class Results:
    """
    Outcome of one solve.

    ``solution`` is set only when ``status`` is exactly ``Optimal``; every
    other status carries a ``SolveError`` in ``error`` instead.

    Attributes
    ----------
    status : ModelStatus
        Model status read back from the engine
    solution : Solution or None
        Primal/dual values, present only for an optimal solve
    error : SolveError or None
        Set for every non-optimal status
    sense : Sense
        Objective sense the run used
    is_mip : bool
        Whether the MIP entry point was used

    Methods
    -------
    is_optimal()
        Check if solution is optimal
    unwrap()
        Return the solution or raise the SolveError
    to_dict()
        Convert results to dictionary
    """
    status: ModelStatus = ModelStatus.NotSet
    solution: Optional[Solution] = None
    error: Optional[SolveError] = None
    sense: Sense = Sense.Minimize
    is_mip: bool = False

    def __post_init__(self):
        self.status = ModelStatus.from_code(self.status)
        self.sense = Sense(self.sense)
        if self.status == ModelStatus.Optimal:
            if self.solution is None:
                raise ValueError("an optimal result needs a solution")
        else:
            if self.solution is not None:
                raise ValueError(f"a result with status {self.status.label} cannot carry a solution")
            if self.error is None:
                self.error = SolveError(self.status)

    @classmethod
    def optimal(cls, solution: Solution, **kwargs) -> 'Results':
        return cls(status=ModelStatus.Optimal, solution=solution, **kwargs)

    @classmethod
    def failed(cls, status: ModelStatus, **kwargs) -> 'Results':
        return cls(status=status, error=SolveError(status), **kwargs)

    def is_optimal(self) -> bool:
        """Check if solution is optimal"""
        return self.status == ModelStatus.Optimal

    def unwrap(self) -> Solution:
        """Return the solution, raising the carried SolveError otherwise."""
        if self.error is not None:
            raise self.error
        return self.solution

    def __repr__(self):
        return (f"Results(status='{self.status.name}', "
                f"sense={self.sense.name}, is_mip={self.is_mip})")

    def __str__(self):
        lines = [
            "HiGHS Solver Results",
            "=" * 50,
            f"Status:          {self.status.label}",
            f"Sense:           {self.sense.name}",
            f"Problem:         {'MIP' if self.is_mip else 'LP'}",
        ]

        if self.solution is not None:
            sol = self.solution
            lines.append(f"Objective:       {sol.objective_value:.6e}")
            lines.append(f"Variables:       {sol.num_col}")
            lines.append(f"Constraints:     {sol.num_row}")
            for i, value in enumerate(sol.col_primal):
                lines.append(f"  x{i:<4d} = {value:.6g}")
        else:
            lines.append(f"Error:           {self.error}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary"""
        return {
            'status': self.status.name,
            'status_label': self.status.label,
            'sense': self.sense.name,
            'is_mip': self.is_mip,
            'solution': self.solution.to_dict() if self.solution is not None else None,
            'error': str(self.error) if self.error is not None else None,
        }
