"""
Status and flag enumerations shared with the HiGHS engine

The ordinals below are part of the engine ABI and must not be reordered.
"""
from enum import IntEnum


INFINITY = float('inf')


class ModelStatus(IntEnum):
    """Model status reported by the engine after a run."""
    NotSet = 0
    LoadError = 1
    Error = 2
    PresolveError = 3
    SolveError = 4
    PostsolveError = 5
    Empty = 6
    Optimal = 7
    Infeasible = 8
    UnboundedOrInfeasible = 9
    Unbounded = 10
    ObjectiveBound = 11
    ObjectiveTarget = 12
    TimeLimit = 13
    IterationLimit = 14
    Unknown = 15

    @property
    def label(self) -> str:
        return _MODEL_STATUS_LABELS[self]

    @classmethod
    def from_code(cls, code) -> 'ModelStatus':
        """Map a raw engine code to a member; newer engine codes become Unknown."""
        try:
            return cls(int(code))
        except ValueError:
            return cls.Unknown

    def __str__(self):
        return self.label


_MODEL_STATUS_LABELS = {
    ModelStatus.NotSet: "Model Not Set",
    ModelStatus.LoadError: "Model Load Error",
    ModelStatus.Error: "Model Error",
    ModelStatus.PresolveError: "Model Presolve Error",
    ModelStatus.SolveError: "Model Solve Error",
    ModelStatus.PostsolveError: "Model Postsolve Error",
    ModelStatus.Empty: "Model Empty",
    ModelStatus.Optimal: "Model Optimal",
    ModelStatus.Infeasible: "Model Infeasible",
    ModelStatus.UnboundedOrInfeasible: "Model Unbounded or Infeasible",
    ModelStatus.Unbounded: "Model Unbounded",
    ModelStatus.ObjectiveBound: "Model Objective Bound",
    ModelStatus.ObjectiveTarget: "Model Objective Target",
    ModelStatus.TimeLimit: "Model Time Limit",
    ModelStatus.IterationLimit: "Model Iteration Limit",
    ModelStatus.Unknown: "Model Unknown",
}


class SolutionStatus(IntEnum):
    """Primal/dual solution status"""
    None_ = 0
    Infeasible = 1
    Feasible = 2


class Sense(IntEnum):
    """Objective sense, using the engine's encoding (kMinimize = 1)."""
    Maximize = -1
    Minimize = 1


class Integrality(IntEnum):
    """Per-column integrality flag"""
    Continuous = 0
    Integer = 1
    ImplicitInteger = 2


class CallStatus(IntEnum):
    """Return code of an engine entry point. Warning still counts as success."""
    Error = -1
    Ok = 0
    Warning = 1

    @property
    def ok(self) -> bool:
        return self != CallStatus.Error
