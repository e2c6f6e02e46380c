"""
Exception hierarchy for highslp
"""
from .constants import CallStatus, ModelStatus


class HighsError(Exception):
    """Base class for every error raised by highslp."""


class ValidationError(HighsError, ValueError):
    """Shape mismatch among costs, bounds, rows or integrality."""


class AllocationFailure(HighsError, MemoryError):
    """A foreign buffer could not be allocated. Not recoverable."""


class ModelFreedError(HighsError, RuntimeError):
    """The model's native resources have already been released."""

    def __init__(self, operation: str = "use"):
        super().__init__(f"Cannot {operation}: model has been freed")
        self.operation = operation


class EngineCallError(HighsError, RuntimeError):
    """An engine entry point returned an error code."""

    def __init__(self, call: str, status=CallStatus.Error):
        self.call = call
        self.status = CallStatus(int(status))
        super().__init__(f"engine call '{call}' failed with status {self.status.name}")


class SolveError(HighsError):
    """
    The engine ran but did not reach an optimal solution.

    Not-optimal is an expected outcome, so the dispatcher hands this back
    inside ``Results.error`` instead of raising it.
    """

    def __init__(self, status: ModelStatus):
        self.status = ModelStatus.from_code(status)
        super().__init__(f"solver error: {self.status.label}")
