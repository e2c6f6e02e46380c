"""
highslp Python Package

LP and MIP models solved by the HiGHS engine, with explicit ownership of
every buffer handed across the engine boundary.
"""

from .solver import HighsSolver, solve, dispatch, extract
from .parameters import Parameters
from .results import Results, Solution
from .model import Model, SolveState
from .allocations import Allocation, AllocationState, AllocationTracker
from .encoder import EncodedBuffers, encode
from .packing import PackedMatrix, pack_rows, unpack_rows, separate_bounds, join_bounds
from .constants import (
    INFINITY, ModelStatus, SolutionStatus, Sense, Integrality, CallStatus,
)
from .errors import (
    HighsError, ValidationError, AllocationFailure, EngineCallError,
    SolveError, ModelFreedError,
)
from .engine import HighsEngine, HIGHS_AVAILABLE

__version__ = "0.1.0"

__all__ = [
    'HighsSolver',
    'Model',
    'solve',
    'dispatch',
    'extract',
    'Parameters',
    'Results',
    'Solution',
    'SolveState',
    '__version__',
    # Boundary layer
    'Allocation',
    'AllocationState',
    'AllocationTracker',
    'EncodedBuffers',
    'encode',
    'PackedMatrix',
    'pack_rows',
    'unpack_rows',
    'separate_bounds',
    'join_bounds',
    'HighsEngine',
    'HIGHS_AVAILABLE',
    # Constants
    'INFINITY',
    'ModelStatus',
    'SolutionStatus',
    'Sense',
    'Integrality',
    'CallStatus',
    # Errors
    'HighsError',
    'ValidationError',
    'AllocationFailure',
    'EngineCallError',
    'SolveError',
    'ModelFreedError',
]
