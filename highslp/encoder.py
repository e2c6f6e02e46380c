"""
Encode a Model into tracker-owned buffers in the engine's layout
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .allocations import AllocationTracker
from .errors import ModelFreedError
from .logging import get_logger
from .packing import pack_rows

logger = get_logger(__name__)

DOUBLE = np.float64
# HighsInt in the default engine build
INT = np.int32

BUFFER_KEYS = (
    'col_cost', 'col_lower', 'col_upper',
    'ar_start', 'ar_index', 'ar_value',
    'row_lower', 'row_upper',
    'integrality',
)


@dataclass(frozen=True, eq=False)
class EncodedBuffers:
    """
    Views of the tracker buffers handed to the engine.

    The arrays stay valid until the next encode of the same model or
    until the model is freed.
    """
    num_col: int
    num_row: int
    num_nz: int
    col_cost: np.ndarray
    col_lower: np.ndarray
    col_upper: np.ndarray
    ar_start: np.ndarray
    ar_index: np.ndarray
    ar_value: np.ndarray
    row_lower: np.ndarray
    row_upper: np.ndarray
    integrality: Optional[np.ndarray] = None

    @property
    def is_mip(self) -> bool:
        return self.integrality is not None

    def lp_args(self):
        """Positional arguments of the engine's load entry points"""
        return (
            self.num_col, self.num_row, self.num_nz,
            self.col_cost, self.col_lower, self.col_upper,
            self.row_lower, self.row_upper,
            self.ar_start, self.ar_index, self.ar_value,
        )


def _stage(tracker: AllocationTracker, key: str, values, dtype) -> np.ndarray:
    values = np.asarray(values, dtype=dtype).ravel()
    allocation = tracker.replace(key, tracker.allocate(len(values), dtype))
    allocation.fill(values)
    return allocation.buffer


def encode(model, tracker: AllocationTracker) -> EncodedBuffers:
    """
    Validate ``model`` and copy it into ``tracker`` buffers.

    Nothing is allocated when validation fails. Buffers from an earlier
    encode are released as their keys are rebound. If anything fails once
    allocation has started, every tracked buffer is released before the
    error propagates.

    Raises
    ------
    ModelFreedError
        If the model has been freed.
    ValidationError
        If the model's shapes are inconsistent or it has no rows.
    AllocationFailure
        If a buffer cannot be allocated.
    """
    if model.is_freed:
        raise ModelFreedError("encode")
    model.validate(require_rows=True)

    try:
        col_cost = _stage(tracker, 'col_cost', model.costs, DOUBLE)
        col_lower = _stage(tracker, 'col_lower', model.lower_bounds, DOUBLE)
        col_upper = _stage(tracker, 'col_upper', model.upper_bounds, DOUBLE)

        packed = pack_rows(model.rows)
        ar_start = _stage(tracker, 'ar_start', packed.row_start, INT)
        ar_index = _stage(tracker, 'ar_index', packed.col_index, INT)
        ar_value = _stage(tracker, 'ar_value', packed.values, DOUBLE)
        row_lower = _stage(tracker, 'row_lower', model.row_lower, DOUBLE)
        row_upper = _stage(tracker, 'row_upper', model.row_upper, DOUBLE)

        if model.is_mip:
            integrality = _stage(tracker, 'integrality', model.integrality, INT)
        else:
            tracker.discard('integrality')
            integrality = None
    except Exception:
        released = tracker.release_all()
        logger.debug("encode failed; released %d buffers", released)
        raise

    encoded = EncodedBuffers(
        num_col=len(col_cost),
        num_row=len(row_lower),
        num_nz=packed.num_nz,
        col_cost=col_cost,
        col_lower=col_lower,
        col_upper=col_upper,
        ar_start=ar_start,
        ar_index=ar_index,
        ar_value=ar_value,
        row_lower=row_lower,
        row_upper=row_upper,
        integrality=integrality,
    )
    logger.debug("encoded %d columns, %d rows, %d nonzeros (%s)",
                 encoded.num_col, encoded.num_row, encoded.num_nz,
                 'MIP' if encoded.is_mip else 'LP')
    return encoded
