"""
Dense-to-sparse row packing for the engine's row-wise wire format

Both transforms here are pure: they never touch engine state or the
allocation tracker.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from scipy import sparse

from .errors import ValidationError


def _ensure_contiguous_int32(arr):
    """Ensure array is contiguous int32"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.int32)
    if arr.dtype != np.int32:
        arr = arr.astype(np.int32)
    return np.ascontiguousarray(arr)


def _ensure_contiguous_float64(arr):
    """Ensure array is contiguous float64"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.float64)
    if arr.dtype != np.float64:
        arr = arr.astype(np.float64)
    return np.ascontiguousarray(arr)


@dataclass(frozen=True)
class PackedMatrix:
    """
    Compressed sparse row triplet.

    ``row_start`` holds one offset per row, without the trailing offset:
    the last row's nonzeros run to ``num_nz``.

    Attributes
    ----------
    row_start : np.ndarray
        Start offset of each row into ``col_index``/``values`` (int32)
    col_index : np.ndarray
        Column index of each nonzero (int32)
    values : np.ndarray
        Coefficient of each nonzero (float64)
    """
    row_start: np.ndarray
    col_index: np.ndarray
    values: np.ndarray

    @property
    def num_row(self) -> int:
        return len(self.row_start)

    @property
    def num_nz(self) -> int:
        return len(self.col_index)

    def row_counts(self) -> np.ndarray:
        """Number of nonzeros attributed to each row"""
        ends = np.append(self.row_start[1:], self.num_nz)
        return (ends - self.row_start).astype(np.int32)

    def __repr__(self):
        return f"PackedMatrix(num_row={self.num_row}, num_nz={self.num_nz})"


def pack_rows(rows) -> PackedMatrix:
    """
    Pack dense rows into a CSR triplet.

    Every row records the running nonzero count as its start offset, then
    contributes ``(index, value)`` for each entry that is not exactly 0.0,
    scanned left to right. Empty rows are allowed and share their start
    offset with the next row.

    Parameters
    ----------
    rows : sequence of sequences of float, or scipy.sparse matrix
        Row coefficients. Rows may differ in length.

    Returns
    -------
    PackedMatrix

    Examples
    --------
    >>> pm = pack_rows([[0.0, 1.0], [1.0, 2.0], [2.0, 1.0]])
    >>> pm.row_start.tolist(), pm.col_index.tolist()
    ([0, 1, 3], [1, 0, 1, 0, 1])
    """
    if sparse.issparse(rows):
        csr = sparse.csr_matrix(rows, copy=True)
        csr.eliminate_zeros()
        csr.sort_indices()
        return PackedMatrix(
            _ensure_contiguous_int32(csr.indptr[:-1]),
            _ensure_contiguous_int32(csr.indices),
            _ensure_contiguous_float64(csr.data),
        )

    row_start: List[int] = []
    col_index: List[np.ndarray] = []
    values: List[np.ndarray] = []

    nnz = 0
    for row in rows:
        row_start.append(nnz)
        dense = _ensure_contiguous_float64(row).ravel()
        nonzero = np.flatnonzero(dense != 0.0)
        col_index.append(nonzero)
        values.append(dense[nonzero])
        nnz += len(nonzero)

    return PackedMatrix(
        _ensure_contiguous_int32(row_start),
        _ensure_contiguous_int32(np.concatenate(col_index) if col_index else []),
        _ensure_contiguous_float64(np.concatenate(values) if values else []),
    )


def unpack_rows(packed: PackedMatrix, num_col: int) -> np.ndarray:
    """
    Expand a packed matrix back into a dense ``num_row x num_col`` array.

    Elided zeros come back as 0.0.
    """
    indptr = np.append(packed.row_start, packed.num_nz)
    csr = sparse.csr_matrix(
        (packed.values, packed.col_index, indptr),
        shape=(packed.num_row, num_col),
    )
    return csr.toarray()


def separate_bounds(
    bounded_rows: Sequence[Sequence[float]],
) -> Tuple[List[List[float]], List[float], List[float]]:
    """
    Split augmented rows ``[lb, coeff_0, ..., coeff_{n-1}, ub]``.

    Parameters
    ----------
    bounded_rows : sequence of sequences of float
        Each row holds its lower bound first and its upper bound last.

    Returns
    -------
    rows, lower_bounds, upper_bounds

    Raises
    ------
    ValidationError
        If ``bounded_rows`` is empty or a row holds fewer than two entries.
    """
    if len(bounded_rows) == 0:
        raise ValidationError("bounded rows are empty: at least one row is required")

    rows = []
    lower_bounds = []
    upper_bounds = []
    for i, row in enumerate(bounded_rows):
        row = list(row)
        if len(row) < 2:
            raise ValidationError(
                f"bounded row {i} has {len(row)} entries, expected at least 2 (lb, ub)"
            )
        lower_bounds.append(float(row[0]))
        upper_bounds.append(float(row[-1]))
        rows.append([float(v) for v in row[1:-1]])

    return rows, lower_bounds, upper_bounds


def join_bounds(rows, lower_bounds, upper_bounds) -> List[List[float]]:
    """Inverse of ``separate_bounds``."""
    if not (len(rows) == len(lower_bounds) == len(upper_bounds)):
        raise ValidationError("rows, lower_bounds and upper_bounds must have equal length")
    return [
        [float(lb)] + [float(v) for v in row] + [float(ub)]
        for row, lb, ub in zip(rows, lower_bounds, upper_bounds)
    ]
