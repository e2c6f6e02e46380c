"""
Registry of buffers handed to the native engine

Every buffer the engine reads from or writes into is allocated here and
released here. The ``Allocated -> Freed`` transition recorded on each
``Allocation`` is the only authority on whether a buffer may be released,
so no buffer is ever released twice.
"""
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Hashable, Iterator, List, Optional

import numpy as np

from .errors import AllocationFailure
from .logging import get_logger

logger = get_logger(__name__)


class AllocationState(Enum):
    UNALLOCATED = "unallocated"
    ALLOCATED = "allocated"
    FREED = "freed"


class Allocation:
    """
    A single zero-filled buffer of ``count`` elements.

    Attributes
    ----------
    key : hashable or None
        Registry key, None until registered
    count : int
        Number of elements
    dtype : np.dtype
        Element type
    state : AllocationState
    """

    def __init__(self, count: int, dtype, key: Optional[Hashable] = None):
        self.key = key
        self.count = count
        self.dtype = np.dtype(dtype)
        self.state = AllocationState.UNALLOCATED
        self._buffer: Optional[np.ndarray] = None

    @property
    def width(self) -> int:
        """Element width in bytes"""
        return self.dtype.itemsize

    @property
    def nbytes(self) -> int:
        return self.count * self.width

    @property
    def is_live(self) -> bool:
        return self.state is AllocationState.ALLOCATED

    @property
    def buffer(self) -> np.ndarray:
        """The underlying buffer; only valid while allocated"""
        if not self.is_live:
            raise RuntimeError(f"allocation {self.key!r} is {self.state.value}")
        return self._buffer

    def _acquire(self):
        try:
            self._buffer = np.zeros(self.count, dtype=self.dtype)
        except (MemoryError, ValueError) as exc:
            raise AllocationFailure(
                f"cannot allocate {self.count} x {self.width} bytes: {exc}"
            ) from exc
        self.state = AllocationState.ALLOCATED

    def _release(self) -> bool:
        if self.state is not AllocationState.ALLOCATED:
            return False
        self._buffer = None
        self.state = AllocationState.FREED
        return True

    def fill(self, values) -> 'Allocation':
        """Copy ``values`` into the buffer; lengths must match."""
        buf = self.buffer
        values = np.asarray(values, dtype=self.dtype).ravel()
        if len(values) != self.count:
            raise ValueError(
                f"cannot fill {self.count}-element buffer {self.key!r} "
                f"with {len(values)} values"
            )
        buf[:] = values
        return self

    def read(self) -> np.ndarray:
        """Owned copy of the buffer contents"""
        return self.buffer.copy()

    def __repr__(self):
        return (f"<Allocation key={self.key!r} count={self.count} "
                f"width={self.width} state={self.state.value}>")


class AllocationTracker:
    """
    Owns every long-lived buffer of one model.

    The tracker has no lock of its own. It is only reached through its
    owning ``Model``, which serializes access.

    Examples
    --------
    >>> tracker = AllocationTracker()
    >>> costs = tracker.replace("col_cost", tracker.allocate(2, np.float64))
    >>> tracker.outstanding
    1
    >>> tracker.release_all()
    1
    """

    def __init__(self):
        self._registry: Dict[Hashable, Allocation] = {}
        self.allocated = 0
        self.released = 0
        self.replacements = 0

    def allocate(self, count: int, dtype, key: Optional[Hashable] = None) -> Allocation:
        """
        Allocate a zero-filled buffer. The allocation is not registered.

        Raises
        ------
        AllocationFailure
            If the buffer cannot be allocated.
        """
        if count < 0:
            raise AllocationFailure(f"negative element count {count}")
        allocation = Allocation(int(count), dtype, key)
        allocation._acquire()
        self.allocated += 1
        logger.debug("allocated %r (%d bytes)", allocation, allocation.nbytes)
        return allocation

    def register(self, allocation: Allocation) -> Allocation:
        return self.replace(allocation.key, allocation)

    def replace(self, key: Hashable, allocation: Allocation) -> Allocation:
        """
        Bind ``key`` to ``allocation``.

        A live allocation already bound to ``key`` is released first.
        """
        if key is None:
            raise ValueError("allocation key must not be None")
        previous = self._registry.get(key)
        if previous is allocation:
            return allocation
        if previous is not None and previous.is_live:
            self.release(previous)
            self.replacements += 1
            logger.debug("replaced allocation %r", key)
        allocation.key = key
        self._registry[key] = allocation
        return allocation

    def release(self, allocation: Allocation) -> bool:
        """Release one allocation. Already-freed allocations are ignored."""
        if allocation._release():
            self.released += 1
            logger.debug("released %r", allocation)
            return True
        return False

    def discard(self, key: Hashable) -> bool:
        """Release the allocation bound to ``key`` and forget the key."""
        allocation = self._registry.pop(key, None)
        if allocation is None:
            return False
        return self.release(allocation)

    def release_all(self) -> int:
        """Release every tracked allocation and clear the registry."""
        count = 0
        for allocation in list(self._registry.values()):
            if self.release(allocation):
                count += 1
        self._registry.clear()
        if count:
            logger.debug("released %d tracked allocations", count)
        return count

    @contextmanager
    def scratch(self, count: int, dtype) -> Iterator[Allocation]:
        """Allocation that lives only for the ``with`` block; never registered."""
        allocation = self.allocate(count, dtype, key="scratch")
        try:
            yield allocation
        finally:
            self.release(allocation)

    def get(self, key: Hashable) -> Optional[Allocation]:
        return self._registry.get(key)

    def keys(self) -> List[Hashable]:
        return list(self._registry)

    @property
    def outstanding(self) -> int:
        """Number of live allocations, registered or not"""
        return self.allocated - self.released

    @property
    def total_bytes(self) -> int:
        return sum(a.nbytes for a in self._registry.values() if a.is_live)

    def __contains__(self, key) -> bool:
        return key in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def __repr__(self):
        return (f"<AllocationTracker tracked={len(self)} "
                f"outstanding={self.outstanding}>")
