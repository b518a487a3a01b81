"""
Caller-Supplied Output Buffers

An ``ElementBuffer`` is a preallocated array with a fixed capacity and a
current length, filled in place by the ``*_into`` read operations.
"""

import numpy as np

from ncvar.core.kinds import ElementKind


class ElementBuffer:
    """
    Fixed-capacity buffer of one element kind.

    Parameters
    ----------
    capacity : int
        Number of elements the buffer can hold
    kind : ElementKind
        Element kind of the storage array

    Examples
    --------
    >>> buf = ElementBuffer(16, ElementKind.DOUBLE)
    >>> var.values_into(buf)
    >>> buf.values
    """

    def __init__(self, capacity: int, kind: ElementKind):
        if capacity < 0:
            raise ValueError(f"Buffer capacity must be non-negative, got {capacity}")
        self.kind = ElementKind(kind)
        self.data = np.empty(capacity, dtype=self.kind.dtype)
        self.length = 0

    @property
    def capacity(self) -> int:
        return self.data.shape[0]

    @property
    def values(self) -> np.ndarray:
        """View of the filled part of the buffer."""
        return self.data[:self.length]

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"ElementBuffer({self.kind.name}, length={self.length}, capacity={self.capacity})"
