"""
Storage Engine Binding

The raw primitive surface the variable layer calls into. Every primitive
takes a scope id (and usually a variable id) and returns an integer status;
introspection primitives return ``(status, result)``. Typed reads fill a
caller-supplied numpy array whose dtype selects the element kind, so a
single primitive serves every kind.

Engines are not safe for concurrent calls. Callers hold ``engine.lock``
around each primitive.
"""

import abc
from typing import Any, List, Sequence, Tuple

import numpy as np

from ncvar.config import ENGINE_LOCK

# Variable id addressing the scope itself (scope-level attributes)
NC_GLOBAL = -1

# Type tags outside the numeric kinds
NC_NAT = 0
NC_STRING = 12


class StorageEngine(abc.ABC):
    """Abstract base for storage engine bindings."""

    #: Process-wide engine mutex
    lock = ENGINE_LOCK

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @abc.abstractmethod
    def inq_nvars(self, scope: int) -> Tuple[int, int]:
        """Number of variables defined in ``scope``."""

    @abc.abstractmethod
    def inq_var(self, scope: int, varid: int) -> Tuple[int, Tuple[str, int, List[int], int]]:
        """``(name, type_tag, dimids, natts)`` of a variable."""

    @abc.abstractmethod
    def inq_varnatts(self, scope: int, varid: int) -> Tuple[int, int]:
        """Attribute count of a variable, or of the scope for ``NC_GLOBAL``."""

    @abc.abstractmethod
    def inq_dimids(self, scope: int) -> Tuple[int, List[int]]:
        """Ids of the dimensions visible in ``scope``, including its ancestors'."""

    @abc.abstractmethod
    def inq_dim(self, scope: int, dimid: int) -> Tuple[int, Tuple[str, int]]:
        """``(name, length)`` of a dimension."""

    @abc.abstractmethod
    def inq_grps(self, scope: int) -> Tuple[int, List[int]]:
        """Scope ids of the direct child scopes."""

    @abc.abstractmethod
    def inq_grpname(self, scope: int) -> Tuple[int, str]:
        """Name of ``scope``."""

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    @abc.abstractmethod
    def inq_attname(self, scope: int, varid: int, attnum: int) -> Tuple[int, str]:
        """Name of the ``attnum``-th attribute."""

    @abc.abstractmethod
    def get_att(self, scope: int, varid: int, name: str) -> Tuple[int, Tuple[int, Any]]:
        """``(type_tag, value)`` of an attribute."""

    @abc.abstractmethod
    def put_att(self, scope: int, varid: int, name: str, type_tag: int, value: Any) -> int:
        """Create or overwrite an attribute."""

    @abc.abstractmethod
    def def_var_fill(self, scope: int, varid: int, value: Any) -> int:
        """Define the fill value of a variable."""

    # -------------------------------------------------------------------------
    # Typed data access
    # -------------------------------------------------------------------------

    @abc.abstractmethod
    def get_var(self, scope: int, varid: int, out: np.ndarray) -> int:
        """Read the whole variable, flattened row-major, into ``out``."""

    @abc.abstractmethod
    def get_var1(self, scope: int, varid: int, index: Sequence[int], out: np.ndarray) -> int:
        """Read one element into ``out[0]``."""

    @abc.abstractmethod
    def put_var1(self, scope: int, varid: int, index: Sequence[int], value: np.ndarray) -> int:
        """Write ``value[0]`` to one element."""

    @abc.abstractmethod
    def get_vara(self, scope: int, varid: int, start: Sequence[int],
                 count: Sequence[int], out: np.ndarray) -> int:
        """Read a rectangular region, flattened row-major, into ``out``."""

    @abc.abstractmethod
    def put_vara(self, scope: int, varid: int, start: Sequence[int],
                 count: Sequence[int], values: np.ndarray) -> int:
        """Write a flattened row-major region."""
