"""
In-Memory Storage Engine

A complete engine that keeps every scope, dimension, variable and attribute
in process memory as numpy arrays. Status codes follow the netCDF
conventions of the on-disk engine so both are interchangeable.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ncvar.core.kinds import ElementKind, KIND_DTYPES, fits
from ncvar.engine.base import NC_GLOBAL, StorageEngine
from ncvar.errors import (
    NC_NOERR,
    NC_EBADDIM,
    NC_EBADGRPID,
    NC_EBADTYPE,
    NC_EEDGE,
    NC_EINVAL,
    NC_EINVALCOORDS,
    NC_ELATEFILL,
    NC_ERANGE,
    NC_ENOTATT,
    NC_ENOTVAR,
)

logger = logging.getLogger(__name__)

FILL_VALUE_ATTR = "_FillValue"


@dataclass
class _MemVar:
    name: str
    kind: ElementKind
    dimids: List[int]
    data: np.ndarray
    attrs: Dict[str, Tuple[int, Any]] = field(default_factory=dict)
    written: bool = False


@dataclass
class _MemScope:
    name: str
    parent: Optional[int]
    dimids: List[int] = field(default_factory=list)
    variables: List[_MemVar] = field(default_factory=list)
    attrs: Dict[str, Tuple[int, Any]] = field(default_factory=dict)
    children: List[int] = field(default_factory=list)


class MemoryEngine(StorageEngine):
    """
    Engine holding a whole container in memory.

    Scope ``0`` is the root scope. Use ``def_grp``, ``def_dim`` and
    ``def_var`` to build a container before discovering it.

    Examples
    --------
    >>> engine = MemoryEngine()
    >>> y = engine.def_dim(0, 'y', 2)
    >>> x = engine.def_dim(0, 'x', 3)
    >>> varid = engine.def_var(0, 'temp', ElementKind.DOUBLE, [y, x])
    """

    ROOT = 0

    def __init__(self):
        self._scopes: Dict[int, _MemScope] = {self.ROOT: _MemScope(name="/", parent=None)}
        self._dims: Dict[int, Tuple[str, int]] = {}

    # -------------------------------------------------------------------------
    # Definition helpers
    # -------------------------------------------------------------------------

    def def_grp(self, parent: int, name: str) -> int:
        """Create a child scope and return its id."""
        with self.lock:
            parent_scope = self._scopes[parent]
            scope_id = len(self._scopes)
            self._scopes[scope_id] = _MemScope(name=name, parent=parent)
            parent_scope.children.append(scope_id)
        return scope_id

    def def_dim(self, scope: int, name: str, length: int) -> int:
        """Create a dimension in ``scope`` and return its id."""
        with self.lock:
            owner = self._scopes[scope]
            if any(self._dims[d][0] == name for d in owner.dimids):
                raise ValueError(f"Dimension '{name}' already defined in scope {scope}")
            dimid = len(self._dims)
            self._dims[dimid] = (name, int(length))
            owner.dimids.append(dimid)
        return dimid

    def def_var(self, scope: int, name: str, kind: ElementKind, dimids: Sequence[int]) -> int:
        """Create a zero-initialised variable in ``scope`` and return its id."""
        kind = ElementKind(kind)
        with self.lock:
            owner = self._scopes[scope]
            visible = set(self._visible_dimids(scope))
            for dimid in dimids:
                if dimid not in visible:
                    raise ValueError(f"Dimension id {dimid} is not visible from scope {scope}")
            shape = tuple(self._dims[d][1] for d in dimids)
            owner.variables.append(
                _MemVar(name=name, kind=kind, dimids=list(dimids),
                        data=np.zeros(shape, dtype=KIND_DTYPES[kind]))
            )
            varid = len(owner.variables) - 1
        logger.debug(f"Defined {kind.name} variable '{name}' (id {varid}) shape {shape}")
        return varid

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def _visible_dimids(self, scope: int) -> List[int]:
        dimids = []
        current: Optional[int] = scope
        while current is not None:
            owner = self._scopes[current]
            dimids = owner.dimids + dimids
            current = owner.parent
        return dimids

    def _var(self, scope: int, varid: int) -> Tuple[int, Optional[_MemVar]]:
        owner = self._scopes.get(scope)
        if owner is None:
            return NC_EBADGRPID, None
        if not 0 <= varid < len(owner.variables):
            return NC_ENOTVAR, None
        return NC_NOERR, owner.variables[varid]

    def _attrs(self, scope: int, varid: int) -> Tuple[int, Optional[Dict[str, Tuple[int, Any]]]]:
        if varid == NC_GLOBAL:
            owner = self._scopes.get(scope)
            if owner is None:
                return NC_EBADGRPID, None
            return NC_NOERR, owner.attrs
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status, None
        return NC_NOERR, var.attrs

    @staticmethod
    def _region(var: _MemVar, start: Sequence[int], count: Sequence[int]) -> Tuple[int, Optional[tuple]]:
        shape = var.data.shape
        if len(start) != len(shape) or len(count) != len(shape):
            return NC_EINVAL, None
        for s, c, n in zip(start, count, shape):
            if s < 0 or s >= n:
                return NC_EINVALCOORDS, None
            if c < 0 or s + c > n:
                return NC_EEDGE, None
        return NC_NOERR, tuple(slice(s, s + c) for s, c in zip(start, count))

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def inq_nvars(self, scope):
        owner = self._scopes.get(scope)
        if owner is None:
            return NC_EBADGRPID, 0
        return NC_NOERR, len(owner.variables)

    def inq_var(self, scope, varid):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status, None
        return NC_NOERR, (var.name, int(var.kind), list(var.dimids), len(var.attrs))

    def inq_varnatts(self, scope, varid):
        status, attrs = self._attrs(scope, varid)
        if status != NC_NOERR:
            return status, 0
        return NC_NOERR, len(attrs)

    def inq_dimids(self, scope):
        if scope not in self._scopes:
            return NC_EBADGRPID, []
        return NC_NOERR, self._visible_dimids(scope)

    def inq_dim(self, scope, dimid):
        if scope not in self._scopes:
            return NC_EBADGRPID, None
        if dimid not in self._visible_dimids(scope):
            return NC_EBADDIM, None
        return NC_NOERR, self._dims[dimid]

    def inq_grps(self, scope):
        owner = self._scopes.get(scope)
        if owner is None:
            return NC_EBADGRPID, []
        return NC_NOERR, list(owner.children)

    def inq_grpname(self, scope):
        owner = self._scopes.get(scope)
        if owner is None:
            return NC_EBADGRPID, ""
        return NC_NOERR, owner.name

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def inq_attname(self, scope, varid, attnum):
        status, attrs = self._attrs(scope, varid)
        if status != NC_NOERR:
            return status, ""
        names = list(attrs)
        if not 0 <= attnum < len(names):
            return NC_ENOTATT, ""
        return NC_NOERR, names[attnum]

    def get_att(self, scope, varid, name):
        status, attrs = self._attrs(scope, varid)
        if status != NC_NOERR:
            return status, None
        if name not in attrs:
            return NC_ENOTATT, None
        type_tag, stored = attrs[name]
        if isinstance(stored, np.ndarray):
            return NC_NOERR, (type_tag, stored[0] if stored.size == 1 else stored.copy())
        return NC_NOERR, (type_tag, stored)

    def put_att(self, scope, varid, name, type_tag, value):
        status, attrs = self._attrs(scope, varid)
        if status != NC_NOERR:
            return status
        if not name:
            return NC_EINVAL
        try:
            kind = ElementKind(type_tag)
        except ValueError:
            return NC_EBADTYPE
        if kind is ElementKind.CHAR and isinstance(value, (str, bytes)):
            stored = value.decode() if isinstance(value, bytes) else value
        else:
            stored = np.atleast_1d(np.asarray(value, dtype=KIND_DTYPES[kind])).copy()
        attrs[name] = (int(kind), stored)
        return NC_NOERR

    def def_var_fill(self, scope, varid, value):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        if var.written:
            return NC_ELATEFILL
        fill = np.asarray(value, dtype=var.data.dtype)
        var.attrs[FILL_VALUE_ATTR] = (int(var.kind), np.atleast_1d(fill).copy())
        var.data.fill(fill)
        return NC_NOERR

    # -------------------------------------------------------------------------
    # Typed data access
    # -------------------------------------------------------------------------

    def get_var(self, scope, varid, out):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        if out.shape[0] != var.data.size:
            return NC_EINVAL
        if not fits(var.data, out.dtype):
            return NC_ERANGE
        out[:] = var.data.reshape(-1)
        return NC_NOERR

    def get_var1(self, scope, varid, index, out):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        status, region = self._region(var, index, [1] * len(index))
        if status != NC_NOERR:
            return status
        if not fits(var.data[region], out.dtype):
            return NC_ERANGE
        out[0] = var.data[tuple(index)]
        return NC_NOERR

    def put_var1(self, scope, varid, index, value):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        status, region = self._region(var, index, [1] * len(index))
        if status != NC_NOERR:
            return status
        if not fits(value[:1], var.data.dtype):
            return NC_ERANGE
        var.data[tuple(index)] = value[0]
        var.written = True
        return NC_NOERR

    def get_vara(self, scope, varid, start, count, out):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        status, region = self._region(var, start, count)
        if status != NC_NOERR:
            return status
        if not fits(var.data[region], out.dtype):
            return NC_ERANGE
        out[:] = var.data[region].reshape(-1)
        return NC_NOERR

    def put_vara(self, scope, varid, start, count, values):
        status, var = self._var(scope, varid)
        if status != NC_NOERR:
            return status
        status, region = self._region(var, start, count)
        if status != NC_NOERR:
            return status
        if not fits(values, var.data.dtype):
            return NC_ERANGE
        var.data[region] = np.asarray(values).reshape(tuple(count))
        var.written = True
        return NC_NOERR
