"""
netCDF4 Storage Engine

Binds the engine primitives to the ``netCDF4`` library. Scopes are the
file's root group and its nested groups, registered under integer ids when
first seen. Library exceptions are translated back to the netCDF status
codes they carry so that callers only ever see codes from ``NC_ERRORS``.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

import numpy as np
import netCDF4 as nc

from ncvar.config import config
from ncvar.core.kinds import ElementKind, KIND_DTYPES, fits
from ncvar.engine.base import NC_GLOBAL, NC_NAT, NC_STRING, StorageEngine
from ncvar.errors import (
    NC_ERRORS,
    NC_NOERR,
    NC_EBADDIM,
    NC_EBADGRPID,
    NC_EBADTYPE,
    NC_EHDFERR,
    NC_EINVAL,
    NC_EINVALCOORDS,
    NC_ELATEFILL,
    NC_ENOTATT,
    NC_ENOTVAR,
    NC_ERANGE,
)

logger = logging.getLogger(__name__)


def status_from_exception(exc: BaseException) -> int:
    """
    Recover the netCDF status code behind a netCDF4 library exception.

    netCDF4 raises with the C library's error string; the code is found by
    matching that string against ``NC_ERRORS``.
    """
    text = str(exc)
    for code, message in NC_ERRORS.items():
        if code != NC_NOERR and message in text:
            return code
    if isinstance(exc, IndexError):
        return NC_EINVALCOORDS
    if isinstance(exc, KeyError):
        return NC_ENOTATT
    if isinstance(exc, (TypeError, ValueError)):
        return NC_EINVAL
    return NC_EHDFERR


def _type_tag(dtype: Any) -> int:
    if dtype is str:
        return NC_STRING
    try:
        return int(ElementKind.from_dtype(dtype))
    except TypeError:
        return NC_NAT


def _to_storage(values: np.ndarray, var: nc.Variable) -> np.ndarray:
    """Cast values to the variable's on-disk dtype, encoding CHAR as 'S1'."""
    if var.dtype == np.dtype('S1'):
        return _checked(values, np.uint8).view('S1')
    return _checked(values, var.dtype)


def _checked(values: Any, dtype: Any) -> np.ndarray:
    values = np.asarray(values)
    if not fits(values, dtype):
        raise LookupError(NC_ERANGE)
    return values.astype(dtype)


def _from_storage(data: Any) -> np.ndarray:
    data = np.asarray(data)
    if data.dtype == np.dtype('S1'):
        return data.view(np.uint8)
    return data


class NetCDF4Engine(StorageEngine):
    """
    Engine over one open netCDF file.

    Parameters
    ----------
    path : Path or str
        File to open
    mode : str
        netCDF4 open mode: 'r', 'a', 'r+' or 'w'
    file_format : str, optional
        Format used when creating a file (default from ``config``)

    Examples
    --------
    >>> with NetCDF4Engine('/data/obs.nc', mode='a') as engine:
    ...     group = Group(engine, engine.root)
    """

    def __init__(self, path: Path | str, mode: str = 'r', file_format: str | None = None):
        self.path = Path(path)
        with self.lock:
            self._dataset = nc.Dataset(str(self.path), mode=mode,
                                       format=file_format or config.file_format)
            # Raw values: no masking, scaling or char-to-string conversion
            self._dataset.set_auto_maskandscale(False)
            self._dataset.set_auto_chartostring(False)
        self._scopes: Dict[int, nc.Dataset] = {}
        self.root = self._register(self._dataset)
        logger.info(f"Opened {self.path} (mode={mode})")

    def close(self) -> None:
        with self.lock:
            if self._dataset.isopen():
                self._dataset.close()
                logger.info(f"Closed {self.path}")

    def __enter__(self) -> 'NetCDF4Engine':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def _register(self, group: nc.Dataset) -> int:
        for scope_id, known in self._scopes.items():
            if known is group:
                return scope_id
        scope_id = len(self._scopes)
        self._scopes[scope_id] = group
        return scope_id

    def _variable(self, scope: int, varid: int) -> nc.Variable:
        group = self._scopes[scope]
        variables = list(group.variables.values())
        if not 0 <= varid < len(variables):
            raise LookupError(NC_ENOTVAR)
        return variables[varid]

    def _target(self, scope: int, varid: int):
        if varid == NC_GLOBAL:
            return self._scopes[scope]
        return self._variable(scope, varid)

    @staticmethod
    def _call(fn: Callable[[], Any]) -> tuple:
        """Run ``fn`` and return ``(status, result)``."""
        try:
            return NC_NOERR, fn()
        except LookupError as e:
            if e.args and isinstance(e.args[0], int) and e.args[0] in NC_ERRORS:
                return e.args[0], None
            return status_from_exception(e), None
        except (RuntimeError, OSError, AttributeError, TypeError, ValueError) as e:
            logger.debug(f"netCDF4 call failed: {e}")
            return status_from_exception(e), None

    def _scope_ok(self, scope: int) -> bool:
        return scope in self._scopes

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def inq_nvars(self, scope):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, 0
        return self._call(lambda: len(self._scopes[scope].variables))

    def inq_var(self, scope, varid):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, None

        def inquire():
            var = self._variable(scope, varid)
            dimids = [dim._dimid for dim in var.get_dims()]
            return var.name, _type_tag(var.dtype), dimids, len(var.ncattrs())

        return self._call(inquire)

    def inq_varnatts(self, scope, varid):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, 0
        return self._call(lambda: len(self._target(scope, varid).ncattrs()))

    def _visible_dims(self, scope: int) -> List[nc.Dimension]:
        dims = []
        group = self._scopes[scope]
        while group is not None:
            dims = list(group.dimensions.values()) + dims
            group = group.parent
        return dims

    def inq_dimids(self, scope):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, []
        return self._call(lambda: [dim._dimid for dim in self._visible_dims(scope)])

    def inq_dim(self, scope, dimid):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, None
        for dim in self._visible_dims(scope):
            if dim._dimid == dimid:
                return NC_NOERR, (dim.name, len(dim))
        return NC_EBADDIM, None

    def inq_grps(self, scope):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, []
        return self._call(
            lambda: [self._register(child) for child in self._scopes[scope].groups.values()]
        )

    def inq_grpname(self, scope):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, ""
        return self._call(lambda: self._scopes[scope].name)

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def inq_attname(self, scope, varid, attnum):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, ""

        def attname():
            names = self._target(scope, varid).ncattrs()
            if not 0 <= attnum < len(names):
                raise LookupError(NC_ENOTATT)
            return names[attnum]

        return self._call(attname)

    def get_att(self, scope, varid, name):
        if not self._scope_ok(scope):
            return NC_EBADGRPID, None

        def read():
            target = self._target(scope, varid)
            if name not in target.ncattrs():
                raise LookupError(NC_ENOTATT)
            value = target.getncattr(name)
            if isinstance(value, (str, bytes)):
                return int(ElementKind.CHAR), value
            return _type_tag(np.asarray(value).dtype), value

        return self._call(read)

    def put_att(self, scope, varid, name, type_tag, value):
        if not self._scope_ok(scope):
            return NC_EBADGRPID
        try:
            kind = ElementKind(type_tag)
        except ValueError:
            return NC_EBADTYPE
        if not (kind is ElementKind.CHAR and isinstance(value, (str, bytes))):
            value = np.asarray(value, dtype=KIND_DTYPES[kind])
        status, _ = self._call(lambda: self._target(scope, varid).setncattr(name, value))
        return status

    def def_var_fill(self, scope, varid, value):
        """
        Set a variable's fill value.

        netCDF4 only accepts ``_FillValue`` as a ``createVariable`` argument and
        refuses to set it on an existing variable, so for variables of an
        opened file this always reports ``NC_ELATEFILL``. Use ``MemoryEngine``
        where fill values must be defined after creation.
        """
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def define():
            var = self._variable(scope, varid)
            try:
                var.setncattr('_FillValue', _to_storage(np.asarray([value]), var))
            except AttributeError:
                # netCDF4 only accepts a fill value at variable creation
                raise LookupError(NC_ELATEFILL) from None

        status, _ = self._call(define)
        return status

    # -------------------------------------------------------------------------
    # Typed data access
    # -------------------------------------------------------------------------

    def get_var(self, scope, varid, out):
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def read():
            data = _from_storage(self._variable(scope, varid)[...])
            out[:] = _checked(data, out.dtype).reshape(-1)

        status, _ = self._call(read)
        return status

    def get_var1(self, scope, varid, index, out):
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def read():
            data = _from_storage(self._variable(scope, varid)[tuple(index)])
            out[0] = _checked(data, out.dtype).reshape(-1)[0]

        status, _ = self._call(read)
        return status

    def put_var1(self, scope, varid, index, value):
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def write():
            var = self._variable(scope, varid)
            var[tuple(index)] = _to_storage(value[:1], var)[0]

        status, _ = self._call(write)
        return status

    def get_vara(self, scope, varid, start, count, out):
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def read():
            region = tuple(slice(s, s + c) for s, c in zip(start, count))
            data = _from_storage(self._variable(scope, varid)[region])
            out[:] = _checked(data, out.dtype).reshape(-1)

        status, _ = self._call(read)
        return status

    def put_vara(self, scope, varid, start, count, values):
        if not self._scope_ok(scope):
            return NC_EBADGRPID

        def write():
            var = self._variable(scope, varid)
            region = tuple(slice(s, s + c) for s, c in zip(start, count))
            var[region] = _to_storage(values, var).reshape(tuple(count))

        status, _ = self._call(write)
        return status
