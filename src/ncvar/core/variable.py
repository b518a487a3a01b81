"""
Variables and Variable Discovery

A ``Variable`` is the per-array entity of a scope: its name, element kind,
ordered dimensions and attribute cache, plus the typed access surface built
on ``NumericAccess``. ``init_variables`` and ``init_variable`` discover
variables from the engine once the scope's dimensions are known.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import xarray as xr

from ncvar.config import DUPLICATE_ERROR, config
from ncvar.core.access import access_for
from ncvar.core.attribute import (
    Attribute,
    count_attributes,
    init_attributes,
    put_attribute,
    read_attributes,
)
from ncvar.core.buffer import ElementBuffer
from ncvar.core.dimension import Dimension
from ncvar.core.kinds import ElementKind
from ncvar.engine.base import StorageEngine
from ncvar.errors import CatalogError, NC_NOERR, ShapeError, check_status, error_message

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Variable:
    """
    A named N-dimensional array stored in a scope.

    Attributes
    ----------
    name : str
        Name, unique within the owning scope
    id : int
        Engine variable id
    scope_id : int
        Owning scope id
    nc_type : int
        Engine type tag, fixed at creation
    dimensions : list of Dimension
        Dimensions in declared order; the last varies fastest
    length : int
        Total element count, the product of the dimension lengths
    attributes : dict
        Attribute cache, name -> Attribute
    engine : StorageEngine
        Engine the variable was discovered on
    """
    name: str
    id: int
    scope_id: int
    nc_type: int
    dimensions: List[Dimension]
    length: int
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    engine: Optional[StorageEngine] = field(default=None, repr=False)

    def __len__(self) -> int:
        return self.length

    @property
    def kind(self) -> ElementKind:
        """Element kind; TypeMismatchError for non-numeric variables."""
        return ElementKind.from_tag(self.nc_type)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(dim.length for dim in self.dimensions)

    @property
    def ndim(self) -> int:
        return len(self.dimensions)

    def _access(self, kind: Optional[ElementKind]):
        return access_for(self.kind if kind is None else ElementKind(kind))

    # -------------------------------------------------------------------------
    # Generic access (engine casts to the requested kind)
    # -------------------------------------------------------------------------

    def values(self, kind: Optional[ElementKind] = None) -> np.ndarray:
        """Read the whole variable as a flat row-major array."""
        return self._access(kind).read_all(self)

    def values_into(self, buffer: ElementBuffer) -> None:
        self._access(buffer.kind).read_all_into(self, buffer)

    def get_value(self, indices: Sequence[int], kind: Optional[ElementKind] = None) -> Any:
        return self._access(kind).read_one(self, indices)

    def get_slice(
        self,
        indices: Sequence[int],
        shape: Sequence[int],
        kind: Optional[ElementKind] = None
    ) -> np.ndarray:
        return self._access(kind).read_slice(self, indices, shape)

    def get_slice_into(self, indices: Sequence[int], shape: Sequence[int], buffer: ElementBuffer) -> None:
        self._access(buffer.kind).read_slice_into(self, indices, shape, buffer)

    def put_value(self, indices: Sequence[int], value: Any, kind: Optional[ElementKind] = None) -> None:
        self._access(kind).write_one(self, indices, value)

    def put_slice(
        self,
        indices: Sequence[int],
        shape: Sequence[int],
        values: Any,
        kind: Optional[ElementKind] = None
    ) -> None:
        self._access(kind).write_slice(self, indices, shape, values)

    # -------------------------------------------------------------------------
    # Exact-type accessors
    # -------------------------------------------------------------------------

    def _get_as(self, kind: ElementKind, cast: Optional[bool]) -> np.ndarray:
        if cast is None:
            cast = config.allow_cast
        return access_for(kind).read_all(self, cast=cast)

    def get_char(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.CHAR, cast)

    def get_byte(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.BYTE, cast)

    def get_ubyte(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.UBYTE, cast)

    def get_short(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.SHORT, cast)

    def get_ushort(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.USHORT, cast)

    def get_int(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.INT, cast)

    def get_uint(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.UINT, cast)

    def get_int64(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.INT64, cast)

    def get_uint64(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.UINT64, cast)

    def get_float(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.FLOAT, cast)

    def get_double(self, cast: Optional[bool] = None) -> np.ndarray:
        return self._get_as(ElementKind.DOUBLE, cast)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def add_attribute(self, name: str, value: Any) -> Attribute:
        """
        Write an attribute to the engine, then cache it under ``name``.

        Raises
        ------
        EngineError
            If the engine rejects the write; the cache is left untouched
        """
        attr = put_attribute(self.engine, self.scope_id, self.id, name, value)
        self.attributes[name] = attr
        return attr

    def refresh_attributes(self) -> None:
        """Rebuild the attribute cache from the engine's current state."""
        natts = count_attributes(self.engine, self.scope_id, self.id)
        self.attributes = read_attributes(self.engine, self.scope_id, self.id, natts)

    def set_fill_value(self, value: Any) -> None:
        """
        Define the variable's fill value.

        The engine may add an implicit attribute, so the attribute cache is
        rebuilt from scratch afterwards.
        """
        with self.engine.lock:
            status = self.engine.def_var_fill(self.scope_id, self.id, value)
        check_status(status)
        logger.debug(f"Defined fill value {value!r} for '{self.name}'")
        self.refresh_attributes()

    def as_multidimensional(self, kind: Optional[ElementKind] = None) -> np.ndarray:
        """
        Read the whole variable shaped by its own dimensions.

        Raises
        ------
        ShapeError
            If the flat read does not hold exactly ``prod(shape)`` elements
        """
        flat = self.values(kind)
        shape = self.shape
        expected = int(np.prod(shape, dtype=np.int64))
        if flat.size != expected:
            raise ShapeError(
                f"Read {flat.size} elements from '{self.name}', expected {expected} for shape {shape}"
            )
        return flat.reshape(shape)

    def to_dataarray(self, kind: Optional[ElementKind] = None) -> xr.DataArray:
        """Whole variable as a labelled xarray DataArray carrying the cached attributes."""
        return xr.DataArray(
            self.as_multidimensional(kind),
            dims=[dim.name for dim in self.dimensions],
            name=self.name,
            attrs={name: attr.value for name, attr in self.attributes.items()},
        )


# =============================================================================
# Discovery
# =============================================================================

def init_variable(
    engine: StorageEngine,
    scope_id: int,
    var_id: int,
    dimensions: Dict[int, Dimension]
) -> Variable:
    """
    Discover one variable.

    Parameters
    ----------
    engine : StorageEngine
        Engine the scope belongs to
    scope_id : int
        Scope handle
    var_id : int
        Engine variable id
    dimensions : dict
        The scope's dimension catalog (id -> Dimension), discovered first

    Returns
    -------
    Variable

    Raises
    ------
    CatalogError
        If an engine query fails or a dimension id is not in the catalog
    """
    with engine.lock:
        status, info = engine.inq_var(scope_id, var_id)
    if status != NC_NOERR:
        raise CatalogError(
            f"Could not inquire variable {var_id} in scope {scope_id}: {error_message(status)}"
        )
    name, nc_type, dimids, natts = info

    attributes = init_attributes(engine, scope_id, var_id, natts)

    # Declared order is kept: the last dimension varies fastest
    var_dims = []
    length = 1
    for dimid in dimids:
        dim = dimensions.get(dimid)
        if dim is None:
            raise CatalogError(f"Variable '{name}' references unknown dimension id {dimid}")
        var_dims.append(dim)
        length *= dim.length

    logger.debug(f"Discovered variable '{name}' (id {var_id}) dims {[d.name for d in var_dims]}")
    return Variable(
        name=name,
        id=var_id,
        scope_id=scope_id,
        nc_type=nc_type,
        dimensions=var_dims,
        length=length,
        attributes=attributes,
        engine=engine,
    )


def init_variables(
    engine: StorageEngine,
    scope_id: int,
    dimensions: Dict[int, Dimension],
    duplicates: Optional[str] = None
) -> Dict[str, Variable]:
    """
    Discover every variable of a scope.

    Parameters
    ----------
    engine : StorageEngine
        Engine the scope belongs to
    scope_id : int
        Scope handle
    dimensions : dict
        The scope's dimension catalog (id -> Dimension)
    duplicates : str, optional
        ``"overwrite"`` or ``"error"`` for a name seen twice
        (default from ``config.duplicate_variables``)

    Returns
    -------
    dict
        Mapping of variable name to Variable
    """
    duplicates = duplicates or config.duplicate_variables

    with engine.lock:
        status, nvars = engine.inq_nvars(scope_id)
    if status != NC_NOERR:
        raise CatalogError(f"Could not count variables in scope {scope_id}: {error_message(status)}")

    variables: Dict[str, Variable] = {}
    for var_id in range(nvars):
        var = init_variable(engine, scope_id, var_id, dimensions)
        if var.name in variables:
            if duplicates == DUPLICATE_ERROR:
                raise CatalogError(f"Duplicate variable name '{var.name}' in scope {scope_id}")
            logger.warning(
                f"Variable '{var.name}' (id {var_id}) replaces id {variables[var.name].id} "
                f"in scope {scope_id}"
            )
        variables[var.name] = var

    logger.info(f"Scope {scope_id}: discovered {len(variables)} variables")
    return variables
