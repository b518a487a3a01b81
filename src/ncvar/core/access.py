"""
Numeric Access

One generic implementation of the typed read/write surface, parameterised
by element kind. The kind only selects the dtype of the arrays handed to
the engine; validation and addressing are shared by every kind.

Addressing is row-major: the last dimension varies fastest in every
flattened read or write.

Validation runs outside the engine lock. Each operation holds
``engine.lock`` for exactly one engine call.
"""

import logging
import operator
from functools import lru_cache
from typing import Any, Callable, List, Sequence, TYPE_CHECKING

import numpy as np

from ncvar.config import ACCESS_CACHE_SIZE
from ncvar.core.buffer import ElementBuffer
from ncvar.core.kinds import ElementKind, fits
from ncvar.errors import NC_ERANGE, CapacityError, ShapeError, TypeMismatchError, check_status

if TYPE_CHECKING:
    from ncvar.core.variable import Variable

logger = logging.getLogger(__name__)


# =============================================================================
# Validation
# =============================================================================

def _as_ints(values: Sequence[int], what: str) -> List[int]:
    try:
        return [operator.index(v) for v in values]
    except TypeError:
        raise ShapeError(f"{what} must be a sequence of integers, got {values!r}") from None


def validate_indices(var: 'Variable', indices: Sequence[int]) -> List[int]:
    """
    Check an element index against the variable's dimensions.

    Raises
    ------
    ShapeError
        If the index has the wrong length or any component is out of bounds
    """
    indices = _as_ints(indices, "indices")
    if len(indices) != len(var.dimensions):
        raise ShapeError(
            f"Variable '{var.name}' has {len(var.dimensions)} dimensions, "
            f"got {len(indices)} indices"
        )
    for i, (index, dim) in enumerate(zip(indices, var.dimensions)):
        if not 0 <= index < dim.length:
            raise ShapeError(
                f"Index {index} out of bounds for dimension {i} ('{dim.name}', length {dim.length})"
            )
    return indices


def validate_region(var: 'Variable', indices: Sequence[int], shape: Sequence[int]) -> int:
    """
    Check a rectangular region and return its element count.

    Raises
    ------
    ShapeError
        If start or shape have the wrong length, any extent is below one,
        or the region runs past a dimension
    """
    indices = validate_indices(var, indices)
    shape = _as_ints(shape, "shape")
    if len(shape) != len(var.dimensions):
        raise ShapeError(
            f"Variable '{var.name}' has {len(var.dimensions)} dimensions, "
            f"got a shape of length {len(shape)}"
        )
    total = 1
    for i, (start, count, dim) in enumerate(zip(indices, shape, var.dimensions)):
        if count < 1:
            raise ShapeError(f"Shape {count} for dimension {i} ('{dim.name}') must be at least 1")
        if start + count > dim.length:
            raise ShapeError(
                f"Region {start}:{start + count} exceeds dimension {i} "
                f"('{dim.name}', length {dim.length})"
            )
        total *= count
    return total


# =============================================================================
# Generic Access
# =============================================================================

class NumericAccess:
    """
    Typed access to variables for one element kind.

    Parameters
    ----------
    kind : ElementKind
        Element kind of the arrays returned and accepted

    Notes
    -----
    Every method takes ``cast``. With ``cast=True`` (the default) the engine
    converts between the variable's stored kind and ``kind``. With
    ``cast=False`` a variable of another kind is rejected with
    ``TypeMismatchError``.

    Examples
    --------
    >>> access = access_for(ElementKind.DOUBLE)
    >>> access.read_slice(var, [0, 1], [2, 2])
    """

    def __init__(self, kind: ElementKind):
        self.kind = ElementKind(kind)
        self.dtype = self.kind.dtype

    def __repr__(self) -> str:
        return f"NumericAccess({self.kind.name})"

    def _check_kind(self, var: 'Variable', cast: bool) -> None:
        stored = var.kind
        if not cast and stored is not self.kind:
            raise TypeMismatchError(
                f"Variable '{var.name}' holds {stored.name}, requested {self.kind.name} "
                f"and cast is disabled"
            )

    def _check_buffer(self, buffer: ElementBuffer, required: int) -> None:
        if buffer.kind is not self.kind:
            raise TypeMismatchError(f"Buffer holds {buffer.kind.name}, expected {self.kind.name}")
        if buffer.capacity < required:
            raise CapacityError(f"Buffer capacity {buffer.capacity} is smaller than {required} elements")

    def _coerce(self, values: Any) -> np.ndarray:
        """Flatten values to this kind, raising NC_ERANGE for unrepresentable ones."""
        if isinstance(values, str):
            values = values.encode()
        if isinstance(values, bytes):
            return np.frombuffer(values, dtype=np.uint8).astype(self.dtype)
        try:
            raw = np.asarray(values)
            if raw.dtype.kind == 'O':
                # Python ints beyond int64 arrive as objects
                raw = raw.astype(self.dtype)
        except (OverflowError, ValueError, TypeError):
            check_status(NC_ERANGE)
        if not fits(raw, self.dtype):
            check_status(NC_ERANGE)
        return raw.astype(self.dtype).ravel()

    @staticmethod
    def _engine_call(var: 'Variable', primitive: Callable[..., int], *args: Any) -> None:
        with var.engine.lock:
            status = primitive(var.scope_id, var.id, *args)
        check_status(status)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def read_all(self, var: 'Variable', cast: bool = True) -> np.ndarray:
        """Read the whole variable as a flat array of ``len(var)`` elements."""
        self._check_kind(var, cast)
        out = np.empty(len(var), dtype=self.dtype)
        self._engine_call(var, var.engine.get_var, out)
        return out

    def read_all_into(self, var: 'Variable', buffer: ElementBuffer, cast: bool = True) -> None:
        """Fill ``buffer`` with the whole variable; its length becomes ``len(var)``."""
        self._check_kind(var, cast)
        total = len(var)
        self._check_buffer(buffer, total)
        self._engine_call(var, var.engine.get_var, buffer.data[:total])
        buffer.length = total

    def read_one(self, var: 'Variable', indices: Sequence[int], cast: bool = True) -> Any:
        """Read the element at ``indices``."""
        self._check_kind(var, cast)
        indices = validate_indices(var, indices)
        out = np.empty(1, dtype=self.dtype)
        self._engine_call(var, var.engine.get_var1, indices, out)
        return out[0]

    def read_slice(
        self,
        var: 'Variable',
        indices: Sequence[int],
        shape: Sequence[int],
        cast: bool = True
    ) -> np.ndarray:
        """Read the region starting at ``indices`` with extent ``shape``, flattened."""
        self._check_kind(var, cast)
        total = validate_region(var, indices, shape)
        out = np.empty(total, dtype=self.dtype)
        self._engine_call(var, var.engine.get_vara, list(indices), list(shape), out)
        return out

    def read_slice_into(
        self,
        var: 'Variable',
        indices: Sequence[int],
        shape: Sequence[int],
        buffer: ElementBuffer,
        cast: bool = True
    ) -> None:
        """Fill ``buffer`` with a region; its length becomes the region size."""
        self._check_kind(var, cast)
        total = validate_region(var, indices, shape)
        self._check_buffer(buffer, total)
        self._engine_call(var, var.engine.get_vara, list(indices), list(shape), buffer.data[:total])
        buffer.length = total

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def write_one(self, var: 'Variable', indices: Sequence[int], value: Any, cast: bool = True) -> None:
        """Write one element. Applied to the engine immediately."""
        self._check_kind(var, cast)
        indices = validate_indices(var, indices)
        data = self._coerce(value)
        if data.size != 1:
            raise ShapeError(f"Expected a single value, got {data.size}")
        self._engine_call(var, var.engine.put_var1, indices, data)
        logger.debug(f"Wrote {self.kind.name} element {indices} of '{var.name}'")

    def write_slice(
        self,
        var: 'Variable',
        indices: Sequence[int],
        shape: Sequence[int],
        values: Any,
        cast: bool = True
    ) -> None:
        """
        Write a region from row-major ``values``.

        ``values`` may be any array-like; it is flattened in C order and must
        hold exactly ``prod(shape)`` elements.
        """
        self._check_kind(var, cast)
        total = validate_region(var, indices, shape)
        data = self._coerce(values)
        if data.size != total:
            raise ShapeError(f"Region {list(shape)} holds {total} elements, got {data.size} values")
        self._engine_call(var, var.engine.put_vara, list(indices), list(shape), data)
        logger.debug(f"Wrote {total} {self.kind.name} elements of '{var.name}' at {list(indices)}")


@lru_cache(maxsize=ACCESS_CACHE_SIZE)
def access_for(kind: ElementKind) -> NumericAccess:
    """Shared NumericAccess instance for ``kind``."""
    return NumericAccess(ElementKind(kind))
