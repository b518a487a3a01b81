"""
Numeric Element Kinds

The closed set of primitive element kinds a variable may hold, keyed by the
engine's numeric type tag, and the dtype dispatch table the generic access
layer uses in place of one code path per kind.
"""

from enum import IntEnum
from typing import Any, Dict

import numpy as np

from ncvar.errors import TypeMismatchError


class ElementKind(IntEnum):
    """Engine type tags of the supported primitive element kinds."""

    BYTE = 1
    CHAR = 2
    SHORT = 3
    INT = 4
    FLOAT = 5
    DOUBLE = 6
    UBYTE = 7
    USHORT = 8
    UINT = 9
    INT64 = 10
    UINT64 = 11

    @property
    def dtype(self) -> np.dtype:
        return KIND_DTYPES[self]

    @classmethod
    def from_tag(cls, tag: int) -> 'ElementKind':
        """Resolve an engine type tag, raising TypeMismatchError for non-numeric tags."""
        try:
            return cls(tag)
        except ValueError:
            raise TypeMismatchError(f"Type tag {tag} is not a numeric element kind") from None

    @classmethod
    def from_dtype(cls, dtype: Any) -> 'ElementKind':
        dtype = np.dtype(dtype)
        if dtype.kind == 'S' and dtype.itemsize == 1:
            return cls.CHAR
        for kind, kind_dtype in KIND_DTYPES.items():
            if kind is not cls.CHAR and kind_dtype == dtype:
                return kind
        raise TypeMismatchError(f"No element kind for dtype {dtype}")


# CHAR is stored as raw uint8 codes; engines convert to and from text
KIND_DTYPES: Dict[ElementKind, np.dtype] = {
    ElementKind.BYTE: np.dtype(np.int8),
    ElementKind.CHAR: np.dtype(np.uint8),
    ElementKind.SHORT: np.dtype(np.int16),
    ElementKind.INT: np.dtype(np.int32),
    ElementKind.FLOAT: np.dtype(np.float32),
    ElementKind.DOUBLE: np.dtype(np.float64),
    ElementKind.UBYTE: np.dtype(np.uint8),
    ElementKind.USHORT: np.dtype(np.uint16),
    ElementKind.UINT: np.dtype(np.uint32),
    ElementKind.INT64: np.dtype(np.int64),
    ElementKind.UINT64: np.dtype(np.uint64),
}

_INT32_MIN = np.iinfo(np.int32).min
_INT32_MAX = np.iinfo(np.int32).max


def kind_of(value: Any) -> ElementKind:
    """
    Infer the element kind used to store ``value`` as an attribute.

    Parameters
    ----------
    value : str, bytes, int, float, numpy scalar or array, or sequence

    Returns
    -------
    ElementKind

    Examples
    --------
    >>> kind_of("meters")
    <ElementKind.CHAR: 2>
    >>> kind_of(3)
    <ElementKind.INT: 4>
    """
    if isinstance(value, (str, bytes)):
        return ElementKind.CHAR
    if isinstance(value, (bool, int)):
        if _INT32_MIN <= value <= _INT32_MAX:
            return ElementKind.INT
        return ElementKind.INT64
    if isinstance(value, float):
        return ElementKind.DOUBLE
    if isinstance(value, (np.ndarray, np.generic)):
        return ElementKind.from_dtype(value.dtype)
    if isinstance(value, (list, tuple)) and value:
        return ElementKind.from_dtype(np.asarray(value).dtype)
    raise TypeMismatchError(f"Cannot store value of type {type(value).__name__} as an attribute")


def fits(values: np.ndarray, dtype: Any) -> bool:
    """
    Whether every element of ``values`` is representable in ``dtype``.

    Integer targets reject out-of-range and non-finite values; float32
    rejects finite values beyond its range. Precision loss is allowed.
    """
    values = np.asarray(values)
    dtype = np.dtype(dtype)
    if values.size == 0 or values.dtype.kind not in 'biuf':
        return True
    if dtype.kind in 'iu':
        if values.dtype.kind == 'f' and not np.isfinite(values).all():
            return False
        info = np.iinfo(dtype)
        return info.min <= values.min().item() and values.max().item() <= info.max
    if dtype.kind == 'f' and values.dtype.kind == 'f' and values.dtype.itemsize > dtype.itemsize:
        finite = values[np.isfinite(values)]
        return finite.size == 0 or np.abs(finite).max().item() <= np.finfo(dtype).max
    return True
