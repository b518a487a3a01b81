"""Unit tests for element kinds and buffers."""

import numpy as np
import pytest

from ncvar.core.buffer import ElementBuffer
from ncvar.core.kinds import ElementKind, KIND_DTYPES, fits, kind_of
from ncvar.errors import TypeMismatchError


class TestElementKind:
    """Test the kind dispatch table"""

    def test_table_covers_every_kind(self):
        assert set(KIND_DTYPES) == set(ElementKind)

    def test_char_is_stored_as_uint8(self):
        assert ElementKind.CHAR.dtype == np.dtype(np.uint8)

    def test_from_tag(self):
        assert ElementKind.from_tag(6) is ElementKind.DOUBLE

    def test_from_tag_rejects_non_numeric(self):
        with pytest.raises(TypeMismatchError):
            ElementKind.from_tag(12)

    @pytest.mark.parametrize("dtype, kind", [
        ('i1', ElementKind.BYTE),
        ('S1', ElementKind.CHAR),
        ('u1', ElementKind.UBYTE),
        ('i2', ElementKind.SHORT),
        ('u8', ElementKind.UINT64),
        ('f4', ElementKind.FLOAT),
    ])
    def test_from_dtype(self, dtype, kind):
        assert ElementKind.from_dtype(dtype) is kind

    def test_from_dtype_rejects_complex(self):
        with pytest.raises(TypeMismatchError):
            ElementKind.from_dtype(np.complex64)


class TestKindOf:
    """Test attribute value kind inference"""

    def test_text(self):
        assert kind_of("meters") is ElementKind.CHAR
        assert kind_of(b"raw") is ElementKind.CHAR

    def test_integers(self):
        assert kind_of(3) is ElementKind.INT
        assert kind_of(2**40) is ElementKind.INT64

    def test_float(self):
        assert kind_of(1.5) is ElementKind.DOUBLE

    def test_numpy(self):
        assert kind_of(np.float32(1.0)) is ElementKind.FLOAT
        assert kind_of(np.array([1, 2], dtype=np.uint16)) is ElementKind.USHORT

    def test_unsupported(self):
        with pytest.raises(TypeMismatchError):
            kind_of({"a": 1})


class TestFits:
    """Test representability checks"""

    @pytest.mark.parametrize("values, dtype", [
        ([0, 255], np.uint8),
        ([-32768, 32767], np.int16),
        ([1.9, -3.0], np.int16),
        ([1e30], np.float32),
        ([np.nan, np.inf], np.float32),
        ([], np.int8),
    ])
    def test_representable(self, values, dtype):
        assert fits(np.array(values), dtype)

    @pytest.mark.parametrize("values, dtype", [
        ([256], np.uint8),
        ([-1], np.uint32),
        ([100000], np.int16),
        ([300.0], np.int8),
        ([np.nan], np.int32),
        ([1e300], np.float32),
    ])
    def test_not_representable(self, values, dtype):
        assert not fits(np.array(values), dtype)


class TestElementBuffer:
    """Test caller-supplied buffers"""

    def test_starts_empty(self):
        buf = ElementBuffer(8, ElementKind.FLOAT)

        assert buf.capacity == 8
        assert len(buf) == 0
        assert buf.values.shape == (0,)
        assert buf.data.dtype == np.float32

    def test_negative_capacity(self):
        with pytest.raises(ValueError):
            ElementBuffer(-1, ElementKind.INT)
