"""Unit tests for Variable metadata operations."""

import numpy as np
import pytest
import xarray as xr

from ncvar.core.attribute import Attribute
from ncvar.core.group import Group
from ncvar.core.kinds import ElementKind
from ncvar.core.variable import Variable, init_variable
from ncvar.engine.memory import MemoryEngine
from ncvar.errors import EngineError, NC_ELATEFILL, ShapeError


class TestVariableRecord:
    """Test the discovered record"""

    def test_fields(self, temp):
        assert temp.name == 'temp'
        assert temp.kind is ElementKind.DOUBLE
        assert temp.shape == (2, 3)
        assert temp.ndim == 2
        assert len(temp) == 6

    def test_dimension_order(self, temp):
        assert [dim.name for dim in temp.dimensions] == ['y', 'x']

    def test_attribute_cache(self, temp):
        assert set(temp.attributes) == {'long_name', 'valid_max'}
        assert temp.attributes['long_name'].value == 'temperature'
        assert temp.attributes['valid_max'].nc_type == ElementKind.DOUBLE


class TestAddAttribute:
    """Test write-through attribute creation"""

    def test_caches_written_attribute(self, temp):
        attr = temp.add_attribute('units', 'meters')

        assert temp.attributes['units'] is attr
        assert attr.nc_type == ElementKind.CHAR
        assert attr.var_id == temp.id

    def test_rediscovery_surfaces_attribute(self, engine, group, temp):
        """add_attribute then init_variable shows the written value"""
        temp.add_attribute('units', 'meters')

        fresh = init_variable(engine, temp.scope_id, temp.id, group.dimension_catalog)

        assert fresh.attributes['units'].value == 'meters'
        assert len(fresh.attributes) == 3

    def test_overwrite_existing(self, temp):
        temp.add_attribute('valid_max', 50)

        assert len(temp.attributes) == 2
        assert temp.attributes['valid_max'].value == 50
        assert temp.attributes['valid_max'].nc_type == ElementKind.INT

    def test_numeric_array(self, engine, group, temp):
        temp.add_attribute('valid_range', np.array([0.0, 10.0], dtype=np.float32))

        fresh = group.refresh_variable('temp')
        np.testing.assert_array_equal(fresh.attributes['valid_range'].value, [0.0, 10.0])

    def test_engine_failure_leaves_cache(self, engine, temp):
        ghost = Variable(name='ghost', id=99, scope_id=0, nc_type=6,
                         dimensions=[], length=1, engine=engine)

        with pytest.raises(EngineError):
            ghost.add_attribute('units', 'meters')
        assert ghost.attributes == {}


class TestSetFillValue:
    """Test fill value definition and cache rebuild"""

    def test_adds_implicit_attribute(self, engine, group):
        """Two attributes before, three after, matching the engine"""
        blank = group['blank']
        assert len(blank.attributes) == 2

        blank.set_fill_value(-999)

        natts = engine.inq_varnatts(blank.scope_id, blank.id)[1]
        assert len(blank.attributes) == 3 == natts
        assert blank.attributes['_FillValue'].value == -999

    def test_fills_unwritten_storage(self, group):
        blank = group['blank']
        blank.set_fill_value(-1)

        np.testing.assert_array_equal(blank.values(), np.full(6, -1, dtype=np.int32))

    def test_cache_rebuilt_wholesale(self, group):
        """Entries not in the engine do not survive the rebuild"""
        blank = group['blank']
        blank.attributes['stale'] = Attribute(name='stale', nc_type=2, var_id=blank.id,
                                              scope_id=blank.scope_id, value='x')

        blank.set_fill_value(0)

        assert 'stale' not in blank.attributes
        assert set(blank.attributes) == {'units', 'long_name', '_FillValue'}

    def test_after_data_written(self, temp):
        with pytest.raises(EngineError) as exc_info:
            temp.set_fill_value(-1.0)

        assert exc_info.value.code == NC_ELATEFILL
        assert len(temp.attributes) == 2


class TestMultidimensional:
    """Test shaped reads"""

    def test_shape(self, temp):
        data = temp.as_multidimensional()

        assert data.shape == (2, 3)
        assert data[1, 2] == 5.0
        np.testing.assert_array_equal(data[0], [0.0, 1.0, 2.0])

    def test_flat_length_mismatch(self, temp, monkeypatch):
        monkeypatch.setattr(temp, 'values', lambda kind=None: np.zeros(5))

        with pytest.raises(ShapeError, match="expected 6"):
            temp.as_multidimensional()

    def test_to_dataarray(self, temp):
        da = temp.to_dataarray()

        assert isinstance(da, xr.DataArray)
        assert da.name == 'temp'
        assert da.dims == ('y', 'x')
        assert da.attrs['long_name'] == 'temperature'
        assert float(da.isel(y=1, x=0)) == 3.0

    def test_one_dimensional(self):
        engine = MemoryEngine()
        n = engine.def_dim(0, 'n', 4)
        engine.def_var(0, 'v', ElementKind.UINT, [n])
        var = Group(engine, 0)['v']

        assert var.as_multidimensional().shape == (4,)
