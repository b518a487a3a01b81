"""Integration tests against real netCDF files."""

import netCDF4 as nc
import numpy as np
import pytest

from ncvar.core.group import open_group
from ncvar.core.kinds import ElementKind
from ncvar.engine.netcdf import NetCDF4Engine, status_from_exception
from ncvar.errors import (
    EngineError,
    NC_EBADGRPID,
    NC_EHDFERR,
    NC_EINVALCOORDS,
    NC_ELATEFILL,
    NC_EPERM,
    NC_ERANGE,
    ShapeError,
)
from ncvar.utils.metadata import format_header


@pytest.fixture
def nc_path(tmp_path):
    """
    File with y(2), x(3) and a nested 'forecast' group:

    - temp(y, x) f8, values 0..5, long_name attribute
    - counts(x) i2
    - code(x) S1
    - forecast/lead_hours(lead) i4
    - forecast/field(lead, x) f4, using the parent's x
    """
    path = tmp_path / 'sample.nc'
    with nc.Dataset(str(path), 'w', format='NETCDF4') as ds:
        ds.createDimension('y', 2)
        ds.createDimension('x', 3)
        ds.title = 'sample'

        temp = ds.createVariable('temp', 'f8', ('y', 'x'))
        temp[:] = np.arange(6.0).reshape(2, 3)
        temp.long_name = 'temperature'

        counts = ds.createVariable('counts', 'i2', ('x',))
        counts[:] = np.array([10, 20, 30], dtype=np.int16)

        code = ds.createVariable('code', 'S1', ('x',))
        code[:] = np.array([b'a', b'b', b'c'], dtype='S1')

        forecast = ds.createGroup('forecast')
        forecast.createDimension('lead', 4)
        lead = forecast.createVariable('lead_hours', 'i4', ('lead',))
        lead[:] = np.array([0, 6, 12, 18], dtype=np.int32)
        forecast.createVariable('field', 'f4', ('lead', 'x'))
    return path


class TestDiscovery:
    """Test discovery of a file's groups"""

    def test_root(self, nc_path):
        with open_group(nc_path) as root:
            assert root.name == '/'
            assert list(root.dimensions) == ['y', 'x']
            assert set(root.variables) == {'temp', 'counts', 'code'}
            assert root.attributes['title'].value == 'sample'

            temp = root['temp']
            assert temp.kind is ElementKind.DOUBLE
            assert temp.shape == (2, 3)
            assert temp.attributes['long_name'].value == 'temperature'

    def test_nested_group(self, nc_path):
        with open_group(nc_path) as root:
            forecast = root.groups['forecast']
            field = forecast['field']

            assert [d.name for d in field.dimensions] == ['lead', 'x']
            assert len(field) == 12
            np.testing.assert_array_equal(forecast['lead_hours'].get_int(), [0, 6, 12, 18])

    def test_header(self, nc_path):
        with open_group(nc_path) as root:
            header = format_header(root)

        assert 'double temp(y, x) ;' in header
        assert 'group: forecast {' in header


class TestReads:
    """Test reads through the netCDF4 engine"""

    def test_values(self, nc_path):
        with open_group(nc_path) as root:
            np.testing.assert_array_equal(root['temp'].values(), np.arange(6.0))

    def test_slice(self, nc_path):
        with open_group(nc_path) as root:
            np.testing.assert_array_equal(root['temp'].get_slice([0, 1], [2, 2]), [1.0, 2.0, 4.0, 5.0])

    def test_single_element(self, nc_path):
        with open_group(nc_path) as root:
            assert root['counts'].get_value([2]) == 30

    def test_char(self, nc_path):
        with open_group(nc_path) as root:
            code = root['code']

            assert code.kind is ElementKind.CHAR
            assert code.get_char().tobytes() == b'abc'

    def test_cast(self, nc_path):
        with open_group(nc_path) as root:
            data = root['counts'].values(ElementKind.DOUBLE)

        assert data.dtype == np.float64
        np.testing.assert_array_equal(data, [10.0, 20.0, 30.0])

    def test_out_of_bounds(self, nc_path):
        with open_group(nc_path) as root:
            with pytest.raises(ShapeError):
                root['temp'].get_value([2, 0])


class TestWrites:
    """Test writes persist to the file"""

    def test_slice_round_trip(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            root['temp'].put_slice([1, 0], [1, 3], [7.0, 8.0, 9.0])

        with open_group(nc_path) as root:
            np.testing.assert_array_equal(root['temp'].get_slice([1, 0], [1, 3]), [7.0, 8.0, 9.0])
            assert root['temp'].get_value([0, 2]) == 2.0

    def test_element(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            root['counts'].put_value([0], 11)

        with nc.Dataset(str(nc_path)) as ds:
            assert ds['counts'][0] == 11

    def test_char_text(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            root['code'].put_slice([0], [3], 'xyz')
            assert root['code'].get_char().tobytes() == b'xyz'

    def test_attribute_rediscovered(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            root['temp'].add_attribute('units', 'meters')
            fresh = root.refresh_variable('temp')

            assert fresh.attributes['units'].value == 'meters'

        with nc.Dataset(str(nc_path)) as ds:
            assert ds['temp'].units == 'meters'

    def test_read_only_rejects_writes(self, nc_path):
        with open_group(nc_path) as root:
            with pytest.raises(EngineError):
                root['temp'].put_value([0, 0], 1.0)

    def test_fill_value_unsupported_on_existing_variable(self, nc_path):
        """netCDF4 accepts a fill value only when the variable is created"""
        with open_group(nc_path, mode='a') as root:
            temp = root['temp']
            with pytest.raises(EngineError) as exc_info:
                temp.set_fill_value(-1.0)
            assert exc_info.value.code == NC_ELATEFILL
            assert len(temp.attributes) == 1

    def test_fill_value_unsupported_on_unwritten_variable(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            field = root.groups['forecast']['field']
            with pytest.raises(EngineError) as exc_info:
                field.set_fill_value(-1.0)
            assert exc_info.value.code == NC_ELATEFILL
            assert '_FillValue' not in field.attributes

    def test_out_of_range_write(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            with pytest.raises(EngineError) as exc_info:
                root['counts'].put_value([0], 100000)
            assert exc_info.value.code == NC_ERANGE

        with nc.Dataset(str(nc_path)) as ds:
            np.testing.assert_array_equal(ds['counts'][:], [10, 20, 30])

    def test_out_of_range_read(self, nc_path):
        with open_group(nc_path, mode='a') as root:
            root['temp'].put_value([0, 0], 300.0)
            with pytest.raises(EngineError) as exc_info:
                root['temp'].get_value([0, 0], kind=ElementKind.BYTE)
            assert exc_info.value.code == NC_ERANGE


class TestEngine:
    """Test engine status handling"""

    def test_unknown_scope(self, nc_path):
        with NetCDF4Engine(nc_path) as engine:
            assert engine.inq_nvars(99) == (NC_EBADGRPID, 0)

    def test_status_from_exception(self):
        assert status_from_exception(RuntimeError("NetCDF: Write to read only")) == NC_EPERM
        assert status_from_exception(IndexError("index exceeds dimension bounds")) == NC_EINVALCOORDS
        assert status_from_exception(RuntimeError("something else")) == NC_EHDFERR
