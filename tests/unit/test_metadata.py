"""Unit tests for header formatting."""

import numpy as np

from ncvar.utils.metadata import format_header, format_nbytes, format_value, type_name, variable_size


class TestFormatting:
    """Test value and size rendering"""

    def test_type_name(self):
        assert type_name(6) == 'double'
        assert type_name(12) == 'string'
        assert type_name(99) == 'type99'

    def test_format_value(self):
        assert format_value('meters') == '"meters"'
        assert format_value(np.array([1.5, 2.0])) == '1.5, 2.0'
        assert format_value(3) == '3'

    def test_format_nbytes(self):
        assert format_nbytes(48) == '48.0 B'
        assert format_nbytes(1023) == '1023.0 B'
        assert format_nbytes(1536) == '1.5 KB'
        assert format_nbytes(3 * 1024 ** 2) == '3.0 MB'

    def test_format_nbytes_caps_at_petabytes(self):
        assert format_nbytes(1024 ** 6) == '1024.0 PB'

    def test_variable_size(self, group):
        assert variable_size(group['temp']) == '48.0 B'
        assert variable_size(group['counts']) == '6.0 B'

    def test_variable_size_non_numeric(self, engine):
        """Variables without an element kind report zero bytes"""
        from ncvar.core.variable import Variable
        from ncvar.engine.base import NC_STRING

        text = Variable(name='labels', id=0, scope_id=0, nc_type=NC_STRING,
                        dimensions=[], length=1, engine=engine)

        assert variable_size(text) == '0.0 B'


class TestFormatHeader:
    """Test CDL-like group header"""

    def test_lists_contents(self, group):
        header = format_header(group)

        assert header.startswith('group: / {')
        assert '    y = 2 ;' in header
        assert '    double temp(y, x) ;  // 48.0 B' in header
        assert 'temp:long_name = "temperature" ;' in header
        assert ':title = "test container" ;' in header
        assert header.endswith('}')
