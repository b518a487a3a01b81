"""
ncvar Utilities

Text rendering of discovered groups.
"""

from ncvar.utils.metadata import (
    format_header,
    format_nbytes,
    format_value,
    type_name,
    variable_size,
)

__all__ = [
    'format_header',
    'format_nbytes',
    'format_value',
    'type_name',
    'variable_size',
]
