"""
ncvar Core Module

Element kinds, numeric access, and the dimension, attribute and variable
catalogs of a scope.
"""

from ncvar.core.kinds import ElementKind, KIND_DTYPES, kind_of
from ncvar.core.buffer import ElementBuffer
from ncvar.core.access import (
    NumericAccess,
    access_for,
    validate_indices,
    validate_region,
)
from ncvar.core.dimension import Dimension, init_dimensions
from ncvar.core.attribute import (
    Attribute,
    count_attributes,
    read_attributes,
    init_attributes,
    put_attribute,
)
from ncvar.core.variable import Variable, init_variable, init_variables
from ncvar.core.group import Group, open_group

__all__ = [
    # Element kinds
    'ElementKind',
    'KIND_DTYPES',
    'kind_of',
    'ElementBuffer',
    # Numeric access
    'NumericAccess',
    'access_for',
    'validate_indices',
    'validate_region',
    # Catalogs
    'Dimension',
    'init_dimensions',
    'Attribute',
    'count_attributes',
    'read_attributes',
    'init_attributes',
    'put_attribute',
    'Variable',
    'init_variable',
    'init_variables',
    'Group',
    'open_group',
]
