"""
ncvar - Typed Variable Access for netCDF Containers

Bounds-checked, type-polymorphic access to the named multi-dimensional
arrays ("variables") of a scientific container, with attribute caches kept
in step with the storage engine.

This package provides:
- Discovery of dimensions, variables, attributes and nested groups
- Whole-array, single-element and rectangular-slice reads and writes
  for every numeric element kind
- Write-through attribute and fill value definition
- A netCDF4 file engine and an in-memory engine

Quick Start
-----------
>>> import ncvar
>>> with ncvar.open_group('/data/obs.nc', mode='a') as root:
...     temp = root['temperature']
...     block = temp.get_slice([0, 1], [2, 2])
...     temp.add_attribute('units', 'K')
"""

__version__ = "0.1.0"

from ncvar.config import config, NcVarConfig, configure_logging, ENGINE_LOCK

from ncvar.errors import (
    NcVarError,
    ShapeError,
    CapacityError,
    TypeMismatchError,
    EngineError,
    CatalogError,
    NC_ERRORS,
)

from ncvar.core import (
    ElementKind,
    ElementBuffer,
    NumericAccess,
    access_for,
    Dimension,
    Attribute,
    Variable,
    init_variable,
    init_variables,
    Group,
    open_group,
)

from ncvar.engine import StorageEngine, MemoryEngine

from ncvar.utils.metadata import format_header

__all__ = [
    # Version
    '__version__',

    # Config
    'config',
    'NcVarConfig',
    'configure_logging',
    'ENGINE_LOCK',

    # Errors
    'NcVarError',
    'ShapeError',
    'CapacityError',
    'TypeMismatchError',
    'EngineError',
    'CatalogError',
    'NC_ERRORS',

    # Core
    'ElementKind',
    'ElementBuffer',
    'NumericAccess',
    'access_for',
    'Dimension',
    'Attribute',
    'Variable',
    'init_variable',
    'init_variables',
    'Group',
    'open_group',

    # Engines
    'StorageEngine',
    'MemoryEngine',

    # Utilities
    'format_header',
]
