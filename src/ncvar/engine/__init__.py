"""
ncvar Storage Engines

Bindings of the raw engine primitives. ``NetCDF4Engine`` is imported on
demand from ``ncvar.engine.netcdf``.
"""

from ncvar.engine.base import StorageEngine, NC_GLOBAL, NC_NAT, NC_STRING
from ncvar.engine.memory import MemoryEngine

__all__ = [
    'StorageEngine',
    'MemoryEngine',
    'NC_GLOBAL',
    'NC_NAT',
    'NC_STRING',
]
