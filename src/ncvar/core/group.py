"""
Scopes

A ``Group`` is an open scope of a container: its dimension catalog,
variables, scope-level attributes and nested child scopes, discovered in
that order.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from ncvar.core.attribute import Attribute, count_attributes, init_attributes, put_attribute
from ncvar.core.dimension import Dimension, init_dimensions
from ncvar.core.variable import Variable, init_variable, init_variables
from ncvar.engine.base import NC_GLOBAL, StorageEngine
from ncvar.errors import CatalogError, EngineError, NC_NOERR, error_message

logger = logging.getLogger(__name__)


class Group:
    """
    An open scope and everything discovered in it.

    Parameters
    ----------
    engine : StorageEngine
        Engine holding the container
    scope_id : int
        Scope handle; the root scope for a freshly opened container
    duplicates : str, optional
        Duplicate variable name policy passed to ``init_variables``

    Attributes
    ----------
    name : str
    dimension_catalog : dict
        Dimension id -> Dimension, visible dimensions including ancestors'
    variables : dict
        Variable name -> Variable
    attributes : dict
        Scope-level attribute name -> Attribute
    groups : dict
        Child group name -> Group

    Examples
    --------
    >>> group = Group(engine, engine.root)
    >>> temp = group['temperature']
    >>> temp.get_slice([0, 1], [2, 2])
    """

    def __init__(self, engine: StorageEngine, scope_id: int, duplicates: Optional[str] = None):
        self.engine = engine
        self.scope_id = scope_id
        self._duplicates = duplicates

        with engine.lock:
            status, name = engine.inq_grpname(scope_id)
        if status != NC_NOERR:
            raise CatalogError(f"Could not name scope {scope_id}: {error_message(status)}")
        self.name = name

        # Dimensions must be known before variables can resolve them
        self.dimension_catalog: Dict[int, Dimension] = init_dimensions(engine, scope_id)
        self.variables: Dict[str, Variable] = init_variables(
            engine, scope_id, self.dimension_catalog, duplicates
        )
        try:
            natts = count_attributes(engine, scope_id, NC_GLOBAL)
        except EngineError as e:
            raise CatalogError(f"Could not count attributes of scope {scope_id}: {e.message}") from e
        self.attributes: Dict[str, Attribute] = init_attributes(engine, scope_id, NC_GLOBAL, natts)

        with engine.lock:
            status, child_ids = engine.inq_grps(scope_id)
        if status != NC_NOERR:
            raise CatalogError(f"Could not list child scopes of {scope_id}: {error_message(status)}")
        self.groups: Dict[str, 'Group'] = {}
        for child_id in child_ids:
            child = Group(engine, child_id, duplicates)
            self.groups[child.name] = child

        logger.info(
            f"Group '{self.name}': {len(self.dimension_catalog)} dimensions, "
            f"{len(self.variables)} variables, {len(self.groups)} child groups"
        )

    @property
    def dimensions(self) -> Dict[str, Dimension]:
        """Visible dimensions by name; a scope's own dimension shadows an ancestor's."""
        return {dim.name: dim for dim in self.dimension_catalog.values()}

    def __getitem__(self, name: str) -> Variable:
        return self.variables[name]

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    def __iter__(self) -> Iterator[str]:
        return iter(self.variables)

    def __len__(self) -> int:
        return len(self.variables)

    def __repr__(self) -> str:
        return f"Group({self.name!r}, variables={list(self.variables)})"

    def refresh_variable(self, key: Union[str, int]) -> Variable:
        """
        Re-discover one variable, by name or engine id, and replace its entry.

        Use after creating a variable outside this Group, or to pick up
        attribute changes made through another handle.
        """
        if isinstance(key, str):
            if key not in self.variables:
                raise KeyError(key)
            var_id = self.variables[key].id
        else:
            var_id = key
        var = init_variable(self.engine, self.scope_id, var_id, self.dimension_catalog)
        self.variables[var.name] = var
        return var

    def add_attribute(self, name: str, value: Any) -> Attribute:
        """Write a scope-level attribute and cache it."""
        attr = put_attribute(self.engine, self.scope_id, NC_GLOBAL, name, value)
        self.attributes[name] = attr
        return attr

    def close(self) -> None:
        """Close the underlying engine if it supports closing."""
        close = getattr(self.engine, 'close', None)
        if close is not None:
            close()

    def __enter__(self) -> 'Group':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_group(path: Union[Path, str], mode: str = 'r', file_format: Optional[str] = None) -> Group:
    """
    Open a netCDF file and discover its root group.

    Parameters
    ----------
    path : Path or str
        netCDF file
    mode : str
        'r' (read-only), 'a'/'r+' (read-write) or 'w' (create)
    file_format : str, optional
        Format for newly created files

    Returns
    -------
    Group
        Root group; closing it closes the file

    Examples
    --------
    >>> with open_group('/data/obs.nc', mode='a') as root:
    ...     root['temperature'].add_attribute('units', 'K')
    """
    from ncvar.engine.netcdf import NetCDF4Engine

    engine = NetCDF4Engine(path, mode=mode, file_format=file_format)
    try:
        return Group(engine, engine.root)
    except CatalogError:
        engine.close()
        raise
