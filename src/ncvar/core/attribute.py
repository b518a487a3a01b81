"""
Attribute Cache

Attributes are name-keyed metadata snapshots of engine state. The cache of
a scope or variable is rebuilt wholesale from the engine whenever the
engine, not the caller, decides how many attributes exist.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ncvar.core.kinds import kind_of
from ncvar.engine.base import NC_GLOBAL, StorageEngine
from ncvar.errors import CatalogError, EngineError, check_status

logger = logging.getLogger(__name__)


@dataclass
class Attribute:
    """
    Named metadata attached to a variable or scope.

    Attributes
    ----------
    name : str
        Attribute name
    nc_type : int
        Engine type tag of the value
    var_id : int
        Owning variable id, ``NC_GLOBAL`` for scope attributes
    scope_id : int
        Owning scope id
    value : Any
        Value as read from or written to the engine
    """
    name: str
    nc_type: int
    var_id: int
    scope_id: int
    value: Any = None


def count_attributes(engine: StorageEngine, scope_id: int, var_id: int = NC_GLOBAL) -> int:
    """Query the engine's current attribute count; raises EngineError on failure."""
    with engine.lock:
        status, natts = engine.inq_varnatts(scope_id, var_id)
    check_status(status)
    return natts


def read_attributes(
    engine: StorageEngine,
    scope_id: int,
    var_id: int,
    natts: int
) -> Dict[str, Attribute]:
    """
    Read ``natts`` attributes from the engine into a fresh cache.

    Raises
    ------
    EngineError
        If any engine query fails
    """
    attrs: Dict[str, Attribute] = {}
    for attnum in range(natts):
        with engine.lock:
            status, name = engine.inq_attname(scope_id, var_id, attnum)
        check_status(status)
        with engine.lock:
            status, typed = engine.get_att(scope_id, var_id, name)
        check_status(status)
        nc_type, value = typed
        attrs[name] = Attribute(name=name, nc_type=nc_type, var_id=var_id,
                                scope_id=scope_id, value=value)
    return attrs


def init_attributes(
    engine: StorageEngine,
    scope_id: int,
    var_id: int,
    natts: int
) -> Dict[str, Attribute]:
    """
    Build the attribute cache during discovery.

    Same as ``read_attributes`` but failures are unrecoverable discovery
    errors.
    """
    try:
        return read_attributes(engine, scope_id, var_id, natts)
    except EngineError as e:
        raise CatalogError(
            f"Could not read attributes of variable {var_id} in scope {scope_id}: {e.message}"
        ) from e


def put_attribute(
    engine: StorageEngine,
    scope_id: int,
    var_id: int,
    name: str,
    value: Any
) -> Attribute:
    """
    Write an attribute through to the engine.

    Returns
    -------
    Attribute
        Cache record for the written attribute

    Raises
    ------
    TypeMismatchError
        If ``value`` has no storable element kind
    EngineError
        If the engine rejects the write
    """
    kind = kind_of(value)
    with engine.lock:
        status = engine.put_att(scope_id, var_id, name, int(kind), value)
    check_status(status)
    logger.debug(f"Wrote attribute '{name}' ({kind.name}) on variable {var_id} in scope {scope_id}")
    return Attribute(name=name, nc_type=int(kind), var_id=var_id, scope_id=scope_id, value=value)
