"""
Dimension Catalog

Discovers the dimensions visible in a scope. Dimensions are copied by value
into every Variable that references them; the id is only used to resolve
references during variable discovery.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from ncvar.engine.base import StorageEngine
from ncvar.errors import CatalogError, NC_NOERR, error_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dimension:
    """A named, fixed-length axis."""
    name: str
    id: int
    length: int

    def __len__(self) -> int:
        return self.length


def init_dimensions(engine: StorageEngine, scope_id: int) -> Dict[int, Dimension]:
    """
    Discover every dimension visible from a scope.

    Parameters
    ----------
    engine : StorageEngine
        Engine the scope belongs to
    scope_id : int
        Scope handle

    Returns
    -------
    dict
        Mapping of dimension id to Dimension, in engine id order

    Raises
    ------
    CatalogError
        If any engine query fails
    """
    with engine.lock:
        status, dimids = engine.inq_dimids(scope_id)
    if status != NC_NOERR:
        raise CatalogError(f"Could not list dimensions of scope {scope_id}: {error_message(status)}")

    dims: Dict[int, Dimension] = {}
    for dimid in dimids:
        with engine.lock:
            status, info = engine.inq_dim(scope_id, dimid)
        if status != NC_NOERR:
            raise CatalogError(f"Could not inquire dimension {dimid}: {error_message(status)}")
        name, length = info
        dims[dimid] = Dimension(name=name, id=dimid, length=int(length))

    logger.debug(f"Scope {scope_id}: discovered {len(dims)} dimensions")
    return dims
