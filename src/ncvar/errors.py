"""
Error Types and Engine Status Translation

Every engine primitive returns an integer status. ``check_status`` turns a
non-zero status into an ``EngineError`` using the fixed ``NC_ERRORS`` table.
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)


# =============================================================================
# Engine Status Codes
# =============================================================================

NC_NOERR = 0

NC_EBADID = -33
NC_EINVAL = -36
NC_EPERM = -37
NC_EINDEFINE = -39
NC_EINVALCOORDS = -40
NC_ENAMEINUSE = -42
NC_ENOTATT = -43
NC_EBADTYPE = -45
NC_EBADDIM = -46
NC_ENOTVAR = -49
NC_ECHAR = -56
NC_EEDGE = -57
NC_ERANGE = -60
NC_EHDFERR = -101
NC_EBADGRPID = -116
NC_ELATEFILL = -122

NC_ERRORS: Dict[int, str] = {
    NC_NOERR: "No error",
    NC_EBADID: "NetCDF: Not a valid ID",
    -34: "NetCDF: Too many files open",
    -35: "NetCDF: File exists && NC_NOCLOBBER",
    NC_EINVAL: "NetCDF: Invalid argument",
    NC_EPERM: "NetCDF: Write to read only",
    -38: "NetCDF: Operation not allowed in data mode",
    NC_EINDEFINE: "NetCDF: Operation not allowed in define mode",
    NC_EINVALCOORDS: "NetCDF: Index exceeds dimension bound",
    -41: "NetCDF: NC_MAX_DIMS exceeded",
    NC_ENAMEINUSE: "NetCDF: String match to name in use",
    NC_ENOTATT: "NetCDF: Attribute not found",
    -44: "NetCDF: NC_MAX_ATTRS exceeded",
    NC_EBADTYPE: "NetCDF: Not a valid data type or _FillValue type mismatch",
    NC_EBADDIM: "NetCDF: Invalid dimension ID or name",
    -47: "NetCDF: NC_UNLIMITED in the wrong index",
    -48: "NetCDF: NC_MAX_VARS exceeded",
    NC_ENOTVAR: "NetCDF: Variable not found",
    -50: "NetCDF: Action prohibited on NC_GLOBAL varid",
    -51: "NetCDF: Unknown file format",
    -52: "NetCDF: In Fortran, string too short",
    -53: "NetCDF: NC_MAX_NAME exceeded",
    -54: "NetCDF: NC_UNLIMITED size already in use",
    -55: "NetCDF: nc_rec op when there are no record vars",
    NC_ECHAR: "NetCDF: Attempt to convert between text & numbers",
    NC_EEDGE: "NetCDF: Start+count exceeds dimension bound",
    -58: "NetCDF: Illegal stride",
    -59: "NetCDF: Name contains illegal characters",
    NC_ERANGE: "NetCDF: Numeric conversion not representable",
    -61: "NetCDF: Memory allocation (malloc) failure",
    -62: "NetCDF: One or more variable sizes violate format constraints",
    -63: "NetCDF: Invalid dimension size",
    -64: "NetCDF: File likely truncated or possibly corrupted",
    NC_EHDFERR: "NetCDF: HDF error",
    -102: "NetCDF: Can't read file",
    -103: "NetCDF: Can't write file",
    -104: "NetCDF: Can't create file",
    -105: "NetCDF: Can't add HDF5 file metadata",
    -106: "NetCDF: Can't define dimensional metadata",
    -107: "NetCDF: Can't open HDF5 attribute",
    -108: "NetCDF: Problem with variable metadata.",
    -110: "NetCDF: Attribute already exists.",
    -111: "NetCDF: Attempting netcdf-4 operation on netcdf-3 file",
    -112: "NetCDF: Attempting netcdf-4 operation on strict nc3 netcdf-4 file",
    NC_EBADGRPID: "NetCDF: Bad group ID.",
    -117: "NetCDF: Bad type ID.",
    -118: "NetCDF: Type has already been defined and may not be edited.",
    NC_ELATEFILL: "NetCDF: Attempt to define fill value when data already exists.",
    -123: "NetCDF: Attempt to define var properties, like deflate, after enddef.",
    -125: "NetCDF: No group found.",
}


# =============================================================================
# Exceptions
# =============================================================================

class NcVarError(Exception):
    """Base class for errors raised by variable access operations."""


class ShapeError(NcVarError, ValueError):
    """Index or shape has the wrong cardinality or falls outside the dimensions."""


class CapacityError(NcVarError, ValueError):
    """A caller-supplied buffer is smaller than the operation requires."""


class TypeMismatchError(NcVarError, TypeError):
    """An exact-type accessor was used against a variable of another kind."""


class EngineError(NcVarError):
    """
    The storage engine returned a non-success status.

    Attributes
    ----------
    code : int
        Engine status code
    message : str
        Message from ``NC_ERRORS`` for ``code``
    """

    def __init__(self, code: int, message: str):
        super().__init__(f"{message} (status {code})")
        self.code = code
        self.message = message


class CatalogError(RuntimeError):
    """Discovery of a scope failed; the partially built catalog is unusable."""


# =============================================================================
# Status Translation
# =============================================================================

def error_message(code: int) -> str:
    """
    Look up the message for an engine status code.

    Raises
    ------
    AssertionError
        If the engine produced a code outside ``NC_ERRORS``. Engine bindings
        must only ever return tabled codes.
    """
    try:
        return NC_ERRORS[code]
    except KeyError:
        raise AssertionError(f"Engine returned unknown status code {code}") from None


def check_status(code: int) -> None:
    """Raise ``EngineError`` if ``code`` is not ``NC_NOERR``."""
    if code == NC_NOERR:
        return
    message = error_message(code)
    logger.warning(f"Engine call failed: {message} (status {code})")
    raise EngineError(code, message)
