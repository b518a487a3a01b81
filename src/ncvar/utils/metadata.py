"""
Metadata Formatting Utilities

Functions for rendering a discovered group as a text header, in the style
of ``ncdump -h``.
"""

from typing import Any, List

import numpy as np

from ncvar.core.group import Group
from ncvar.core.kinds import ElementKind
from ncvar.core.variable import Variable
from ncvar.engine.base import NC_STRING

TYPE_NAMES = {
    ElementKind.BYTE: "byte",
    ElementKind.CHAR: "char",
    ElementKind.SHORT: "short",
    ElementKind.INT: "int",
    ElementKind.FLOAT: "float",
    ElementKind.DOUBLE: "double",
    ElementKind.UBYTE: "ubyte",
    ElementKind.USHORT: "ushort",
    ElementKind.UINT: "uint",
    ElementKind.INT64: "int64",
    ElementKind.UINT64: "uint64",
}


def type_name(nc_type: int) -> str:
    """CDL name of an engine type tag; unknown tags render as ``type<N>``."""
    try:
        return TYPE_NAMES[ElementKind(nc_type)]
    except ValueError:
        return "string" if nc_type == NC_STRING else f"type{nc_type}"


SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_nbytes(nbytes: float) -> str:
    """Byte count scaled by 1024 to the largest unit below 1024, capped at PB."""
    step = 0
    while nbytes >= 1024 and step < len(SIZE_UNITS) - 1:
        nbytes /= 1024
        step += 1
    return f"{nbytes:.1f} {SIZE_UNITS[step]}"


def format_value(value: Any) -> str:
    """Render an attribute value as CDL."""
    if isinstance(value, bytes):
        value = value.decode(errors='replace')
    if isinstance(value, str):
        return '"' + value.replace('"', '\\"') + '"'
    values = np.atleast_1d(np.asarray(value))
    return ", ".join(str(v) for v in values.tolist())


def _attribute_lines(attrs: dict, prefix: str, indent: str) -> List[str]:
    lines = []
    for attr in attrs.values():
        lines.append(f"{indent}{prefix}:{attr.name} = {format_value(attr.value)} ;")
    return lines


def variable_size(var: Variable) -> str:
    """
    Rendered in-memory size of a full read of ``var``.

    Non-numeric variables have no element kind and report ``0.0 B``.
    """
    try:
        nbytes = len(var) * var.kind.dtype.itemsize
    except TypeError:
        nbytes = 0
    return format_nbytes(nbytes)


def format_header(group: Group, indent: str = "") -> str:
    """
    Build a CDL-like header describing a group.

    Parameters
    ----------
    group : Group
        Discovered group
    indent : str
        Prefix for every line (used for nested groups)

    Returns
    -------
    str
        Multi-line header with dimensions, variables, attributes and
        nested groups

    Examples
    --------
    >>> print(format_header(root))
    group: / {
    dimensions:
        y = 2 ;
        x = 3 ;
    variables:
        double temp(y, x) ;  // 48.0 B
    ...
    """
    inner = indent + "    "
    lines = [f"{indent}group: {group.name} {{"]

    visible_dims = group.dimensions
    if visible_dims:
        lines.append(f"{indent}dimensions:")
        for dim in visible_dims.values():
            lines.append(f"{inner}{dim.name} = {dim.length} ;")

    if group.variables:
        lines.append(f"{indent}variables:")
        for var in group.variables.values():
            dims = ", ".join(dim.name for dim in var.dimensions)
            size = variable_size(var)
            lines.append(f"{inner}{type_name(var.nc_type)} {var.name}({dims}) ;  // {size}")
            lines.extend(_attribute_lines(var.attributes, var.name, inner + "    "))

    if group.attributes:
        lines.append(f"{indent}// group attributes:")
        lines.extend(_attribute_lines(group.attributes, "", inner))

    for child in group.groups.values():
        lines.append(format_header(child, inner))

    lines.append(f"{indent}}}")
    return "\n".join(lines)
