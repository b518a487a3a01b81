"""Shared fixtures: a small in-memory container."""

import numpy as np
import pytest

from ncvar.core.group import Group
from ncvar.core.kinds import ElementKind
from ncvar.engine.base import NC_GLOBAL
from ncvar.engine.memory import MemoryEngine


@pytest.fixture
def engine():
    """
    Root scope with dimensions y(2), x(3) and variables:

    - temp(y, x) double, values 0..5, attributes long_name and valid_max
    - counts(x) short, values 10, 20, 30
    - blank(y, x) int, never written, attributes units and long_name
    - code(x) char, never written
    """
    engine = MemoryEngine()
    root = MemoryEngine.ROOT
    y = engine.def_dim(root, 'y', 2)
    x = engine.def_dim(root, 'x', 3)

    temp = engine.def_var(root, 'temp', ElementKind.DOUBLE, [y, x])
    engine.put_vara(root, temp, [0, 0], [2, 3], np.arange(6, dtype=np.float64))
    engine.put_att(root, temp, 'long_name', ElementKind.CHAR, 'temperature')
    engine.put_att(root, temp, 'valid_max', ElementKind.DOUBLE, 100.0)

    counts = engine.def_var(root, 'counts', ElementKind.SHORT, [x])
    engine.put_vara(root, counts, [0], [3], np.array([10, 20, 30], dtype=np.int16))

    blank = engine.def_var(root, 'blank', ElementKind.INT, [y, x])
    engine.put_att(root, blank, 'units', ElementKind.CHAR, 'm')
    engine.put_att(root, blank, 'long_name', ElementKind.CHAR, 'blank field')

    engine.def_var(root, 'code', ElementKind.CHAR, [x])

    engine.put_att(root, NC_GLOBAL, 'title', ElementKind.CHAR, 'test container')
    return engine


@pytest.fixture
def group(engine):
    """Discovered root group of the engine fixture"""
    return Group(engine, MemoryEngine.ROOT)


@pytest.fixture
def temp(group):
    return group['temp']
