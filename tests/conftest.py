"""Shared fixtures for the malla test suite."""

import pytest

from malla.dsl import catalog, ramo
from malla.engine import PrerequisiteEngine
from malla.store import GraphStateStore, MemoryKeyValueStore
from malla.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def quiet_console():
    """Fresh non-debug console per test."""
    set_console(Console(debug=False))


@pytest.fixture
def abc_catalog():
    """A: [], B: [A], C: [A, B]."""
    return catalog(
        ramo("A", label="Course A"),
        ramo("B", "A", label="Course B"),
        ramo("C", "A", "B", label="Course C"),
    )


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return GraphStateStore(kv)


@pytest.fixture
def engine(abc_catalog, store):
    return PrerequisiteEngine(abc_catalog, store)
