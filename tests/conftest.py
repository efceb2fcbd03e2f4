"""
Shared pytest fixtures for store tests.
"""

import os
import tempfile

import pytest
import pytest_asyncio

from kvs.engine.async_store import AsyncStore
from kvs.engine.store import Store


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    """Provide a path for the backing file."""
    return os.path.join(temp_dir, "test.db")


@pytest.fixture
def store(db_path):
    """Provide an open Store instance."""
    with Store(db_path) as s:
        yield s


@pytest_asyncio.fixture
async def async_store(db_path):
    """Provide an open AsyncStore instance."""
    async with await AsyncStore.create(db_path) as s:
        yield s


@pytest.fixture
def sample_values():
    """Provide a spread of values of different types."""
    return {
        "string": "hello",
        "empty_string": "",
        "int": 42,
        "float": 3.5,
        "bool": False,
        "list": [1, "two", 3.0],
        "dict": {"nested": {"a": [1, 2]}, "b": None},
        "bytes": b"\x00\xff\x10",
        "tuple": (1, 2),
    }
