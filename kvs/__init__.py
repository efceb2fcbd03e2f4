"""
Typed key-value store over an embedded transactional engine.

This package provides a small persistent store with:
- open(path, lock_timeout_ms) - Open or create a store (one process at a time)
- put(key, value) - Insert or replace a value
- get(key) - Retrieve a value, NotFoundError if absent
- delete(key) - Remove a key, NotFoundError if absent
- close() - Release the file lock
"""

from kvs.engine.async_store import AsyncStore
from kvs.engine.store import MAX_KEY_SIZE, Store, StoreState, open_store
from kvs.models.codecs import JSONCodec, PickleCodec
from kvs.models.entry import Entry
from kvs.models.exceptions import (
    BadValueError,
    KeyRequiredError,
    KeyTooLargeError,
    KVSError,
    LockTimeoutError,
    NotFoundError,
    ReadOnlyTransactionError,
    StorageError,
    StoreClosedError,
    StoreStateError,
)
from kvs.models.options import StoreOptions

open = open_store

__all__ = [
    "AsyncStore",
    "BadValueError",
    "Entry",
    "JSONCodec",
    "KVSError",
    "KeyRequiredError",
    "KeyTooLargeError",
    "LockTimeoutError",
    "MAX_KEY_SIZE",
    "NotFoundError",
    "PickleCodec",
    "ReadOnlyTransactionError",
    "StorageError",
    "Store",
    "StoreClosedError",
    "StoreOptions",
    "StoreState",
    "StoreStateError",
    "open",
    "open_store",
]
