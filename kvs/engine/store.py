"""
Store - typed key-value facade over the embedded storage engine.
"""

import logging
import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from typing import Any

from kvs.engine.bucket import Bucket
from kvs.engine.transaction import Transaction
from kvs.models.entry import Entry
from kvs.models.exceptions import (
    BadValueError,
    KeyRequiredError,
    KeyTooLargeError,
    LockTimeoutError,
    NotFoundError,
    StorageError,
    StoreClosedError,
    StoreStateError,
)
from kvs.models.options import StoreOptions

logger = logging.getLogger(__name__)

# Maximum encoded key length accepted by put
MAX_KEY_SIZE = 32768

_LOCK_ERROR_CODES = (sqlite3.SQLITE_BUSY, sqlite3.SQLITE_LOCKED)


class StoreState(IntEnum):
    """Lifecycle state of a Store."""

    UNOPENED = 0
    OPEN = 1
    CLOSED = 2


class Store:
    """
    Key-value store backed by a single file.

    Provides:
    - open(): Create or open the backing file and take the exclusive lock
    - put(key, value): Insert or replace a value
    - get(key): Retrieve a value (raises NotFoundError if absent)
    - delete(key): Remove a key (raises NotFoundError if absent)
    - close(): Release the lock and the file handle

    Every data operation runs in exactly one engine transaction:
    read-write for put/delete, read-only for reads. Only one process
    can hold a given file open at a time. A Store may be shared between
    threads; their transactions are applied one after another.
    """

    def __init__(self, path: str | os.PathLike, options: StoreOptions | None = None) -> None:
        """
        Initialize an unopened store.

        Args:
            path: Path to the backing file. Its parent directory must exist.
            options: Open-time configuration (defaults if omitted).
        """
        path = os.fspath(path)
        if not path or not path.strip():
            raise ValueError("path cannot be empty")

        self._path = os.path.abspath(path)
        self._options = options or StoreOptions()
        self._conn: sqlite3.Connection | None = None
        self._state = StoreState.UNOPENED

        # One connection serves every thread; transactions on it run one at a time
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state != StoreState.OPEN

    def open(self) -> "Store":
        """
        Open or create the backing file and make sure the bucket exists.

        Returns:
            This store, now open.

        Raises:
            StoreStateError: If the store was already opened.
            LockTimeoutError: If another holder keeps the file locked
                              past the lock timeout.
            StorageError: On any other engine or filesystem failure.
        """
        with self._lock:
            if self._state != StoreState.UNOPENED:
                raise StoreStateError(
                    f"kvs: store can only be opened once (state: {self._state.name})"
                )

            self._create_file()

            try:
                conn = sqlite3.connect(
                    self._path,
                    timeout=self._options.lock_timeout,
                    isolation_level=None,
                    check_same_thread=False,
                )
            except sqlite3.Error as e:
                raise StorageError(f"kvs: cannot open {self._path}: {e}") from e

            try:
                self._initialize(conn)
            except BaseException:
                conn.close()
                raise

            self._conn = conn
            self._state = StoreState.OPEN
        logger.info(
            f"Opened store {self._path} (bucket={self._options.bucket}, "
            f"codec={self._options.codec.name})"
        )
        return self

    def _create_file(self) -> None:
        """Create the backing file with the configured mode if missing."""
        try:
            fd = os.open(self._path, os.O_RDWR | os.O_CREAT, self._options.file_mode)
        except OSError as e:
            raise StorageError(f"kvs: cannot create {self._path}: {e}") from e
        os.close(fd)

    def _initialize(self, conn: sqlite3.Connection) -> None:
        """Take the exclusive lock and create the bucket."""
        try:
            # Locks taken in exclusive mode are held until the connection closes
            conn.execute("PRAGMA locking_mode=EXCLUSIVE")
            conn.execute(f"PRAGMA synchronous={'OFF' if self._options.no_sync else 'FULL'}")
            with Transaction(conn, exclusive=True) as tx:
                tx.create_bucket_if_not_exists(self._options.bucket)
        except sqlite3.OperationalError as e:
            if _is_lock_error(e):
                logger.warning(
                    f"Timed out after {self._options.lock_timeout_ms}ms "
                    f"waiting for lock on {self._path}"
                )
                raise LockTimeoutError(self._path, self._options.lock_timeout_ms) from e
            raise StorageError(f"kvs: cannot initialize {self._path}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"kvs: cannot initialize {self._path}: {e}") from e

    def close(self) -> None:
        """
        Release the lock and the underlying handle.

        Closing a store that is not open is a no-op.
        """
        with self._lock:
            if self._state != StoreState.OPEN:
                return
            conn, self._conn = self._conn, None
            self._state = StoreState.CLOSED
        try:
            conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"kvs: error closing {self._path}: {e}") from e
        logger.info(f"Closed store {self._path}")

    def _require_open(self) -> sqlite3.Connection:
        if self._state != StoreState.OPEN or self._conn is None:
            raise StoreClosedError(self._state.name)
        return self._conn

    @contextmanager
    def _transaction(self, writable: bool = False) -> Iterator[Bucket]:
        """Run the block in one transaction and hand it the store's bucket."""
        with self._lock:
            conn = self._require_open()
            try:
                with Transaction(conn, writable=writable) as tx:
                    yield tx.bucket(self._options.bucket)
            except sqlite3.Error as e:
                raise StorageError(f"kvs: storage failure on {self._path}: {e}") from e

    def put(self, key: str, value: Any) -> None:
        """
        Insert or replace the value stored under key.

        Args:
            key: Non-empty string key.
            value: Any value the codec can encode. None is rejected.

        Raises:
            BadValueError: If value is None.
            KeyRequiredError: If key is empty.
            KeyTooLargeError: If the encoded key exceeds MAX_KEY_SIZE.
            StorageError: If the write cannot be committed.
        """
        if value is None:
            raise BadValueError(key)
        raw_key = _encode_key(key)
        if not raw_key:
            raise KeyRequiredError()
        if len(raw_key) > MAX_KEY_SIZE:
            raise KeyTooLargeError(len(raw_key), MAX_KEY_SIZE)

        self._require_open()
        data = self._options.codec.encode(value)

        with self._transaction(writable=True) as bucket:
            bucket.put(raw_key, data)
        logger.debug(f"put {key!r} ({len(data)} bytes)")

    def get(self, key: str, decode: bool = True) -> Any:
        """
        Retrieve the value stored under key.

        Args:
            key: The key to look up.
            decode: If False, only check that the key exists and return None.

        Returns:
            The decoded value, or None when decode is False.

        Raises:
            NotFoundError: If the key has no entry.
        """
        raw_key = _encode_key(key)
        with self._transaction() as bucket:
            data = bucket.get(raw_key)

        if data is None:
            raise NotFoundError(key)
        if not decode:
            return None
        return self._options.codec.decode(data)

    def delete(self, key: str) -> None:
        """
        Remove the entry for key.

        Raises:
            NotFoundError: If the key has no entry.
        """
        raw_key = _encode_key(key)
        with self._transaction(writable=True) as bucket:
            if not bucket.delete(raw_key):
                raise NotFoundError(key)
        logger.debug(f"delete {key!r}")

    def contains(self, key: str) -> bool:
        raw_key = _encode_key(key)
        with self._transaction() as bucket:
            return bucket.has(raw_key)

    def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with prefix, in sorted order."""
        with self._transaction() as bucket:
            return [
                k.decode("utf-8") for k, _ in bucket.prefix_iterator(_encode_key(prefix))
            ]

    def items(self, prefix: str = "") -> list[Entry]:
        """Return all entries whose key starts with prefix, in sorted order."""
        with self._transaction() as bucket:
            rows = list(bucket.prefix_iterator(_encode_key(prefix)))

        codec = self._options.codec
        return [Entry(k.decode("utf-8"), codec.decode(v)) for k, v in rows]

    def count(self) -> int:
        with self._transaction() as bucket:
            return bucket.size()

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        return self.count()

    def __enter__(self) -> "Store":
        if self._state == StoreState.UNOPENED:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Store(path={self._path!r}, state={self._state.name})"


def open_store(
    path: str | os.PathLike,
    lock_timeout_ms: int = StoreOptions.DEFAULT_LOCK_TIMEOUT_MS,
    **options: Any,
) -> Store:
    """
    Open a store, creating the backing file if it doesn't exist.

    Args:
        path: Full path to the backing file; leading directories must exist.
        lock_timeout_ms: How long to wait for the exclusive file lock.
        **options: Remaining StoreOptions fields (bucket, file_mode, no_sync, codec).

    Returns:
        An open Store.
    """
    return Store(path, StoreOptions(lock_timeout_ms=lock_timeout_ms, **options)).open()


def _encode_key(key: str) -> bytes:
    if not isinstance(key, str):
        raise TypeError(f"key must be str, got {type(key).__name__}")
    return key.encode("utf-8")


def _is_lock_error(exc: sqlite3.OperationalError) -> bool:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        # Extended codes carry the primary code in the low byte
        return (code & 0xFF) in _LOCK_ERROR_CODES
    return "locked" in str(exc)
