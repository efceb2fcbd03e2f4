"""
Transaction - scoped unit of work against the storage engine.
"""

import logging
import sqlite3

from kvs.engine.bucket import Bucket

logger = logging.getLogger(__name__)


class Transaction:
    """
    A read-only or read-write transaction on an open connection.

    Used as a context manager. A writable transaction commits when the
    block exits normally; every other exit (exception, read-only scope)
    rolls back. Writers take the engine's write lock at begin, so at most
    one read-write transaction is in flight at a time.

    Example:
        with Transaction(conn, writable=True) as tx:
            tx.bucket("kvs").put(b"a", b"1")
    """

    def __init__(
        self, conn: sqlite3.Connection, writable: bool = False, exclusive: bool = False
    ) -> None:
        """
        Initialize a transaction. Nothing happens until it is entered.

        Args:
            conn: Connection in autocommit mode (isolation_level=None).
            writable: True for a read-write transaction.
            exclusive: Take the exclusive file lock at begin instead of on
                       first write. Implies writable.
        """
        self._conn = conn
        self.writable = writable or exclusive
        self.exclusive = exclusive
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def __enter__(self) -> "Transaction":
        if self._active:
            raise RuntimeError("Transaction already started")
        if self.exclusive:
            self._conn.execute("BEGIN EXCLUSIVE")
        elif self.writable:
            self._conn.execute("BEGIN IMMEDIATE")
        else:
            self._conn.execute("BEGIN DEFERRED")
        self._active = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._active:
            return
        self._active = False

        if exc_type is None and self.writable:
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error:
                # A failed COMMIT can leave the transaction open (e.g. SQLITE_BUSY)
                self._rollback()
                raise
            return

        if exc_type is not None and self.writable:
            logger.debug(f"Rolling back write transaction after {exc_type.__name__}: {exc_val}")
        self._rollback()

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def bucket(self, name: str) -> Bucket:
        """
        Return the named bucket bound to this transaction.

        Args:
            name: Bucket name (must already exist).

        Raises:
            RuntimeError: If the transaction is not active.
        """
        if not self._active:
            raise RuntimeError("Transaction is not active")
        return Bucket(self, name)

    def create_bucket_if_not_exists(self, name: str) -> Bucket:
        """
        Create the named bucket if it is missing and return it.

        Args:
            name: Bucket name, already validated as an identifier.
        """
        bucket = self.bucket(name)
        bucket.create()
        return bucket
