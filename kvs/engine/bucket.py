"""
Bucket - named sorted container inside the backing file.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from kvs.interfaces.sorted_container import SortedContainer
from kvs.models.exceptions import ReadOnlyTransactionError

if TYPE_CHECKING:
    from kvs.engine.transaction import Transaction


class Bucket(SortedContainer):
    """
    A bucket is one engine table keyed by a BLOB primary key.

    The table is created WITHOUT ROWID, so entries are clustered on the
    key and kept in bytewise (memcmp) order by the engine. A Bucket is
    only usable while its transaction is active.
    """

    def __init__(self, tx: "Transaction", name: str) -> None:
        """
        Initialize Bucket.

        Args:
            tx: The transaction this bucket is bound to.
            name: Table name, already validated as an identifier.
        """
        self._tx = tx
        self.name = name
        self._table = f'"{name}"'

    def _execute(self, sql: str, params: tuple = ()):
        if not self._tx.active:
            raise RuntimeError(f"Bucket {self.name!r} used outside of its transaction")
        return self._tx.connection.execute(sql, params)

    def _check_writable(self) -> None:
        if not self._tx.writable:
            raise ReadOnlyTransactionError()

    def create(self) -> None:
        """Create the backing table if it does not exist."""
        self._check_writable()
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {self._table} "
            f"(key BLOB PRIMARY KEY NOT NULL, value BLOB NOT NULL) WITHOUT ROWID"
        )

    def exists(self) -> bool:
        row = self._execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (self.name,)
        ).fetchone()
        return row is not None

    def put(self, key: bytes, value: bytes) -> None:
        self._check_writable()
        self._execute(
            f"INSERT INTO {self._table} (key, value) VALUES (?, ?) "
            f"ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def get(self, key: bytes) -> bytes | None:
        row = self._execute(f"SELECT value FROM {self._table} WHERE key = ?", (key,)).fetchone()
        return None if row is None else bytes(row[0])

    def delete(self, key: bytes) -> bool:
        self._check_writable()
        cursor = self._execute(f"DELETE FROM {self._table} WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def has(self, key: bytes) -> bool:
        row = self._execute(f"SELECT 1 FROM {self._table} WHERE key = ?", (key,)).fetchone()
        return row is not None

    def size(self) -> int:
        return self._execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0]

    def iterator(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, bytes]]:
        clauses = []
        params: list[bytes] = []
        if start is not None:
            clauses.append("key >= ?")
            params.append(start)
        if end is not None:
            clauses.append("key < ?")
            params.append(end)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        cursor = self._execute(
            f"SELECT key, value FROM {self._table}{where} ORDER BY key", tuple(params)
        )
        for key, value in cursor:
            yield bytes(key), bytes(value)

    def prefix_iterator(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """
        Iterate over the entries whose key starts with prefix.

        Args:
            prefix: Key prefix. Empty means the whole bucket.
        """
        if not prefix:
            return self.iterator()
        return self.iterator(prefix, prefix_upper_bound(prefix))

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r}, writable={self._tx.writable})"


def prefix_upper_bound(prefix: bytes) -> bytes | None:
    """
    Smallest key greater than every key starting with prefix.

    Returns None when no such key exists (prefix is all 0xff bytes).
    """
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes([stripped[-1] + 1])
