"""
Tests for Transaction and Bucket.
"""

import sqlite3

import pytest

from kvs.engine.bucket import prefix_upper_bound
from kvs.engine.transaction import Transaction
from kvs.interfaces.sorted_container import SortedContainer
from kvs.models.exceptions import ReadOnlyTransactionError


@pytest.fixture
def conn(db_path):
    """Provide an autocommit connection with one bucket created."""
    connection = sqlite3.connect(db_path, isolation_level=None)
    with Transaction(connection, writable=True) as tx:
        tx.create_bucket_if_not_exists("items")
    yield connection
    connection.close()


class TestTransaction:
    """Tests for commit and rollback behaviour."""

    def test_commit_on_success(self, conn):
        """Test that a clean exit commits."""
        with Transaction(conn, writable=True) as tx:
            tx.bucket("items").put(b"k", b"v")

        assert not conn.in_transaction
        with Transaction(conn) as tx:
            assert tx.bucket("items").get(b"k") == b"v"

    def test_rollback_on_error(self, conn):
        """Test that an exception discards every write in the scope."""
        with pytest.raises(RuntimeError):
            with Transaction(conn, writable=True) as tx:
                bucket = tx.bucket("items")
                bucket.put(b"a", b"1")
                bucket.put(b"b", b"2")
                raise RuntimeError("boom")

        assert not conn.in_transaction
        with Transaction(conn) as tx:
            assert tx.bucket("items").size() == 0

    def test_read_only_rejects_writes(self, conn):
        """Test that a read-only transaction can't modify a bucket."""
        with Transaction(conn) as tx:
            bucket = tx.bucket("items")
            with pytest.raises(ReadOnlyTransactionError):
                bucket.put(b"k", b"v")
            with pytest.raises(ReadOnlyTransactionError):
                bucket.delete(b"k")
            with pytest.raises(ReadOnlyTransactionError):
                tx.create_bucket_if_not_exists("other")

        assert not conn.in_transaction

    def test_exclusive_implies_writable(self, conn):
        """Test exclusive transactions."""
        with Transaction(conn, exclusive=True) as tx:
            assert tx.writable
            tx.bucket("items").put(b"k", b"v")

        with Transaction(conn) as tx:
            assert tx.bucket("items").has(b"k")

    def test_bucket_outside_transaction(self, conn):
        """Test that buckets can't outlive their transaction."""
        tx = Transaction(conn, writable=True)
        with pytest.raises(RuntimeError):
            tx.bucket("items")

        with tx:
            bucket = tx.bucket("items")
        with pytest.raises(RuntimeError):
            bucket.get(b"k")

    def test_reenter(self, conn):
        """Test that a transaction can't be started twice at once."""
        with Transaction(conn) as tx:
            with pytest.raises(RuntimeError):
                tx.__enter__()

    def test_create_bucket(self, conn):
        """Test bucket creation is idempotent."""
        with Transaction(conn, writable=True) as tx:
            assert not tx.bucket("fresh").exists()
            tx.create_bucket_if_not_exists("fresh")
            tx.create_bucket_if_not_exists("fresh")
            assert tx.bucket("fresh").exists()


class TestBucket:
    """Tests for the bucket container operations."""

    def test_is_sorted_container(self, conn):
        with Transaction(conn) as tx:
            assert isinstance(tx.bucket("items"), SortedContainer)

    def test_put_get_delete(self, conn):
        """Test basic container operations."""
        with Transaction(conn, writable=True) as tx:
            bucket = tx.bucket("items")
            bucket.put(b"k", b"v1")
            bucket.put(b"k", b"v2")

            assert bucket.get(b"k") == b"v2"
            assert bucket.size() == 1
            assert bucket.delete(b"k") is True
            assert bucket.delete(b"k") is False
            assert bucket.get(b"k") is None
            assert not bucket.has(b"k")

    def test_exact_match_only(self, conn):
        """Test that lookups never fall through to a neighbouring key."""
        with Transaction(conn, writable=True) as tx:
            bucket = tx.bucket("items")
            bucket.put(b"abc", b"1")

            assert bucket.get(b"ab") is None
            assert bucket.get(b"abcd") is None
            assert bucket.delete(b"ab") is False
            assert bucket.get(b"abc") == b"1"

    def test_iterator_range(self, conn):
        """Test range iteration with inclusive start and exclusive end."""
        with Transaction(conn, writable=True) as tx:
            bucket = tx.bucket("items")
            for i in range(10):
                bucket.put(f"key{i:02d}".encode(), f"value{i}".encode())

            result = list(bucket.iterator(b"key03", b"key07"))
            assert [k for k, _ in result] == [b"key03", b"key04", b"key05", b"key06"]
            assert [v for _, v in result] == [b"value3", b"value4", b"value5", b"value6"]

            assert len(list(bucket)) == 10
            assert len(list(bucket.iterator(start=b"key08"))) == 2
            assert len(list(bucket.iterator(end=b"key02"))) == 2

    def test_prefix_iterator(self, conn):
        """Test prefix iteration, including 0xff edge bytes."""
        with Transaction(conn, writable=True) as tx:
            bucket = tx.bucket("items")
            for key in [b"a", b"a\xff", b"a\xff\x01", b"b", b"\xff\xff"]:
                bucket.put(key, b"")

            assert [k for k, _ in bucket.prefix_iterator(b"a")] == [b"a", b"a\xff", b"a\xff\x01"]
            assert [k for k, _ in bucket.prefix_iterator(b"a\xff")] == [b"a\xff", b"a\xff\x01"]
            assert [k for k, _ in bucket.prefix_iterator(b"\xff")] == [b"\xff\xff"]
            assert len(list(bucket.prefix_iterator(b""))) == 5

    def test_bucket_name_is_quoted(self, conn):
        """Test that bucket names which are SQL keywords work."""
        with Transaction(conn, writable=True) as tx:
            bucket = tx.create_bucket_if_not_exists("select")
            bucket.put(b"k", b"v")
            assert bucket.get(b"k") == b"v"

    def test_repr(self, conn):
        with Transaction(conn) as tx:
            assert repr(tx.bucket("items")) == "Bucket(name='items', writable=False)"


class TestPrefixUpperBound:
    """Tests for the prefix scan bound."""

    def test_simple(self):
        assert prefix_upper_bound(b"a") == b"b"
        assert prefix_upper_bound(b"ab") == b"ac"

    def test_trailing_ff(self):
        assert prefix_upper_bound(b"a\xff") == b"b"
        assert prefix_upper_bound(b"a\xff\xff") == b"b"

    def test_all_ff(self):
        assert prefix_upper_bound(b"\xff") is None
        assert prefix_upper_bound(b"\xff\xff") is None
