"""
Custom exceptions for the key-value store.
"""


class KVSError(Exception):
    """Base class for every error raised by the store itself."""


class NotFoundError(KVSError, LookupError):
    """
    Raised by get and delete when the key has no entry in the bucket.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"kvs: key not found: {key!r}")


class BadValueError(KVSError, ValueError):
    """
    Raised by put when the value is None.

    Checked before the value is encoded or the engine is touched,
    so any previous value for the key is left as it was.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"kvs: bad value for key {key!r}: None is not storable")


class KeyRequiredError(KVSError, ValueError):
    """Raised by put when the key is empty."""

    def __init__(self):
        super().__init__("kvs: key required")


class KeyTooLargeError(KVSError, ValueError):
    """Raised by put when the encoded key exceeds the maximum key size."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"kvs: key too large: {size} bytes (maximum {limit})")


class StorageError(KVSError):
    """
    Raised when the storage engine fails (disk, permissions, corruption).

    The engine's own exception is kept on ``__cause__``.
    """


class LockTimeoutError(StorageError):
    """
    Raised when the exclusive lock on the backing file cannot be acquired
    within the configured timeout.
    """

    def __init__(self, path: str, timeout_ms: int):
        self.path = path
        self.timeout_ms = timeout_ms
        super().__init__(
            f"kvs: timed out after {timeout_ms}ms waiting for exclusive lock on {path}"
        )


class StoreClosedError(KVSError):
    """Raised when a data operation is attempted on a store that is not open."""

    def __init__(self, state: str):
        self.state = state
        super().__init__(f"kvs: store is not open (state: {state})")


class StoreStateError(KVSError):
    """Raised when open is called on a store that was already opened."""


class ReadOnlyTransactionError(KVSError):
    """Raised when a write is attempted inside a read-only transaction."""

    def __init__(self):
        super().__init__("kvs: transaction is read-only")
