"""
StoreOptions - open-time configuration for a Store.
"""

import re
from dataclasses import dataclass, field

from kvs.interfaces.codec import Codec
from kvs.models.codecs import PickleCodec

# Bucket names become SQL identifiers, so keep them to a safe alphabet
_BUCKET_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class StoreOptions:
    """
    Configuration applied when a Store is opened.

    Attributes:
        lock_timeout_ms: How long open waits for the exclusive file lock.
                         0 = fail immediately if the file is held.
        bucket: Name of the container holding the entries.
        file_mode: Permission bits used when the backing file is created.
        no_sync: Skip fsync on commit. Faster, but a crash may lose
                 recent commits.
        codec: Value serializer.
    """

    DEFAULT_LOCK_TIMEOUT_MS = 50
    MAX_LOCK_TIMEOUT_MS = 600_000
    DEFAULT_BUCKET = "kvs"
    DEFAULT_FILE_MODE = 0o640

    lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS
    bucket: str = DEFAULT_BUCKET
    file_mode: int = DEFAULT_FILE_MODE
    no_sync: bool = False
    codec: Codec = field(default_factory=PickleCodec)

    def __post_init__(self) -> None:
        if self.lock_timeout_ms < 0:
            raise ValueError(f"lock_timeout_ms must be >= 0, got {self.lock_timeout_ms}")
        if self.lock_timeout_ms > self.MAX_LOCK_TIMEOUT_MS:
            raise ValueError(
                f"lock_timeout_ms cannot exceed {self.MAX_LOCK_TIMEOUT_MS}ms, "
                f"got {self.lock_timeout_ms}"
            )

        if not _BUCKET_NAME_RE.fullmatch(self.bucket):
            raise ValueError(
                f"bucket must be letters, digits or underscores and not start "
                f"with a digit, got {self.bucket!r}"
            )
        if self.bucket.lower().startswith("sqlite_"):
            raise ValueError(f"bucket name is reserved: {self.bucket!r}")

        if not 0 <= self.file_mode <= 0o777:
            raise ValueError(f"file_mode must be between 0 and 0o777, got {oct(self.file_mode)}")

        if not isinstance(self.codec, Codec):
            raise TypeError(f"codec must be a Codec, got {type(self.codec).__name__}")

    @property
    def lock_timeout(self) -> float:
        """Lock timeout in seconds, as the engine expects it."""
        return self.lock_timeout_ms / 1000
