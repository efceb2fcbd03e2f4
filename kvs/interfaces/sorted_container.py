"""
SortedContainer abstract base class for sorted byte-keyed containers.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator


class SortedContainer(ABC):
    """
    Abstract base class for sorted key-value containers.

    Keys and values are raw bytes; keys are ordered bytewise.

    Implementations:
    - Bucket: a named table inside the backing file, bound to a transaction
    """

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """
        Insert or replace the value for a key.

        Args:
            key: The key to insert/update.
            value: The value to associate with the key.
        """
        pass

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """
        Retrieve the value stored under exactly this key.

        Args:
            key: The key to look up.

        Returns:
            The value if found, None otherwise.
        """
        pass

    @abstractmethod
    def delete(self, key: bytes) -> bool:
        """
        Remove a key-value pair.

        Args:
            key: The key to remove.

        Returns:
            True if the key was found and removed, False otherwise.
        """
        pass

    @abstractmethod
    def has(self, key: bytes) -> bool:
        """Check if a key exists."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Return the number of key-value pairs."""
        pass

    @abstractmethod
    def iterator(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, bytes]]:
        """
        Return an iterator over key-value pairs in the specified range.

        Args:
            start: Start key (inclusive). If None, starts from the beginning.
            end: End key (exclusive). If None, iterates to the end.

        Returns:
            Iterator yielding (key, value) tuples in sorted order.
        """
        pass

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        return self.iterator()
