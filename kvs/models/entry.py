"""
Entry - a decoded key-value pair read back from a bucket.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Entry:
    """
    A single entry of a bucket.

    Attributes:
        key: The key as the caller stored it.
        value: The decoded value.
    """

    key: str
    value: Any

    def __iter__(self):
        # Allows `for key, value in store.items()`
        yield self.key
        yield self.value
