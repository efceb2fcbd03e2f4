"""
Codec abstract base class for value serialization.
"""

from abc import ABC, abstractmethod
from typing import Any


class Codec(ABC):
    """
    Abstract base class for turning values into bytes and back.

    The store never inspects encoded bytes; whatever a codec produces is
    written as-is and handed back to the same codec on read. Codec errors
    are not caught by the store.

    Implementations:
    - PickleCodec: any picklable Python object (default)
    - JSONCodec: JSON-compatible values only
    """

    # Short identifier used in logs and repr
    name: str = ""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """
        Serialize a value.

        Args:
            value: The value to serialize. Never None.

        Returns:
            The encoded bytes.
        """
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """
        Deserialize bytes produced by encode.

        Args:
            data: The stored bytes.

        Returns:
            The decoded value.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
