"""
Abstract base classes for the key-value store.
"""

from kvs.interfaces.codec import Codec
from kvs.interfaces.sorted_container import SortedContainer

__all__ = ["Codec", "SortedContainer"]
