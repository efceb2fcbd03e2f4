"""
Data models for the key-value store.
"""

from kvs.models.codecs import JSONCodec, PickleCodec
from kvs.models.entry import Entry
from kvs.models.options import StoreOptions

__all__ = [
    "Entry",
    "JSONCodec",
    "PickleCodec",
    "StoreOptions",
]
