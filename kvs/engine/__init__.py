"""
Store facade, transactions and buckets over the storage engine.
"""

from kvs.engine.async_store import AsyncStore
from kvs.engine.bucket import Bucket
from kvs.engine.store import Store, StoreState, open_store
from kvs.engine.transaction import Transaction

__all__ = ["AsyncStore", "Bucket", "Store", "StoreState", "Transaction", "open_store"]
