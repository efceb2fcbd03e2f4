"""
AsyncStore - asyncio adapter around Store.
"""

import asyncio
import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from kvs.engine.store import Store, StoreState
from kvs.models.entry import Entry
from kvs.models.options import StoreOptions

logger = logging.getLogger(__name__)


class AsyncStore:
    """
    Async wrapper that runs every Store call on one dedicated worker thread.

    Calls issued concurrently from many tasks are executed one at a time
    in submission order. Calls on a store that is not open fail at once
    without starting the worker.

    Usage:
        async with await AsyncStore.create("data.db") as store:
            await store.put("a", 1)
    """

    def __init__(self, path: str | os.PathLike, options: StoreOptions | None = None) -> None:
        """
        Initialize an unopened async store.

        Args:
            path: Path to the backing file.
            options: Open-time configuration (defaults if omitted).
        """
        self._store = Store(path, options)
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    async def create(
        cls,
        path: str | os.PathLike,
        options: StoreOptions | None = None,
    ) -> "AsyncStore":
        """
        Async factory method to create and open a store.

        Returns:
            An open AsyncStore.
        """
        store = cls(path, options)
        await store.open()
        return store

    @property
    def store(self) -> Store:
        return self._store

    @property
    def closed(self) -> bool:
        return self._store.closed

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kvs")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(func, *args, **kwargs)
        )

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if self._store.state != StoreState.OPEN:
            # Rejected before the engine is touched; no worker thread needed
            return func(*args, **kwargs)
        return await self._run(func, *args, **kwargs)

    async def open(self) -> "AsyncStore":
        try:
            await self._run(self._store.open)
        except BaseException:
            self._shutdown_executor()
            raise
        return self

    async def put(self, key: str, value: Any) -> None:
        await self._call(self._store.put, key, value)

    async def get(self, key: str, decode: bool = True) -> Any:
        return await self._call(self._store.get, key, decode=decode)

    async def delete(self, key: str) -> None:
        await self._call(self._store.delete, key)

    async def contains(self, key: str) -> bool:
        return await self._call(self._store.contains, key)

    async def keys(self, prefix: str = "") -> list[str]:
        return await self._call(self._store.keys, prefix)

    async def items(self, prefix: str = "") -> list[Entry]:
        return await self._call(self._store.items, prefix)

    async def count(self) -> int:
        return await self._call(self._store.count)

    async def close(self) -> None:
        """Close the store and stop the worker thread."""
        if self._executor is None:
            return
        try:
            await self._run(self._store.close)
        finally:
            self._shutdown_executor()

    def _shutdown_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            logger.debug(f"Stopped worker thread for {self._store.path}")

    async def __aenter__(self) -> "AsyncStore":
        if self._store.state == StoreState.UNOPENED:
            await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"AsyncStore({self._store!r})"
