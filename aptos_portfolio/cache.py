"""TTL cache for price batches, backed by ``cachetools.TTLCache``."""
from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar

from cachetools import TTLCache

V = TypeVar("V")


class PriceCache(Generic[V]):
    """Key → value store whose entries expire ``ttl`` seconds after insertion.

    Writes overwrite and restart the entry's clock. At most ``maxsize``
    entries are held; expired entries are evicted on every write, and the
    least recently used entry makes room when the cache is full.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        maxsize: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=clock)

    @property
    def maxsize(self) -> int:
        return int(self._entries.maxsize)

    def get(self, key: str) -> V | None:
        return self._entries.get(key)

    def set(self, key: str, value: V) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
