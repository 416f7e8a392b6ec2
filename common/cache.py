"""TTL cache helpers for short-lived values such as form feedback messages."""
from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class SimpleTTLCache(Generic[T]):
    """Setting a key again replaces both its value and its expiry."""

    def __init__(self, ttl: float, maxsize: int = 256, timer: Callable[[], float] = time.monotonic) -> None:
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def get(self, key: str) -> Optional[T]:
        return self._cache.get(key)

    def set(self, key: str, value: T) -> None:
        self._cache[key] = value

    def pop(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()
