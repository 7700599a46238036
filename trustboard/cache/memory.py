"""In-process result cache."""

import time
from typing import Callable, Optional

from .base import ResultCache


class InMemoryResultCache(ResultCache):
    """
    Unbounded key -> (payload, expires_at) map with lazy expiry.

    Expired entries are evicted when read. ``clock`` must be monotonic.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return payload

    async def set(self, key: str, payload: str, ttl: float) -> None:
        self._entries[key] = (payload, self._clock() + ttl)

    def __len__(self) -> int:
        return len(self._entries)
