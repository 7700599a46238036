"""Abstract base class for result caches."""

from abc import ABC, abstractmethod
from typing import Optional


class ResultCache(ABC):
    """
    Short-TTL store for serialized leaderboard payloads.

    Expiry is time-based only; a read past expiry is a miss.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached payload, or None on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, payload: str, ttl: float) -> None:
        """Store a payload that expires ``ttl`` seconds from now."""
        pass

    async def close(self) -> None:
        pass
