from .base import ResultCache
from .memory import InMemoryResultCache
from .redis_cache import RedisResultCache
from .singleflight import SingleFlight

__all__ = [
    "ResultCache",
    "InMemoryResultCache",
    "RedisResultCache",
    "SingleFlight",
]
