"""Cache implementations package."""

from cosmoscan.cache.memory import MemoryCacheBackend
from cosmoscan.cache.redis import RedisCacheBackend
from cosmoscan.cache.swr import ReadCache

__all__ = [
    "MemoryCacheBackend",
    "ReadCache",
    "RedisCacheBackend",
]
