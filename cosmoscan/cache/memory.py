"""In-memory cache backend implementation."""

import asyncio
import copy
import logging
from typing import Any

from cosmoscan.constants import CACHE_NAMESPACE
from cosmoscan.core.cache import CacheBackend

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheBackend):
    """Session-scoped in-memory store. Entries live until removed or cleared."""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        """Retrieve a value from memory."""
        async with self._lock:
            value = self._store.get(key)
            return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> bool:
        """Store a value in memory."""
        async with self._lock:
            self._store[key] = copy.deepcopy(value)
            return True

    async def delete(self, key: str) -> bool:
        """Delete a key from memory."""
        async with self._lock:
            if key in self._store:
                del self._store[key]
                return True
            return False

    async def exists(self, key: str) -> bool:
        """Check if a key exists in memory."""
        async with self._lock:
            return key in self._store

    async def keys(self, prefix: str) -> list[str]:
        """List keys starting with prefix."""
        async with self._lock:
            return [k for k in self._store if k.startswith(prefix)]

    async def clear(self) -> bool:
        """Clear all cosmoscan keys from memory."""
        async with self._lock:
            keys_to_delete = [
                k for k in self._store if k.startswith(f"{CACHE_NAMESPACE}:")
            ]
            for key in keys_to_delete:
                del self._store[key]
            logger.debug(f"[MemoryCache] Cleared {len(keys_to_delete)} keys")
            return True

    async def close(self) -> None:
        """Clear the in-memory store."""
        async with self._lock:
            self._store.clear()

    async def ping(self) -> bool:
        """Memory cache is always available."""
        return True

    def __len__(self) -> int:
        return len(self._store)
