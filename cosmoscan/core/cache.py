"""Abstract storage backend interface for the read cache."""

from abc import ABC, abstractmethod
from typing import Any

from cosmoscan.constants import CACHE_NAMESPACE


class CacheBackend(ABC):
    """Abstract base class for cache storage backends.

    Backends hold JSON-compatible values with no expiry of their own;
    staleness is decided by the read cache from each entry's fetch time.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the store.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored value if found, None otherwise.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """
        Store a value, replacing any previous value under the same key.

        Args:
            key: The cache key.
            value: The value to store.

        Returns:
            True if the value was stored successfully.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a value from the store.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key was deleted, False if it didn't exist.
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in the store."""
        ...

    @abstractmethod
    async def keys(self, prefix: str) -> list[str]:
        """
        List stored keys starting with a prefix.

        Args:
            prefix: Key prefix to match.

        Returns:
            Matching keys in no particular order.
        """
        ...

    @abstractmethod
    async def clear(self) -> bool:
        """
        Remove every cosmoscan key from the store.

        Returns:
            True if the store was cleared successfully.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the backend connection."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check if the backend is healthy."""
        ...

    def _make_key(self, namespace: str, *parts: str) -> str:
        """
        Create a namespaced cache key.

        Args:
            namespace: The key namespace.
            parts: Additional key parts.

        Returns:
            A formatted cache key.
        """
        return f"{CACHE_NAMESPACE}:{namespace}:{':'.join(parts)}"
