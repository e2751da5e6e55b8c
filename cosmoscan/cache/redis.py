"""Redis cache backend implementation."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from cosmoscan.constants import CACHE_NAMESPACE
from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackend):
    """Redis-based cache backend for sharing the read cache between workers.

    Errors are logged and downgraded to cache misses so a Redis outage
    never blocks node reads.
    """

    def __init__(self, redis_url: str, client: Any = None) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Redis connection URL.
            client: Optional pre-built ``redis.asyncio`` client.
        """
        self._redis_url = redis_url
        self._client: Any = client

    async def _get_client(self) -> Any:
        """Get or create Redis client."""
        if self._client is None:
            try:
                self._client = redis.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
            except Exception as e:
                raise CacheError(f"Failed to connect to Redis: {e}", "connect") from e
        return self._client

    async def get(self, key: str) -> Any | None:
        """Retrieve a value from Redis."""
        try:
            client = await self._get_client()
            data = await client.get(key)
            if data is None:
                return None
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"[RedisCache] Discarding undecodable value for key {key}")
            return None
        except Exception as e:
            logger.warning(f"[RedisCache] GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> bool:
        """Store a value in Redis."""
        try:
            client = await self._get_client()
            await client.set(key, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.warning(f"[RedisCache] SET error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key from Redis."""
        try:
            client = await self._get_client()
            result = await client.delete(key)
            return result > 0
        except Exception as e:
            logger.warning(f"[RedisCache] DELETE error for key {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        """Check if a key exists in Redis."""
        try:
            client = await self._get_client()
            return await client.exists(key) > 0
        except Exception as e:
            logger.warning(f"[RedisCache] EXISTS error for key {key}: {e}")
            return False

    async def keys(self, prefix: str) -> list[str]:
        """List keys starting with prefix using SCAN."""
        found: list[str] = []
        try:
            client = await self._get_client()
            cursor = 0
            while True:
                cursor, batch = await client.scan(cursor, match=f"{prefix}*", count=100)
                found.extend(batch)
                if cursor == 0:
                    break
        except Exception as e:
            logger.warning(f"[RedisCache] SCAN error for prefix {prefix}: {e}")
        return found

    async def clear(self) -> bool:
        """Clear all cosmoscan keys from Redis."""
        try:
            client = await self._get_client()
            cursor = 0
            while True:
                cursor, keys = await client.scan(
                    cursor, match=f"{CACHE_NAMESPACE}:*", count=100
                )
                if keys:
                    await client.delete(*keys)
                if cursor == 0:
                    break
            return True
        except Exception as e:
            logger.warning(f"[RedisCache] CLEAR error: {e}")
            return False

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            client = await self._get_client()
            return await client.ping()
        except Exception:
            return False
