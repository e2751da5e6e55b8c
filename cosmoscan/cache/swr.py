"""Session-scoped read cache with stale-while-revalidate semantics."""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from cosmoscan.constants import CACHE_NAMESPACE
from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.exceptions import CacheError
from cosmoscan.models.cache import CachedRead, CacheEntry

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReadCache:
    """
    Key/value read cache over a storage backend.

    Entries are never expired by the store: ``get`` returns them at any
    age, ``get_fresh`` only within a freshness window. ``read`` serves a
    cached entry immediately and refreshes it in the background.
    Concurrent refreshes of one key are not coalesced; the last writer wins.
    A failed refresh is remembered until the key is next stored and is
    reported as a warning on later reads.
    """

    def __init__(
        self,
        backend: CacheBackend,
        schema_version: int = 1,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """
        Initialize the read cache.

        Args:
            backend: Storage backend holding the entries.
            schema_version: Current key schema; older prefixes are purged by ``migrate``.
            clock: Returns the current time in epoch milliseconds.
        """
        self._backend = backend
        self._schema_version = schema_version
        self._clock = clock
        self._refresh_tasks: set[asyncio.Task] = set()
        self._refresh_errors: dict[str, str] = {}

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @property
    def prefix(self) -> str:
        """Key prefix for the current schema version."""
        return f"{CACHE_NAMESPACE}:v{self._schema_version}:"

    def make_key(self, kind: str, chain: str, suffix: str = "") -> str:
        """Build ``cosmoscan:v{schema}:{kind}:{chain}:{suffix}``."""
        return self._backend._make_key(
            f"v{self._schema_version}", kind, chain.lower(), suffix
        )

    async def get(self, key: str) -> CacheEntry | None:
        """Return the entry at any age, or None if never set."""
        raw = await self._backend.get(key)
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate(raw)
        except ValueError:
            logger.warning(f"[ReadCache] Dropping malformed entry {key}")
            await self._backend.delete(key)
            return None

    async def get_fresh(self, key: str, ttl_ms: int) -> Any | None:
        """Return the payload only if ``now - fetched_at <= ttl_ms``."""
        entry = await self.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > ttl_ms:
            return None
        return entry.payload

    async def set(self, key: str, payload: Any) -> CacheEntry:
        """
        Store a payload with the current time, replacing any previous entry.

        Raises:
            CacheError: If payload is None or the backend refused the write.
        """
        if payload is None:
            raise CacheError("Refusing to cache a null payload", "set")
        entry = CacheEntry(key=key, payload=payload, fetched_at=self._clock())
        stored = await self._backend.set(key, entry.model_dump(mode="json"))
        if not stored:
            logger.warning(f"[ReadCache] Backend did not store {key}")
        self._refresh_errors.pop(key, None)
        return entry

    async def remove(self, key: str) -> bool:
        self._refresh_errors.pop(key, None)
        return await self._backend.delete(key)

    async def clear(self) -> bool:
        """Drop every entry. Called at session end."""
        await self.cancel_refreshes()
        self._refresh_errors.clear()
        return await self._backend.clear()

    async def migrate(self) -> int:
        """
        Remove keys written under an obsolete schema version.

        Returns:
            Number of keys removed.
        """
        current = self.prefix
        stale_keys = [
            k for k in await self._backend.keys(f"{CACHE_NAMESPACE}:") if not k.startswith(current)
        ]
        for key in stale_keys:
            await self._backend.delete(key)
        if stale_keys:
            logger.info(f"[ReadCache] Migrated: removed {len(stale_keys)} obsolete keys")
        return len(stale_keys)

    async def read(self, key: str, fetcher: Fetcher, ttl_ms: int) -> CachedRead:
        """
        Stale-while-revalidate read.

        With a cached entry, return it at once and start a background
        refresh. Without one, await the fetcher; its failure propagates.

        Args:
            key: Cache key.
            fetcher: Coroutine factory producing a fresh payload.
            ttl_ms: Freshness window used to flag the returned entry as stale.

        Returns:
            The payload with its fetch time and freshness flags.
        """
        entry = await self.get(key)
        if entry is None:
            logger.debug(f"[ReadCache] MISS {key}")
            payload = await fetcher()
            stored = await self.set(key, payload)
            return CachedRead(payload=payload, fetched_at=stored.fetched_at)

        warning = self._refresh_errors.get(key)
        stale = warning is not None or self._clock() - entry.fetched_at > ttl_ms
        logger.debug(f"[ReadCache] HIT {key} (stale={stale})")
        self._start_refresh(key, fetcher)
        return CachedRead(
            payload=entry.payload,
            fetched_at=entry.fetched_at,
            stale=stale,
            refreshing=True,
            warning=warning,
        )

    def _start_refresh(self, key: str, fetcher: Fetcher) -> asyncio.Task:
        task = asyncio.create_task(self._refresh(key, fetcher))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def _refresh(self, key: str, fetcher: Fetcher) -> None:
        try:
            payload = await fetcher()
        except Exception as e:
            logger.warning(f"[ReadCache] Background refresh of {key} failed, keeping cached entry: {e}")
            reason = getattr(e, "message", None) or str(e)
            self._refresh_errors[key] = f"Refresh failed, showing cached data: {reason}"
            return
        if payload is None:
            logger.warning(f"[ReadCache] Background refresh of {key} returned nothing")
            return
        await self.set(key, payload)
        logger.debug(f"[ReadCache] Refreshed {key}")

    async def wait_for_refreshes(self) -> None:
        """Await all in-flight background refreshes."""
        if self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks), return_exceptions=True)

    async def cancel_refreshes(self) -> None:
        """Cancel in-flight background refreshes."""
        tasks = list(self._refresh_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
