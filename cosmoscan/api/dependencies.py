"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends

from cosmoscan.cache.memory import MemoryCacheBackend
from cosmoscan.cache.redis import RedisCacheBackend
from cosmoscan.cache.swr import ReadCache
from cosmoscan.config import Settings, get_settings
from cosmoscan.core.cache import CacheBackend
from cosmoscan.providers.failover import FailoverResolver
from cosmoscan.providers.lcd import LcdClient
from cosmoscan.providers.rpc import RpcClient
from cosmoscan.services.chain_registry import ChainRegistry
from cosmoscan.services.explorer import ExplorerService
from cosmoscan.services.prober import CapabilityProber

_cache_instance: CacheBackend | None = None
_read_cache: ReadCache | None = None
_resolver_instance: FailoverResolver | None = None
_registry_instance: ChainRegistry | None = None


def get_chain_registry(
    settings: Annotated[Settings, Depends(get_settings)]
) -> ChainRegistry:
    """Get or load the chain catalog."""
    global _registry_instance

    if _registry_instance is None:
        _registry_instance = ChainRegistry.from_directory(settings.chains_dir)

    return _registry_instance


async def get_cache_backend(
    settings: Annotated[Settings, Depends(get_settings)]
) -> CacheBackend:
    """Get or create cache backend instance."""
    global _cache_instance

    if _cache_instance is None:
        if settings.cache_backend == "redis":
            _cache_instance = RedisCacheBackend(redis_url=settings.redis_url)
        else:
            _cache_instance = MemoryCacheBackend()

    return _cache_instance


async def get_read_cache(
    backend: Annotated[CacheBackend, Depends(get_cache_backend)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReadCache:
    """Get or create the session read cache, purging obsolete keys once."""
    global _read_cache

    if _read_cache is None:
        _read_cache = ReadCache(backend, schema_version=settings.cache_schema_version)
        await _read_cache.migrate()

    return _read_cache


def get_resolver(
    settings: Annotated[Settings, Depends(get_settings)]
) -> FailoverResolver:
    """Get or create the shared failover resolver."""
    global _resolver_instance

    if _resolver_instance is None:
        _resolver_instance = FailoverResolver(
            timeout=settings.read_timeout_seconds,
            user_agent=settings.user_agent,
        )

    return _resolver_instance


def get_rpc_client(
    resolver: Annotated[FailoverResolver, Depends(get_resolver)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RpcClient:
    return RpcClient(
        resolver,
        read_timeout=settings.read_timeout_seconds,
        broadcast_timeout=settings.broadcast_timeout_seconds,
    )


def get_lcd_client(
    resolver: Annotated[FailoverResolver, Depends(get_resolver)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LcdClient:
    return LcdClient(resolver, timeout=settings.read_timeout_seconds)


def get_prober(
    resolver: Annotated[FailoverResolver, Depends(get_resolver)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CapabilityProber:
    return CapabilityProber(resolver, timeout=settings.probe_timeout_seconds)


async def get_explorer_service(
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    rpc: Annotated[RpcClient, Depends(get_rpc_client)],
    lcd: Annotated[LcdClient, Depends(get_lcd_client)],
    prober: Annotated[CapabilityProber, Depends(get_prober)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ExplorerService:
    """Get explorer service instance."""
    return ExplorerService(cache=cache, rpc=rpc, lcd=lcd, prober=prober, settings=settings)


async def cleanup_dependencies() -> None:
    """Cleanup dependency instances on shutdown."""
    global _cache_instance, _read_cache, _resolver_instance, _registry_instance

    if _read_cache:
        await _read_cache.clear()
        _read_cache = None

    if _cache_instance:
        await _cache_instance.close()
        _cache_instance = None

    if _resolver_instance:
        await _resolver_instance.close()
        _resolver_instance = None

    _registry_instance = None
