"""Explorer session: owns the read cache and node clients for one user session."""

import logging
from typing import Any

from cosmoscan.cache.memory import MemoryCacheBackend
from cosmoscan.cache.swr import ReadCache
from cosmoscan.config import Settings, get_settings
from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.signer import Signer
from cosmoscan.models.chain import ChainProfile, Endpoint
from cosmoscan.providers.failover import FailoverResolver
from cosmoscan.providers.lcd import LcdClient
from cosmoscan.providers.rpc import RpcClient
from cosmoscan.services.broadcast import BroadcastOrchestrator
from cosmoscan.services.explorer import ExplorerService
from cosmoscan.services.prober import CapabilityProber
from cosmoscan.services.reconciler import ChainIdentityReconciler

logger = logging.getLogger(__name__)


class ExplorerSession:
    """
    Create-at-start, clear-at-end bundle of the read and write paths.

    Usage::

        async with ExplorerSession() as session:
            validators = await session.explorer.validators(profile)
            result = await session.orchestrator(profile, signer).submit(intent)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        backend: CacheBackend | None = None,
        resolver: FailoverResolver | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.resolver = resolver or FailoverResolver(
            timeout=self.settings.read_timeout_seconds,
            user_agent=self.settings.user_agent,
        )
        self.cache = ReadCache(
            backend or MemoryCacheBackend(),
            schema_version=self.settings.cache_schema_version,
        )
        self.rpc = RpcClient(
            self.resolver,
            read_timeout=self.settings.read_timeout_seconds,
            broadcast_timeout=self.settings.broadcast_timeout_seconds,
        )
        self.lcd = LcdClient(self.resolver, timeout=self.settings.read_timeout_seconds)
        self.prober = CapabilityProber(
            self.resolver, timeout=self.settings.probe_timeout_seconds
        )
        self.reconciler = ChainIdentityReconciler(
            self.rpc, timeout=self.settings.probe_timeout_seconds
        )
        self.explorer = ExplorerService(
            cache=self.cache,
            rpc=self.rpc,
            lcd=self.lcd,
            prober=self.prober,
            settings=self.settings,
        )

    def orchestrator(
        self,
        profile: ChainProfile,
        signer: Signer,
        rpc_endpoint: Endpoint | None = None,
    ) -> BroadcastOrchestrator:
        """A fresh single-use orchestrator for one submission."""
        return BroadcastOrchestrator(
            profile=profile,
            signer=signer,
            rpc=self.rpc,
            reconciler=self.reconciler,
            rpc_endpoint=rpc_endpoint,
        )

    async def start(self) -> "ExplorerSession":
        await self.cache.migrate()
        return self

    async def close(self) -> None:
        """End the session: drop cached entries and close connections."""
        try:
            try:
                await self.cache.clear()
            finally:
                await self.cache.backend.close()
        finally:
            await self.resolver.close()
            logger.debug("[Session] Closed")

    async def __aenter__(self) -> "ExplorerSession":
        return await self.start()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
