"""Find an RPC endpoint with transaction indexing enabled."""

import logging
from typing import Sequence

from cosmoscan.core.exceptions import AggregateFailure
from cosmoscan.models.chain import Endpoint
from cosmoscan.models.node import ProbeResult
from cosmoscan.providers.failover import FailoverResolver, RequestSpec

logger = logging.getLogger(__name__)

STATUS_REQUEST = RequestSpec(path="/status")


def reports_tx_index(status: dict) -> bool:
    """True when a ``/status`` payload advertises ``tx_index: on``."""
    result = status.get("result", status) if isinstance(status, dict) else {}
    other = (result.get("node_info") or {}).get("other") or {}
    return other.get("tx_index") == "on"


class CapabilityProber:
    """Probe RPC endpoints one at a time for indexer support."""

    def __init__(self, resolver: FailoverResolver, timeout: float = 8.0) -> None:
        self._resolver = resolver
        self._timeout = timeout

    async def is_capable(self, endpoint: Endpoint) -> bool:
        """Probe a single endpoint. Any probe failure counts as not capable."""
        try:
            status, _ = await self._resolver.resolve(
                [endpoint], STATUS_REQUEST, timeout=self._timeout
            )
        except AggregateFailure as e:
            logger.debug(f"[Prober] {endpoint.url} probe failed: {e.message}")
            return False
        return reports_tx_index(status)

    async def probe(self, endpoints: Sequence[Endpoint]) -> ProbeResult:
        """
        Find the first indexer-capable endpoint.

        Args:
            endpoints: Ordered, non-empty RPC endpoint list.

        Returns:
            The first capable endpoint, or the first endpoint flagged as a
            fallback when none is capable.
        """
        if not endpoints:
            raise ValueError("endpoint list must not be empty")

        for endpoint in endpoints:
            if await self.is_capable(endpoint):
                logger.info(f"[Prober] Using indexer-capable RPC {endpoint.url}")
                return ProbeResult(endpoint=endpoint, capable=True)

        fallback = endpoints[0]
        logger.warning(
            f"[Prober] No indexer-capable RPC among {len(endpoints)} endpoints, "
            f"falling back to {fallback.url}"
        )
        return ProbeResult(endpoint=fallback, capable=False, fallback=True)

    async def find_capable(self, endpoints: Sequence[Endpoint]) -> Endpoint:
        """Return the first indexer-capable endpoint, else ``endpoints[0]``."""
        result = await self.probe(endpoints)
        return result.endpoint
