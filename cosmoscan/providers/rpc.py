"""Consensus-node RPC client over the failover resolver."""

import logging
from typing import Any, Sequence

from cosmoscan.models.chain import Endpoint
from cosmoscan.providers.failover import FailoverResolver, RequestSpec

logger = logging.getLogger(__name__)


def _result(payload: Any) -> dict[str, Any]:
    """Unwrap a JSON-RPC envelope; some proxies already strip it."""
    if isinstance(payload, dict) and isinstance(payload.get("result"), dict):
        return payload["result"]
    return payload if isinstance(payload, dict) else {}


def network_of(status: dict[str, Any]) -> str | None:
    """Chain id reported in a ``/status`` result."""
    return (status.get("node_info") or {}).get("network") or None


def latest_height_of(status: dict[str, Any]) -> int | None:
    height = (status.get("sync_info") or {}).get("latest_block_height")
    return int(height) if height is not None else None


class RpcClient:
    """Typed wrappers for the RPC routes the explorer and broadcaster use."""

    def __init__(
        self,
        resolver: FailoverResolver,
        read_timeout: float = 10.0,
        broadcast_timeout: float = 15.0,
    ) -> None:
        self._resolver = resolver
        self._read_timeout = read_timeout
        self._broadcast_timeout = broadcast_timeout

    async def _get(
        self,
        endpoints: Sequence[Endpoint],
        path: str,
        params: dict[str, Any] | None = None,
        expect_non_empty: str | None = None,
        timeout: float | None = None,
    ) -> tuple[dict[str, Any], Endpoint]:
        payload, endpoint = await self._resolver.resolve(
            endpoints,
            RequestSpec(path=path, params=params, expect_non_empty=expect_non_empty),
            timeout=timeout or self._read_timeout,
        )
        return _result(payload), endpoint

    async def status(
        self, endpoints: Sequence[Endpoint], timeout: float | None = None
    ) -> dict[str, Any]:
        """``/status``: node info and sync info."""
        result, _ = await self.status_with_endpoint(endpoints, timeout=timeout)
        return result

    async def status_with_endpoint(
        self, endpoints: Sequence[Endpoint], timeout: float | None = None
    ) -> tuple[dict[str, Any], Endpoint]:
        """``/status`` plus the endpoint that answered."""
        return await self._get(
            endpoints, "/status", expect_non_empty="node_info", timeout=timeout
        )

    async def block(
        self, endpoints: Sequence[Endpoint], height: int | None = None
    ) -> dict[str, Any]:
        """``/block``: latest block, or the block at ``height``."""
        params = {"height": str(height)} if height is not None else None
        result, _ = await self._get(
            endpoints, "/block", params=params, expect_non_empty="block"
        )
        return result

    async def validators(
        self,
        endpoints: Sequence[Endpoint],
        height: int | None = None,
        page: int = 1,
        per_page: int = 100,
    ) -> dict[str, Any]:
        """``/validators``: consensus validator set with voting power."""
        params: dict[str, Any] = {"page": str(page), "per_page": str(per_page)}
        if height is not None:
            params["height"] = str(height)
        result, _ = await self._get(
            endpoints, "/validators", params=params, expect_non_empty="validators"
        )
        return result

    async def consensus_state(self, endpoints: Sequence[Endpoint]) -> dict[str, Any]:
        """``/consensus_state``: current round state."""
        result, _ = await self._get(
            endpoints, "/consensus_state", expect_non_empty="round_state"
        )
        return result

    async def tx_search(
        self,
        endpoint: Endpoint,
        query: str,
        page: int = 1,
        per_page: int = 20,
        order_by: str = "desc",
    ) -> dict[str, Any]:
        """``/tx_search`` against a single indexer-capable endpoint."""
        result, _ = await self._get(
            [endpoint],
            "/tx_search",
            params={
                "query": f'"{query}"',
                "page": str(page),
                "per_page": str(per_page),
                "order_by": f'"{order_by}"',
            },
        )
        return result

    async def broadcast_tx_sync(self, endpoint: Endpoint, tx_bytes: bytes) -> dict[str, Any]:
        """
        Submit signed transaction bytes to one endpoint, waiting for CheckTx.

        Broadcasts never fail over: a transaction is sent to exactly the
        endpoint whose chain id it was signed for.

        Returns:
            ``{code, data, log, codespace, hash}``.
        """
        logger.info(f"[RPC] broadcast_tx_sync via {endpoint.url} ({len(tx_bytes)} bytes)")
        result, _ = await self._get(
            [endpoint],
            "/broadcast_tx_sync",
            params={"tx": "0x" + tx_bytes.hex()},
            timeout=self._broadcast_timeout,
        )
        return result
