"""Align the configured chain id with the one a live node reports."""

import logging

from cosmoscan.core.exceptions import AggregateFailure, ChainMismatchWarning
from cosmoscan.models.chain import Endpoint
from cosmoscan.models.node import ReconciledIdentity
from cosmoscan.providers.rpc import RpcClient, network_of

logger = logging.getLogger(__name__)


class ChainIdentityReconciler:
    """Read ``/status`` and prefer the node's chain id over configuration."""

    def __init__(self, rpc: RpcClient, timeout: float = 8.0) -> None:
        self._rpc = rpc
        self._timeout = timeout

    async def reconcile(
        self, configured_chain_id: str, rpc_endpoint: Endpoint
    ) -> ReconciledIdentity:
        """
        Determine the chain id to sign for.

        The live id wins on mismatch and a ``ChainMismatchWarning`` is
        logged. If the node cannot be reached the configured id is used.

        Args:
            configured_chain_id: Chain id from the catalog.
            rpc_endpoint: RPC endpoint that will receive the broadcast.

        Returns:
            The effective identity.
        """
        try:
            status = await self._rpc.status([rpc_endpoint], timeout=self._timeout)
        except AggregateFailure as e:
            logger.warning(
                f"[Reconciler] Could not read status from {rpc_endpoint.url}, "
                f"keeping configured chain id {configured_chain_id}: {e.message}"
            )
            return ReconciledIdentity(
                chain_id=configured_chain_id, configured_chain_id=configured_chain_id
            )

        live = network_of(status)
        if not live:
            logger.warning(f"[Reconciler] {rpc_endpoint.url} reported no network id")
            return ReconciledIdentity(
                chain_id=configured_chain_id, configured_chain_id=configured_chain_id
            )

        if live != configured_chain_id:
            warning = ChainMismatchWarning(configured_chain_id, live)
            logger.warning(f"[Reconciler] {warning}; using {live}")
            return ReconciledIdentity(
                chain_id=live,
                configured_chain_id=configured_chain_id,
                live_chain_id=live,
                mismatch=True,
            )

        return ReconciledIdentity(
            chain_id=configured_chain_id,
            configured_chain_id=configured_chain_id,
            live_chain_id=live,
        )
