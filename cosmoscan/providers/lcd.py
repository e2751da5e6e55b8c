"""REST (LCD) client for Cosmos-SDK module queries over the failover resolver."""

import logging
from typing import Any, Sequence

from cosmoscan.constants import BondStatus
from cosmoscan.core.exceptions import AggregateFailure
from cosmoscan.models.chain import Endpoint
from cosmoscan.providers.failover import FailoverResolver, RequestSpec

logger = logging.getLogger(__name__)


class LcdClient:
    """
    Typed wrappers for the staking, distribution, bank, gov, auth, params
    and tx module routes.

    Collections that must never be empty on a healthy node (the validator
    set, the latest block) are requested with ``expect_non_empty`` so a
    node returning an empty list is skipped. Per-address collections may
    legitimately be empty and are accepted as-is.
    """

    def __init__(self, resolver: FailoverResolver, timeout: float = 10.0) -> None:
        self._resolver = resolver
        self._timeout = timeout

    async def _get(
        self,
        endpoints: Sequence[Endpoint],
        path: str,
        params: dict[str, Any] | None = None,
        expect_non_empty: str | None = None,
    ) -> dict[str, Any]:
        payload, _ = await self._resolver.resolve(
            endpoints,
            RequestSpec(path=path, params=params, expect_non_empty=expect_non_empty),
            timeout=self._timeout,
        )
        return payload

    # Staking

    async def validators(
        self,
        endpoints: Sequence[Endpoint],
        status: BondStatus | None = None,
        limit: int = 300,
    ) -> list[dict[str, Any]]:
        """Validator set, optionally filtered by bond status."""
        params: dict[str, Any] = {"pagination.limit": str(limit)}
        if status is not None:
            params["status"] = BondStatus(status).value
        data = await self._get(
            endpoints,
            "/cosmos/staking/v1beta1/validators",
            params=params,
            expect_non_empty="validators",
        )
        return data.get("validators", [])

    async def validator(self, endpoints: Sequence[Endpoint], address: str) -> dict[str, Any]:
        data = await self._get(
            endpoints,
            f"/cosmos/staking/v1beta1/validators/{address}",
            expect_non_empty="validator",
        )
        return data["validator"]

    async def delegations(
        self, endpoints: Sequence[Endpoint], delegator: str
    ) -> list[dict[str, Any]]:
        """Delegations of an address; empty for addresses that never staked."""
        data = await self._get(endpoints, f"/cosmos/staking/v1beta1/delegations/{delegator}")
        return data.get("delegation_responses", [])

    async def unbonding_delegations(
        self, endpoints: Sequence[Endpoint], delegator: str
    ) -> list[dict[str, Any]]:
        data = await self._get(
            endpoints,
            f"/cosmos/staking/v1beta1/delegators/{delegator}/unbonding_delegations",
        )
        return data.get("unbonding_responses", [])

    async def staking_pool(self, endpoints: Sequence[Endpoint]) -> dict[str, Any]:
        data = await self._get(endpoints, "/cosmos/staking/v1beta1/pool", expect_non_empty="pool")
        return data["pool"]

    # Distribution

    async def rewards(self, endpoints: Sequence[Endpoint], delegator: str) -> dict[str, Any]:
        """Pending rewards per validator plus the total."""
        return await self._get(
            endpoints, f"/cosmos/distribution/v1beta1/delegators/{delegator}/rewards"
        )

    async def commission(
        self, endpoints: Sequence[Endpoint], validator: str
    ) -> list[dict[str, Any]]:
        data = await self._get(
            endpoints, f"/cosmos/distribution/v1beta1/validators/{validator}/commission"
        )
        return (data.get("commission") or {}).get("commission", [])

    # Bank

    async def balances(self, endpoints: Sequence[Endpoint], address: str) -> list[dict[str, Any]]:
        data = await self._get(endpoints, f"/cosmos/bank/v1beta1/balances/{address}")
        return data.get("balances", [])

    # Gov

    async def proposals(
        self, endpoints: Sequence[Endpoint], limit: int = 50, reverse: bool = True
    ) -> list[dict[str, Any]]:
        """Governance proposals, newest first by default."""
        data = await self._get(
            endpoints,
            "/cosmos/gov/v1beta1/proposals",
            params={
                "pagination.limit": str(limit),
                "pagination.reverse": "true" if reverse else "false",
            },
        )
        return data.get("proposals", [])

    async def proposal(self, endpoints: Sequence[Endpoint], proposal_id: int) -> dict[str, Any]:
        data = await self._get(
            endpoints,
            f"/cosmos/gov/v1beta1/proposals/{proposal_id}",
            expect_non_empty="proposal",
        )
        return data["proposal"]

    # Auth

    async def account(self, endpoints: Sequence[Endpoint], address: str) -> dict[str, Any]:
        """
        Auth account of an address.

        Nodes answer 404 for an address that never received funds; when
        every endpoint says so the account is reported as empty.
        """
        try:
            data = await self._get(endpoints, f"/cosmos/auth/v1beta1/accounts/{address}")
        except AggregateFailure as e:
            if e.attempts and all(a.status_code == 404 for a in e.attempts):
                logger.debug(f"[LCD] No account on chain for {address}")
                return {}
            raise
        return data.get("account") or {}

    # Params

    async def params(self, endpoints: Sequence[Endpoint], module: str) -> dict[str, Any]:
        """Module parameters, e.g. ``staking``, ``slashing``, ``gov``."""
        data = await self._get(endpoints, f"/cosmos/{module}/v1beta1/params")
        return data.get("params", data)

    # Tx

    async def tx(self, endpoints: Sequence[Endpoint], tx_hash: str) -> dict[str, Any]:
        data = await self._get(
            endpoints,
            f"/cosmos/tx/v1beta1/txs/{tx_hash.upper()}",
            expect_non_empty="tx_response",
        )
        return data["tx_response"]

    # Tendermint service

    async def latest_block(self, endpoints: Sequence[Endpoint]) -> dict[str, Any]:
        return await self._get(
            endpoints,
            "/cosmos/base/tendermint/v1beta1/blocks/latest",
            expect_non_empty="block",
        )
