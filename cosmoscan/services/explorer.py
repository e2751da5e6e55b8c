"""Explorer reads: cached, failover-backed views of a chain."""

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Awaitable

from cosmoscan.config import Settings
from cosmoscan.cache.swr import ReadCache
from cosmoscan.models.cache import CachedRead
from cosmoscan.models.chain import ChainProfile
from cosmoscan.models.explorer import (
    AccountOverview,
    AccountTransactions,
    BlockSummary,
    ChainStatus,
    ConsensusStatus,
    DelegationSummary,
    DisplayCoin,
    IndexerStatus,
    ProposalDetail,
    ProposalSummary,
    TxSummary,
    ValidatorDetail,
    ValidatorSummary,
)
from cosmoscan.providers.lcd import LcdClient
from cosmoscan.providers.rpc import RpcClient, latest_height_of, network_of
from cosmoscan.services.prober import CapabilityProber, reports_tx_index
from cosmoscan.services.units import to_display

logger = logging.getLogger(__name__)


def _display_coin(coin: dict[str, Any], profile: ChainProfile) -> DisplayCoin:
    # DecCoin amounts carry 18 fractional digits; only whole base units are shown
    amount = str(coin.get("amount", "0")).split(".")[0] or "0"
    display = None
    if coin.get("denom") == profile.base_denom:
        display = to_display(amount, profile.exponent)
    return DisplayCoin(denom=coin.get("denom", ""), amount=amount, display_amount=display)


def _block_summary(data: dict[str, Any]) -> dict[str, Any]:
    """Summarize a block response; RPC and LCD share the same layout."""
    block = data.get("block") or {}
    header = block.get("header") or {}
    block_id = data.get("block_id") or {}
    return BlockSummary(
        height=int(header.get("height", 0)),
        hash=block_id.get("hash"),
        time=header.get("time"),
        proposer_address=header.get("proposer_address"),
        tx_count=len((block.get("data") or {}).get("txs") or []),
    ).model_dump()


def _validator_fields(v: dict[str, Any], profile: ChainProfile) -> dict[str, Any]:
    description = v.get("description") or {}
    rates = (v.get("commission") or {}).get("commission_rates") or {}
    tokens = v.get("tokens") or "0"
    return {
        "address": v.get("operator_address", ""),
        "moniker": description.get("moniker") or "Unknown",
        "voting_power": tokens,
        "voting_power_display": to_display(tokens, profile.exponent),
        "commission": rates.get("rate", "0"),
        "status": v.get("status") or "BOND_STATUS_UNSPECIFIED",
        "jailed": bool(v.get("jailed")),
        "identity": description.get("identity") or None,
    }


def _share_percent(tokens: str, bonded_tokens: str) -> str | None:
    """Percentage of bonded stake, two decimals, half-up."""
    bonded = Decimal(bonded_tokens or "0")
    if bonded <= 0:
        return None
    share = Decimal(tokens or "0") * 100 / bonded
    return str(share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _proposal_fields(p: dict[str, Any]) -> dict[str, Any]:
    content = p.get("content") or {}
    return {
        "proposal_id": str(p.get("proposal_id") or p.get("id") or ""),
        "title": content.get("title") or p.get("title") or "",
        "status": p.get("status") or "",
        "submit_time": p.get("submit_time"),
        "voting_end_time": p.get("voting_end_time"),
        "final_tally": p.get("final_tally_result") or {},
    }


def _parse_round_step(value: Any) -> tuple[int | None, int | None, int | None]:
    """Split a ``height/round/step`` string such as ``"1234/0/1"``."""
    parts = str(value or "").split("/")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None, None, None
    height, round_, step = (int(p) for p in parts)
    return height, round_, step


def sort_validators(validators: list[ValidatorSummary]) -> list[ValidatorSummary]:
    """Active (bonded, not jailed) first, each group by voting power descending."""
    return sorted(validators, key=lambda v: (not v.active, -int(v.voting_power or 0)))


async def gather_reads(*reads: Awaitable[Any]) -> list[Any]:
    """Run node reads concurrently; the first failure cancels the rest."""
    tasks = [asyncio.ensure_future(r) for r in reads]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ExplorerService:
    """
    UI-facing reads for a chain.

    Every read goes through the read cache: a cached value is served at
    once and refreshed in the background; only a cold miss waits on the
    network, and only a cold miss can surface ``AggregateFailure``.
    """

    def __init__(
        self,
        cache: ReadCache,
        rpc: RpcClient,
        lcd: LcdClient,
        prober: CapabilityProber,
        settings: Settings,
    ) -> None:
        self._cache = cache
        self._rpc = rpc
        self._lcd = lcd
        self._prober = prober
        self._settings = settings

    async def _read(
        self, kind: str, profile: ChainProfile, suffix: str, fetcher: Any
    ) -> CachedRead:
        key = self._cache.make_key(kind, profile.name, suffix)
        return await self._cache.read(key, fetcher, self._settings.ttl_for(kind))

    async def status(self, profile: ChainProfile) -> CachedRead:
        """Node status from the first responsive RPC endpoint."""

        async def fetch() -> dict[str, Any]:
            status, endpoint = await self._rpc.status_with_endpoint(profile.rpc_endpoints)
            sync = status.get("sync_info") or {}
            node_info = status.get("node_info") or {}
            return ChainStatus(
                chain=profile.name,
                chain_id=network_of(status) or profile.configured_chain_id,
                configured_chain_id=profile.configured_chain_id,
                latest_block_height=latest_height_of(status),
                latest_block_time=sync.get("latest_block_time"),
                catching_up=sync.get("catching_up"),
                node_version=node_info.get("version"),
                tx_index=reports_tx_index(status),
                endpoint=endpoint.url,
            ).model_dump()

        return await self._read("network", profile, "status", fetch)

    async def latest_block(self, profile: ChainProfile) -> CachedRead:
        async def fetch() -> dict[str, Any]:
            return _block_summary(await self._lcd.latest_block(profile.lcd_endpoints))

        return await self._read("blocks", profile, "latest", fetch)

    async def block(self, profile: ChainProfile, height: int) -> CachedRead:
        """A committed block by height, from the RPC endpoints."""

        async def fetch() -> dict[str, Any]:
            return _block_summary(await self._rpc.block(profile.rpc_endpoints, height))

        return await self._read("blocks", profile, str(height), fetch)

    async def consensus(self, profile: ChainProfile) -> CachedRead:
        async def fetch() -> dict[str, Any]:
            result = await self._rpc.consensus_state(profile.rpc_endpoints)
            round_state = result.get("round_state") or {}
            height, round_, step = _parse_round_step(round_state.get("height/round/step"))
            return ConsensusStatus(
                height=height,
                round=round_,
                step=step,
                start_time=round_state.get("start_time"),
                proposer_address=(round_state.get("proposer") or {}).get("address"),
            ).model_dump()

        return await self._read("network", profile, "consensus", fetch)

    async def validators(self, profile: ChainProfile) -> CachedRead:
        """All validators, active first, then by voting power."""

        async def fetch() -> list[dict[str, Any]]:
            raw = await self._lcd.validators(profile.lcd_endpoints)
            summaries = [ValidatorSummary(**_validator_fields(v, profile)) for v in raw]
            return [v.model_dump() for v in sort_validators(summaries)]

        return await self._read("validators", profile, "all", fetch)

    async def validator(self, profile: ChainProfile, address: str) -> CachedRead:
        """One validator with its stake share and accrued commission."""

        async def fetch() -> dict[str, Any]:
            endpoints = profile.lcd_endpoints
            raw, commission, pool = await gather_reads(
                self._lcd.validator(endpoints, address),
                self._lcd.commission(endpoints, address),
                self._lcd.staking_pool(endpoints),
            )
            description = raw.get("description") or {}
            rates = (raw.get("commission") or {}).get("commission_rates") or {}
            return ValidatorDetail(
                **_validator_fields(raw, profile),
                website=description.get("website") or None,
                details=description.get("details") or None,
                max_commission=rates.get("max_rate"),
                min_self_delegation=raw.get("min_self_delegation"),
                voting_power_share=_share_percent(
                    raw.get("tokens") or "0", pool.get("bonded_tokens") or "0"
                ),
                accrued_commission=[_display_coin(c, profile) for c in commission],
            ).model_dump()

        return await self._read("validators", profile, address, fetch)

    async def account(self, profile: ChainProfile, address: str) -> CachedRead:
        """Balances, delegations, unbonding and pending rewards of an address."""

        async def fetch() -> dict[str, Any]:
            endpoints = profile.lcd_endpoints
            account, balances, delegations, unbonding, rewards = await gather_reads(
                self._lcd.account(endpoints, address),
                self._lcd.balances(endpoints, address),
                self._lcd.delegations(endpoints, address),
                self._lcd.unbonding_delegations(endpoints, address),
                self._lcd.rewards(endpoints, address),
            )
            # Vesting accounts nest the common fields under base_account
            base = account.get("base_account") or account
            return AccountOverview(
                address=address,
                account_number=base.get("account_number"),
                sequence=base.get("sequence"),
                balances=[_display_coin(c, profile) for c in balances],
                delegations=[
                    DelegationSummary(
                        validator_address=(d.get("delegation") or {}).get("validator_address", ""),
                        amount=_display_coin(d.get("balance") or {}, profile),
                    )
                    for d in delegations
                ],
                unbonding_count=len(unbonding),
                rewards_total=[_display_coin(c, profile) for c in rewards.get("total") or []],
            ).model_dump()

        return await self._read("accounts", profile, address, fetch)

    async def account_transactions(
        self, profile: ChainProfile, address: str, limit: int = 20
    ) -> CachedRead:
        """
        Transactions sent by an address, newest first.

        Searched on the first indexer-capable RPC endpoint. Without one the
        first endpoint is asked anyway and the result carries a warning.
        """

        async def fetch() -> dict[str, Any]:
            probe = await self._prober.probe(profile.rpc_endpoints)
            result = await self._rpc.tx_search(
                probe.endpoint, f"message.sender='{address}'", per_page=limit
            )
            txs = [
                TxSummary(
                    hash=tx.get("hash", ""),
                    height=int(tx.get("height") or 0),
                    code=int((tx.get("tx_result") or {}).get("code") or 0),
                    gas_wanted=(tx.get("tx_result") or {}).get("gas_wanted"),
                    gas_used=(tx.get("tx_result") or {}).get("gas_used"),
                )
                for tx in result.get("txs") or []
            ]
            return AccountTransactions(
                address=address,
                endpoint=probe.endpoint.url,
                total_count=int(result.get("total_count") or 0),
                txs=txs,
                warning=probe.warning,
            ).model_dump()

        return await self._read("transactions", profile, f"sender:{address}:{limit}", fetch)

    async def proposals(self, profile: ChainProfile, limit: int = 50) -> CachedRead:
        async def fetch() -> list[dict[str, Any]]:
            raw = await self._lcd.proposals(profile.lcd_endpoints, limit=limit)
            return [
                ProposalSummary(**_proposal_fields(p)).model_dump() for p in raw
            ]

        return await self._read("proposals", profile, f"list:{limit}", fetch)

    async def proposal(self, profile: ChainProfile, proposal_id: int) -> CachedRead:
        async def fetch() -> dict[str, Any]:
            p = await self._lcd.proposal(profile.lcd_endpoints, proposal_id)
            content = p.get("content") or {}
            return ProposalDetail(
                **_proposal_fields(p),
                description=content.get("description") or p.get("summary") or "",
                voting_start_time=p.get("voting_start_time"),
                deposit_end_time=p.get("deposit_end_time"),
                total_deposit=[_display_coin(c, profile) for c in p.get("total_deposit") or []],
            ).model_dump()

        return await self._read("proposals", profile, str(proposal_id), fetch)

    async def params(self, profile: ChainProfile, module: str) -> CachedRead:
        async def fetch() -> dict[str, Any]:
            return await self._lcd.params(profile.lcd_endpoints, module)

        return await self._read("params", profile, module, fetch)

    async def transaction(self, profile: ChainProfile, tx_hash: str) -> CachedRead:
        async def fetch() -> dict[str, Any]:
            return await self._lcd.tx(profile.lcd_endpoints, tx_hash)

        return await self._read("transactions", profile, tx_hash.upper(), fetch)

    async def indexer(self, profile: ChainProfile) -> CachedRead:
        """Which RPC endpoint serves transaction search."""

        async def fetch() -> dict[str, Any]:
            result = await self._prober.probe(profile.rpc_endpoints)
            return IndexerStatus(
                endpoint=result.endpoint.url,
                capable=result.capable,
                fallback=result.fallback,
                warning=result.warning,
            ).model_dump()

        return await self._read("network", profile, "indexer", fetch)
