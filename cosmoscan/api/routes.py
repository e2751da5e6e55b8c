"""API route definitions."""

import logging
from typing import Annotated, Awaitable

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from cosmoscan.api.dependencies import (
    get_cache_backend,
    get_chain_registry,
    get_explorer_service,
)
from cosmoscan.config import Settings, get_settings
from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.exceptions import AggregateFailure, UnknownChainError
from cosmoscan.models.api import CachedResponse, ChainListResponse, HealthResponse
from cosmoscan.models.cache import CachedRead
from cosmoscan.models.chain import ChainProfile, ChainSummary
from cosmoscan.services.chain_registry import ChainRegistry
from cosmoscan.services.explorer import ExplorerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["explorer"])


def _profile(registry: ChainRegistry, chain: str) -> ChainProfile:
    try:
        return registry.get(chain)
    except UnknownChainError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e


def _check_prefix(address: str, prefix: str) -> None:
    if not address.startswith(prefix):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Address must start with {prefix}",
        )


async def _cached(profile: ChainProfile, read: Awaitable[CachedRead]) -> CachedResponse:
    """Await an explorer read, mapping node exhaustion to 503."""
    try:
        result = await read
    except AggregateFailure as e:
        logger.error(f"[API] {profile.name}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": f"No endpoint of {profile.name} could serve the request",
                "code": e.code,
                "attempts": [str(a) for a in e.attempts],
            },
        ) from e
    except ValueError as e:
        # Chain has no endpoint of the protocol the read needs
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{profile.name}: {e}",
        ) from e
    return CachedResponse.from_read(profile.name, result)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check API and cache health status.",
)
async def health_check(
    cache: Annotated[CacheBackend, Depends(get_cache_backend)],
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Check API health and cache connectivity."""
    cache_healthy = await cache.ping()

    overall_status = "healthy" if cache_healthy and len(registry) else "degraded"
    cache_status = "connected" if cache_healthy else "disconnected"

    return HealthResponse(
        status=overall_status,
        version=settings.app_version,
        cache_status=cache_status,
        chains=len(registry),
    )


@router.get(
    "/chains",
    response_model=ChainListResponse,
    summary="List Chains",
    description="Chains in the endpoint catalog.",
)
async def list_chains(
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
) -> ChainListResponse:
    chains = [ChainSummary.from_profile(p) for p in registry.list()]
    return ChainListResponse(chains=chains, count=len(chains))


@router.get(
    "/chains/{chain}/status",
    response_model=CachedResponse,
    summary="Node Status",
    description="Live chain id, latest height and sync state.",
)
async def chain_status(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.status(profile))


@router.get(
    "/chains/{chain}/blocks/latest",
    response_model=CachedResponse,
    summary="Latest Block",
)
async def latest_block(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.latest_block(profile))


@router.get(
    "/chains/{chain}/blocks/{height}",
    response_model=CachedResponse,
    summary="Block by Height",
)
async def block(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
    height: int = Path(..., ge=1),
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.block(profile, height))


@router.get(
    "/chains/{chain}/consensus",
    response_model=CachedResponse,
    summary="Consensus State",
    description="Height, round and step the consensus engine is working on.",
)
async def consensus(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.consensus(profile))


@router.get(
    "/chains/{chain}/validators",
    response_model=CachedResponse,
    summary="Validators",
    description="All validators, active first, then by voting power.",
)
async def validators(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.validators(profile))


@router.get(
    "/chains/{chain}/validators/{address}",
    response_model=CachedResponse,
    summary="Validator Detail",
    description="One validator with its share of bonded stake and accrued commission.",
)
async def validator_detail(
    chain: str,
    address: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    _check_prefix(address, f"{profile.address_prefix}valoper")
    return await _cached(profile, explorer.validator(profile, address))


@router.get(
    "/chains/{chain}/accounts/{address}",
    response_model=CachedResponse,
    summary="Account Overview",
    description="Balances, delegations, unbonding entries and pending rewards.",
)
async def account(
    chain: str,
    address: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    _check_prefix(address, profile.address_prefix)
    return await _cached(profile, explorer.account(profile, address))


@router.get(
    "/chains/{chain}/accounts/{address}/transactions",
    response_model=CachedResponse,
    summary="Account Transactions",
    description="Transactions sent by an address, newest first, from the indexer endpoint.",
)
async def account_transactions(
    chain: str,
    address: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
    limit: int = Query(default=20, ge=1, le=100),
) -> CachedResponse:
    profile = _profile(registry, chain)
    _check_prefix(address, profile.address_prefix)
    return await _cached(profile, explorer.account_transactions(profile, address, limit=limit))


@router.get(
    "/chains/{chain}/proposals",
    response_model=CachedResponse,
    summary="Governance Proposals",
)
async def proposals(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
    limit: int = Query(default=50, ge=1, le=200),
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.proposals(profile, limit=limit))


@router.get(
    "/chains/{chain}/proposals/{proposal_id}",
    response_model=CachedResponse,
    summary="Governance Proposal",
)
async def proposal(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
    proposal_id: int = Path(..., ge=1),
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.proposal(profile, proposal_id))


@router.get(
    "/chains/{chain}/params/{module}",
    response_model=CachedResponse,
    summary="Module Parameters",
)
async def module_params(
    chain: str,
    module: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    if not module.isidentifier():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid module name: {module}",
        )
    return await _cached(profile, explorer.params(profile, module))


@router.get(
    "/chains/{chain}/transactions/{tx_hash}",
    response_model=CachedResponse,
    summary="Transaction by Hash",
)
async def transaction(
    chain: str,
    tx_hash: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.transaction(profile, tx_hash))


@router.get(
    "/chains/{chain}/indexer",
    response_model=CachedResponse,
    summary="Indexer Endpoint",
    description="RPC endpoint with transaction indexing, or the fallback in use.",
)
async def indexer(
    chain: str,
    registry: Annotated[ChainRegistry, Depends(get_chain_registry)],
    explorer: Annotated[ExplorerService, Depends(get_explorer_service)],
) -> CachedResponse:
    profile = _profile(registry, chain)
    return await _cached(profile, explorer.indexer(profile))
