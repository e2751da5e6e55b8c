"""Test configuration and fixtures."""

from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio

from cosmoscan.cache.memory import MemoryCacheBackend
from cosmoscan.cache.swr import ReadCache
from cosmoscan.constants import ProtocolKind
from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.exceptions import SigningRejected, UnknownChainError
from cosmoscan.core.signer import OfflineSigner, Signer, SignerKey
from cosmoscan.models.chain import ChainProfile, Endpoint, GasPriceTiers
from cosmoscan.models.transaction import Fee, Message
from cosmoscan.providers.failover import FailoverResolver

Responder = Callable[[httpx.Request], httpx.Response]


class FakeNetwork:
    """Routes requests by ``host + path`` and records every request in order."""

    def __init__(self) -> None:
        self.routes: dict[str, Responder | httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, response: Responder | httpx.Response | Exception | dict | list) -> None:
        if isinstance(response, (dict, list)):
            response = httpx.Response(200, json=response)
        self.routes[url.rstrip("/")] = response

    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}".rstrip("/")
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"code": 5, "message": "not found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeOfflineSigner(OfflineSigner):
    def __init__(self, wallet: "FakeWallet", chain_id: str) -> None:
        self._wallet = wallet
        self.chain_id = chain_id

    async def get_accounts(self) -> list[SignerKey]:
        return [SignerKey(address=self._wallet.address)] if self._wallet.address else []

    async def sign(
        self,
        signer_address: str,
        messages: list[Message],
        fee: Fee,
        memo: str = "",
    ) -> bytes:
        self._wallet.calls.append(("sign", self.chain_id))
        self._wallet.signed.append({"messages": messages, "fee": fee, "memo": memo})
        if self._wallet.reject:
            raise SigningRejected("Request rejected")
        return b"\x0a\x02signed"


class FakeWallet(Signer):
    """In-memory signer port that records every call."""

    def __init__(
        self,
        address: str = "cosmos1delegator",
        known_chains: set[str] | None = None,
        reject: bool = False,
    ) -> None:
        self.address = address
        self.known_chains = known_chains
        self.reject = reject
        self.calls: list[tuple[str, Any]] = []
        self.signed: list[dict[str, Any]] = []
        self.suggested: list[dict[str, Any]] = []

    async def enable(self, chain_id: str) -> None:
        self.calls.append(("enable", chain_id))
        if self.known_chains is not None and chain_id not in self.known_chains:
            raise UnknownChainError(chain_id)

    async def get_key(self, chain_id: str) -> SignerKey:
        self.calls.append(("get_key", chain_id))
        return SignerKey(address=self.address)

    async def suggest_chain(self, chain_info: dict[str, Any]) -> None:
        self.calls.append(("suggest_chain", chain_info["chainId"]))
        self.suggested.append(chain_info)
        if self.known_chains is not None:
            self.known_chains.add(chain_info["chainId"])

    async def get_offline_signer(self, chain_id: str) -> OfflineSigner:
        self.calls.append(("get_offline_signer", chain_id))
        return FakeOfflineSigner(self, chain_id)


def status_payload(network: str = "cosmoshub-4", tx_index: str = "on", height: str = "100") -> dict:
    return {
        "jsonrpc": "2.0",
        "id": -1,
        "result": {
            "node_info": {
                "network": network,
                "version": "0.38.12",
                "other": {"tx_index": tx_index, "rpc_address": "tcp://0.0.0.0:26657"},
            },
            "sync_info": {
                "latest_block_height": height,
                "latest_block_time": "2024-05-01T12:00:00Z",
                "catching_up": False,
            },
        },
    }


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rpc_endpoints() -> list[Endpoint]:
    return [
        Endpoint(url=f"https://rpc{i}.example.com", provider=f"p{i}", kind=ProtocolKind.RPC)
        for i in range(3)
    ]


@pytest.fixture
def lcd_endpoints() -> list[Endpoint]:
    return [
        Endpoint(url=f"https://lcd{i}.example.com", provider=f"p{i}", kind=ProtocolKind.LCD)
        for i in range(3)
    ]


@pytest.fixture
def profile(rpc_endpoints: list[Endpoint], lcd_endpoints: list[Endpoint]) -> ChainProfile:
    return ChainProfile(
        name="cosmoshub",
        configured_chain_id="cosmoshub-4",
        address_prefix="cosmos",
        base_denom="uatom",
        display_denom="ATOM",
        exponent=6,
        endpoints=tuple(lcd_endpoints + rpc_endpoints),
        gas_price_tiers=GasPriceTiers.from_min_fee("0.01"),
    )


@pytest_asyncio.fixture
async def resolver(network: FakeNetwork) -> AsyncGenerator[FailoverResolver, None]:
    resolver = FailoverResolver(timeout=2.0, transport=network.transport())
    yield resolver
    await resolver.close()


@pytest_asyncio.fixture
async def cache_backend() -> AsyncGenerator[CacheBackend, None]:
    """Provide a memory cache backend for tests."""
    cache = MemoryCacheBackend()
    yield cache
    await cache.close()


@pytest_asyncio.fixture
async def read_cache(
    cache_backend: CacheBackend, clock: FakeClock
) -> AsyncGenerator[ReadCache, None]:
    cache = ReadCache(cache_backend, schema_version=2, clock=clock)
    yield cache
    await cache.cancel_refreshes()


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def make_status() -> Callable[..., dict]:
    """Factory for RPC ``/status`` payloads."""
    return status_payload


@pytest.fixture
def make_wallet() -> Callable[..., FakeWallet]:
    """Factory for wallets with custom known chains or rejection behavior."""
    return FakeWallet
