"""Tests for API endpoints."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cosmoscan.api.dependencies import (
    get_cache_backend,
    get_chain_registry,
    get_explorer_service,
)
from cosmoscan.cache.memory import MemoryCacheBackend
from cosmoscan.constants import FailureReason
from cosmoscan.core.exceptions import AggregateFailure, EndpointError
from cosmoscan.main import app
from cosmoscan.models.cache import CachedRead
from cosmoscan.models.chain import ChainProfile
from cosmoscan.services.chain_registry import ChainRegistry


class StubExplorer:
    """Explorer double returning canned reads."""

    def __init__(self, profile: ChainProfile) -> None:
        self.profile = profile
        self.calls: list[tuple] = []

    async def validators(self, profile: ChainProfile) -> CachedRead:
        self.calls.append(("validators", profile.name))
        return CachedRead(
            payload=[{"address": "cosmosvaloper1a", "moniker": "A"}],
            fetched_at=1_700_000_000_000,
            stale=True,
            refreshing=True,
        )

    async def status(self, profile: ChainProfile) -> CachedRead:
        attempts = [
            EndpointError(e, FailureReason.TIMEOUT, "read timed out")
            for e in profile.rpc_endpoints
        ]
        raise AggregateFailure(attempts, path="/status")

    async def account(self, profile: ChainProfile, address: str) -> CachedRead:
        self.calls.append(("account", address))
        return CachedRead(payload={"address": address}, fetched_at=1)

    async def params(self, profile: ChainProfile, module: str) -> CachedRead:
        return CachedRead(payload={"unbonding_time": "1814400s"}, fetched_at=1)

    async def block(self, profile: ChainProfile, height: int) -> CachedRead:
        self.calls.append(("block", height))
        return CachedRead(payload={"height": height}, fetched_at=1)

    async def consensus(self, profile: ChainProfile) -> CachedRead:
        return CachedRead(payload={"height": 10, "round": 0, "step": 3}, fetched_at=1)

    async def validator(self, profile: ChainProfile, address: str) -> CachedRead:
        self.calls.append(("validator", address))
        return CachedRead(payload={"address": address}, fetched_at=1)

    async def proposal(self, profile: ChainProfile, proposal_id: int) -> CachedRead:
        self.calls.append(("proposal", proposal_id))
        return CachedRead(payload={"proposal_id": str(proposal_id)}, fetched_at=1)

    async def account_transactions(
        self, profile: ChainProfile, address: str, limit: int = 20
    ) -> CachedRead:
        self.calls.append(("account_transactions", address, limit))
        return CachedRead(
            payload={"address": address, "txs": []},
            fetched_at=1,
            stale=True,
            warning="Refresh failed, showing cached data: node down",
        )


@pytest.fixture
def explorer(profile: ChainProfile) -> StubExplorer:
    return StubExplorer(profile)


@pytest.fixture
def client(profile: ChainProfile, explorer: StubExplorer) -> Iterator[TestClient]:
    """Provide a test client wired to in-memory dependencies."""
    registry = ChainRegistry([profile])
    backend = MemoryCacheBackend()

    app.dependency_overrides[get_chain_registry] = lambda: registry
    app.dependency_overrides[get_cache_backend] = lambda: backend
    app.dependency_overrides[get_explorer_service] = lambda: explorer
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRootEndpoint:
    def test_api_info(self, client: TestClient) -> None:
        response = client.get("/api")

        assert response.status_code == 200
        data = response.json()
        assert data["health"] == "/api/v1/health"
        assert "version" in data


class TestHealthEndpoint:
    """Tests for health endpoint."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["cache_status"] == "connected"
        assert data["chains"] == 1


class TestChainsEndpoint:
    def test_list_chains(self, client: TestClient) -> None:
        response = client.get("/api/v1/chains")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        chain = data["chains"][0]
        assert chain["name"] == "cosmoshub"
        assert chain["chain_id"] == "cosmoshub-4"
        assert chain["rpc_count"] == 3


class TestCachedReads:
    """Reads carry freshness metadata and map failures to HTTP errors."""

    def test_stale_read_has_warning(self, client: TestClient, explorer: StubExplorer) -> None:
        response = client.get("/api/v1/chains/cosmoshub-4/validators")

        assert response.status_code == 200
        data = response.json()
        assert data["chain"] == "cosmoshub"
        assert data["stale"] is True
        assert data["refreshing"] is True
        assert data["warning"]
        assert data["data"][0]["moniker"] == "A"
        assert explorer.calls == [("validators", "cosmoshub")]

    def test_unknown_chain_is_404(self, client: TestClient) -> None:
        response = client.get("/api/v1/chains/juno/validators")

        assert response.status_code == 404
        assert "juno" in response.json()["detail"]

    def test_all_endpoints_failed_is_503(self, client: TestClient) -> None:
        response = client.get("/api/v1/chains/cosmoshub/status")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["code"] == "ALL_ENDPOINTS_FAILED"
        assert len(detail["attempts"]) == 3
        assert "timeout" in detail["attempts"][0]

    def test_account_prefix_checked(self, client: TestClient, explorer: StubExplorer) -> None:
        bad = client.get("/api/v1/chains/cosmoshub/accounts/osmo1abc")
        good = client.get("/api/v1/chains/cosmoshub/accounts/cosmos1abc")

        assert bad.status_code == 400
        assert good.status_code == 200
        assert explorer.calls == [("account", "cosmos1abc")]

    def test_params_module_name_checked(self, client: TestClient) -> None:
        assert client.get("/api/v1/chains/cosmoshub/params/staking").status_code == 200
        assert client.get("/api/v1/chains/cosmoshub/params/st-aking").status_code == 400


class TestDetailReads:
    """Block, consensus, validator, proposal and transaction history routes."""

    def test_block_by_height(self, client: TestClient, explorer: StubExplorer) -> None:
        response = client.get("/api/v1/chains/cosmoshub/blocks/1200")

        assert response.status_code == 200
        assert response.json()["data"] == {"height": 1200}
        assert explorer.calls == [("block", 1200)]

    def test_height_must_be_positive_integer(self, client: TestClient, explorer: StubExplorer) -> None:
        assert client.get("/api/v1/chains/cosmoshub/blocks/0").status_code == 422
        assert client.get("/api/v1/chains/cosmoshub/blocks/abc").status_code == 422
        assert explorer.calls == []

    def test_consensus(self, client: TestClient) -> None:
        response = client.get("/api/v1/chains/cosmoshub/consensus")

        assert response.status_code == 200
        assert response.json()["data"]["step"] == 3

    def test_validator_prefix_checked(self, client: TestClient, explorer: StubExplorer) -> None:
        bad = client.get("/api/v1/chains/cosmoshub/validators/cosmos1abc")
        good = client.get("/api/v1/chains/cosmoshub/validators/cosmosvaloper1abc")

        assert bad.status_code == 400
        assert good.status_code == 200
        assert explorer.calls == [("validator", "cosmosvaloper1abc")]

    def test_proposal_by_id(self, client: TestClient, explorer: StubExplorer) -> None:
        response = client.get("/api/v1/chains/cosmoshub/proposals/42")

        assert response.status_code == 200
        assert response.json()["data"]["proposal_id"] == "42"
        assert explorer.calls == [("proposal", 42)]

    def test_account_transactions_carry_refresh_warning(
        self, client: TestClient, explorer: StubExplorer
    ) -> None:
        response = client.get("/api/v1/chains/cosmoshub/accounts/cosmos1abc/transactions?limit=5")

        assert response.status_code == 200
        data = response.json()
        assert data["stale"] is True
        assert data["warning"].startswith("Refresh failed")
        assert explorer.calls == [("account_transactions", "cosmos1abc", 5)]
