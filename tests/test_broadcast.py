"""Tests for the broadcast orchestrator state machine."""

import httpx
import pytest

from cosmoscan.constants import BroadcastState
from cosmoscan.core.exceptions import InvalidTransitionError, ValidationError
from cosmoscan.models.chain import ChainProfile
from cosmoscan.models.transaction import DelegateIntent, VoteIntent
from cosmoscan.providers.failover import FailoverResolver
from cosmoscan.providers.rpc import RpcClient
from cosmoscan.services.broadcast import BroadcastOrchestrator
from cosmoscan.services.reconciler import ChainIdentityReconciler

RPC = "https://rpc0.example.com"
TX_HASH = "A1B2C3D4E5F6"


def delegate_intent(amount: str = "1000000") -> DelegateIntent:
    return DelegateIntent(
        delegator_address="cosmos1delegator",
        validator_address="cosmosvaloper1aaa",
        amount=amount,
    )


def broadcast_payload(code: int = 0, log: str = "[]") -> dict:
    return {
        "jsonrpc": "2.0",
        "id": -1,
        "result": {"code": code, "data": "", "log": log, "codespace": "", "hash": TX_HASH},
    }


@pytest.fixture
def make_orchestrator(resolver: FailoverResolver, profile: ChainProfile):
    rpc = RpcClient(resolver, read_timeout=2.0, broadcast_timeout=2.0)
    reconciler = ChainIdentityReconciler(rpc, timeout=2.0)

    def factory(signer) -> BroadcastOrchestrator:
        return BroadcastOrchestrator(profile=profile, signer=signer, rpc=rpc, reconciler=reconciler)

    return factory


class TestSuccessfulSubmission:
    """IDLE -> COMPOSING -> IDENTITY_CHECK -> SIGNING -> BROADCASTING -> CONFIRMED."""

    @pytest.mark.asyncio
    async def test_confirmed(self, make_orchestrator, wallet, network, make_status) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())
        orchestrator = make_orchestrator(wallet)

        result = await orchestrator.submit(delegate_intent(), memo="via cosmoscan")

        assert result.success is True
        assert result.state == BroadcastState.CONFIRMED
        assert result.tx_hash == TX_HASH
        assert result.chain_id == "cosmoshub-4"
        assert [t.to_state for t in result.history] == [
            BroadcastState.COMPOSING,
            BroadcastState.IDENTITY_CHECK,
            BroadcastState.SIGNING,
            BroadcastState.BROADCASTING,
            BroadcastState.CONFIRMED,
        ]
        assert orchestrator.is_terminal

    @pytest.mark.asyncio
    async def test_signer_receives_messages_and_fee(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        await make_orchestrator(wallet).submit(delegate_intent(), memo="hi")

        signed = wallet.signed[0]
        assert signed["memo"] == "hi"
        assert signed["fee"].gas == "300000"
        assert signed["fee"].amount[0].amount == "4500"
        assert signed["messages"][0].value["amount"] == {"denom": "uatom", "amount": "1000000"}

    @pytest.mark.asyncio
    async def test_signed_bytes_broadcast_as_hex(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        await make_orchestrator(wallet).submit(delegate_intent())

        request = network.requests[-1]
        assert request.url.path == "/broadcast_tx_sync"
        assert request.url.params["tx"] == "0x0a027369676e6564"

    @pytest.mark.asyncio
    async def test_explicit_gas_limit(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        await make_orchestrator(wallet).submit(
            VoteIntent(voter="cosmos1delegator", proposal_id=5, option=1),
            gas_limit=150000,
            gas_price="0.02",
        )

        assert wallet.signed[0]["fee"].gas == "150000"
        assert wallet.signed[0]["fee"].amount[0].amount == "3000"


class TestChainIdentity:
    """The wallet is always enabled for the live chain id."""

    @pytest.mark.asyncio
    async def test_mismatch_signs_for_live_id(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status(network="cosmoshub-5"))
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is True
        assert result.chain_id == "cosmoshub-5"
        assert ("enable", "cosmoshub-5") in wallet.calls
        assert ("enable", "cosmoshub-4") not in wallet.calls
        assert ("sign", "cosmoshub-5") in wallet.calls

    @pytest.mark.asyncio
    async def test_unknown_chain_is_suggested_then_enabled(
        self, make_orchestrator, make_wallet, network, make_status
    ) -> None:
        wallet = make_wallet(known_chains=set())
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is True
        assert [c[0] for c in wallet.calls[:3]] == ["enable", "suggest_chain", "enable"]
        chain_info = wallet.suggested[0]
        assert chain_info["chainId"] == "cosmoshub-4"
        assert chain_info["bech32Config"]["bech32PrefixAccAddr"] == "cosmos"
        assert chain_info["stakeCurrency"]["coinMinimalDenom"] == "uatom"

    @pytest.mark.asyncio
    async def test_unreachable_status_uses_configured_id(
        self, make_orchestrator, wallet, network
    ) -> None:
        network.add(RPC + "/status", httpx.ConnectError("refused"))
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is True
        assert result.chain_id == "cosmoshub-4"


class TestFailures:
    """Every failure ends in FAILED."""

    @pytest.mark.asyncio
    async def test_validation_failure_touches_nothing(
        self, make_orchestrator, wallet, network
    ) -> None:
        orchestrator = make_orchestrator(wallet)

        with pytest.raises(ValidationError):
            await orchestrator.submit(delegate_intent(amount="0"))

        assert orchestrator.state == BroadcastState.FAILED
        assert wallet.calls == []
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_signer_rejection(
        self, make_orchestrator, make_wallet, network, make_status
    ) -> None:
        wallet = make_wallet(reject=True)
        network.add(RPC + "/status", make_status())

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is False
        assert result.state == BroadcastState.FAILED
        assert "rejected" in result.error_message.lower()
        assert result.history[-2].to_state == BroadcastState.SIGNING
        assert not any(r.url.path == "/broadcast_tx_sync" for r in network.requests)

    @pytest.mark.asyncio
    async def test_no_accounts(self, make_orchestrator, make_wallet, network, make_status) -> None:
        network.add(RPC + "/status", make_status())

        result = await make_orchestrator(make_wallet(address="")).submit(delegate_intent())

        assert result.success is False
        assert result.state == BroadcastState.FAILED

    @pytest.mark.asyncio
    async def test_nonzero_code_is_failure(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status())
        network.add(
            RPC + "/broadcast_tx_sync",
            broadcast_payload(code=5, log="insufficient funds"),
        )

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is False
        assert result.state == BroadcastState.FAILED
        assert result.code == 5
        assert result.raw_log == "insufficient funds"
        assert result.tx_hash == TX_HASH

    @pytest.mark.asyncio
    async def test_node_failure_during_broadcast(
        self, make_orchestrator, wallet, network, make_status
    ) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", httpx.Response(502))

        result = await make_orchestrator(wallet).submit(delegate_intent())

        assert result.success is False
        assert result.history[-2].to_state == BroadcastState.BROADCASTING
        broadcasts = [r for r in network.requests if r.url.path == "/broadcast_tx_sync"]
        assert len(broadcasts) == 1


class TestSingleUse:
    """An orchestrator cannot be reused after reaching a terminal state."""

    @pytest.mark.asyncio
    async def test_resubmit_raises(self, make_orchestrator, wallet, network, make_status) -> None:
        network.add(RPC + "/status", make_status())
        network.add(RPC + "/broadcast_tx_sync", broadcast_payload())
        orchestrator = make_orchestrator(wallet)
        await orchestrator.submit(delegate_intent())

        with pytest.raises(InvalidTransitionError):
            await orchestrator.submit(delegate_intent())

    @pytest.mark.asyncio
    async def test_invalid_direct_transition(self, make_orchestrator, wallet) -> None:
        orchestrator = make_orchestrator(wallet)

        assert orchestrator.can_transition_to(BroadcastState.COMPOSING)
        assert not orchestrator.can_transition_to(BroadcastState.BROADCASTING)
        with pytest.raises(InvalidTransitionError):
            orchestrator.transition_to(BroadcastState.CONFIRMED)
