"""
Broadcast orchestrator.

Drives a single transaction through compose, chain-identity check,
signing and broadcast:

    IDLE -> COMPOSING -> IDENTITY_CHECK -> SIGNING -> BROADCASTING -> CONFIRMED
                                                                   \\-> FAILED

Any step may move to FAILED. An orchestrator is single-use; resubmitting
requires a fresh instance. No retries are made and the account sequence
is left to the signer, so concurrent submissions from one account can
still race on chain.
"""

import logging
from decimal import Decimal

from cosmoscan.constants import TERMINAL_STATES, VALID_TRANSITIONS, BroadcastState, GasTier
from cosmoscan.core.exceptions import (
    AggregateFailure,
    BroadcastRejected,
    CosmoscanError,
    InvalidTransitionError,
    SigningRejected,
    UnknownChainError,
    ValidationError,
)
from cosmoscan.core.signer import OfflineSigner, Signer, build_chain_info
from cosmoscan.models.chain import ChainProfile, Endpoint
from cosmoscan.models.transaction import BroadcastResult, StateTransition, TransactionIntent
from cosmoscan.providers.rpc import RpcClient
from cosmoscan.services.composer import compose, suggested_gas_limit
from cosmoscan.services.fees import compute_fee
from cosmoscan.services.reconciler import ChainIdentityReconciler

logger = logging.getLogger(__name__)


class BroadcastOrchestrator:
    """Single-use state machine for one signed submission."""

    def __init__(
        self,
        profile: ChainProfile,
        signer: Signer,
        rpc: RpcClient,
        reconciler: ChainIdentityReconciler,
        rpc_endpoint: Endpoint | None = None,
        tier: GasTier = GasTier.AVERAGE,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            profile: Chain to submit to.
            signer: External wallet port.
            rpc: RPC client used for broadcasting.
            reconciler: Chain-identity reconciler.
            rpc_endpoint: Endpoint for identity check and broadcast;
                defaults to the first catalog RPC endpoint.
            tier: Gas price tier used when no explicit price is given.
        """
        self._profile = profile
        self._signer = signer
        self._rpc = rpc
        self._reconciler = reconciler
        self._rpc_endpoint = rpc_endpoint
        self._tier = tier
        self.state = BroadcastState.IDLE
        self.history: list[StateTransition] = []
        self.chain_id: str | None = None

    def can_transition_to(self, new_state: BroadcastState) -> bool:
        return new_state in VALID_TRANSITIONS.get(self.state, [])

    def transition_to(self, new_state: BroadcastState, reason: str = "") -> StateTransition:
        """
        Move to a new state.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        if not self.can_transition_to(new_state):
            raise InvalidTransitionError(self.state, new_state)
        transition = StateTransition(from_state=self.state, to_state=new_state, reason=reason)
        self.history.append(transition)
        logger.debug(f"[Broadcast] {self.state.value} -> {new_state.value} {reason}".rstrip())
        self.state = new_state
        return transition

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def _fail(
        self,
        message: str,
        code: int | None = None,
        raw_log: str | None = None,
        tx_hash: str | None = None,
    ) -> BroadcastResult:
        self.transition_to(BroadcastState.FAILED, message)
        logger.warning(f"[Broadcast] Failed on {self._profile.name}: {message}")
        return BroadcastResult(
            success=False,
            state=self.state,
            chain_id=self.chain_id,
            tx_hash=tx_hash,
            code=code,
            raw_log=raw_log,
            error_message=message,
            history=list(self.history),
        )

    def _select_endpoint(self) -> Endpoint:
        if self._rpc_endpoint is not None:
            return self._rpc_endpoint
        endpoints = self._profile.rpc_endpoints
        if not endpoints:
            raise ValidationError("rpc_endpoint", f"chain {self._profile.name} has no RPC endpoints")
        return endpoints[0]

    async def _open_session(self, chain_id: str) -> OfflineSigner:
        """Enable the wallet for ``chain_id``, registering the chain if unknown."""
        try:
            await self._signer.enable(chain_id)
        except UnknownChainError:
            logger.info(f"[Broadcast] Wallet does not know {chain_id}, suggesting chain")
            await self._signer.suggest_chain(build_chain_info(self._profile, chain_id))
            await self._signer.enable(chain_id)
        return await self._signer.get_offline_signer(chain_id)

    async def submit(
        self,
        intent: TransactionIntent,
        gas_limit: int | None = None,
        memo: str = "",
        gas_price: Decimal | str | None = None,
    ) -> BroadcastResult:
        """
        Compose, sign and broadcast an intent.

        Args:
            intent: What to submit.
            gas_limit: Gas limit; defaults to the intent's suggested limit.
            memo: Transaction memo.
            gas_price: Price per gas unit; defaults to the configured tier.

        Returns:
            The terminal result. Signer rejection, broadcast rejection and
            node failures are reported here with ``success=False``.

        Raises:
            InvalidTransitionError: If this orchestrator was already used.
            ValidationError: If the intent is malformed. The orchestrator
                ends in FAILED without touching the signer or network.
        """
        self.transition_to(BroadcastState.COMPOSING, intent.kind)

        try:
            messages = compose(intent, self._profile)
            fee = compute_fee(
                gas_limit if gas_limit is not None else suggested_gas_limit(intent),
                gas_price=gas_price,
                profile=self._profile,
                tier=self._tier,
            )
            endpoint = self._select_endpoint()
        except ValidationError as e:
            self._fail(e.message)
            raise

        self.transition_to(BroadcastState.IDENTITY_CHECK, endpoint.url)
        identity = await self._reconciler.reconcile(self._profile.configured_chain_id, endpoint)
        self.chain_id = identity.chain_id

        self.transition_to(BroadcastState.SIGNING, identity.chain_id)
        try:
            offline_signer = await self._open_session(identity.chain_id)
            accounts = await offline_signer.get_accounts()
            if not accounts:
                return self._fail("Signer returned no accounts")
            tx_bytes = await offline_signer.sign(accounts[0].address, messages, fee, memo)
        except SigningRejected as e:
            return self._fail(e.message)
        except CosmoscanError as e:
            return self._fail(f"Signer error: {e.message}")
        except Exception as e:
            self._fail(f"Signer error: {e}")
            raise

        self.transition_to(BroadcastState.BROADCASTING, endpoint.url)
        try:
            response = await self._rpc.broadcast_tx_sync(endpoint, tx_bytes)
        except AggregateFailure as e:
            return self._fail(f"Broadcast failed: {e.message}")
        except Exception as e:
            self._fail(f"Broadcast failed: {e}")
            raise

        code = int(response.get("code") or 0)
        tx_hash = response.get("hash")
        raw_log = response.get("log") or ""

        if code != 0:
            rejected = BroadcastRejected(code, raw_log, tx_hash)
            return self._fail(rejected.message, code=code, raw_log=raw_log, tx_hash=tx_hash)

        self.transition_to(BroadcastState.CONFIRMED, tx_hash or "")
        logger.info(f"[Broadcast] Confirmed {tx_hash} on {identity.chain_id}")
        return BroadcastResult(
            success=True,
            state=self.state,
            chain_id=identity.chain_id,
            tx_hash=tx_hash,
            code=code,
            raw_log=raw_log or None,
            history=list(self.history),
        )
