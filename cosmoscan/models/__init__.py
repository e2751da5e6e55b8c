"""Domain models package."""

from cosmoscan.models.cache import CachedRead, CacheEntry
from cosmoscan.models.chain import ChainProfile, ChainSummary, Endpoint, GasPriceTiers
from cosmoscan.models.node import ProbeResult, ReconciledIdentity
from cosmoscan.models.transaction import (
    BroadcastResult,
    Coin,
    DelegateIntent,
    Fee,
    Message,
    RedelegateIntent,
    SendIntent,
    StateTransition,
    TransactionIntent,
    UndelegateIntent,
    VoteIntent,
    WithdrawAllAcrossValidatorsIntent,
    WithdrawAllForValidatorIntent,
    WithdrawCommissionIntent,
    WithdrawRewardsIntent,
)

__all__ = [
    "BroadcastResult",
    "CachedRead",
    "CacheEntry",
    "ChainProfile",
    "ChainSummary",
    "Coin",
    "DelegateIntent",
    "Endpoint",
    "Fee",
    "GasPriceTiers",
    "Message",
    "ProbeResult",
    "ReconciledIdentity",
    "RedelegateIntent",
    "SendIntent",
    "StateTransition",
    "TransactionIntent",
    "UndelegateIntent",
    "VoteIntent",
    "WithdrawAllAcrossValidatorsIntent",
    "WithdrawAllForValidatorIntent",
    "WithdrawCommissionIntent",
    "WithdrawRewardsIntent",
]
