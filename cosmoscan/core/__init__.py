"""Core module for base interfaces and abstractions."""

from cosmoscan.core.cache import CacheBackend
from cosmoscan.core.exceptions import (
    AggregateFailure,
    BroadcastRejected,
    CacheError,
    ChainMismatchWarning,
    CosmoscanError,
    EndpointError,
    InvalidTransitionError,
    SigningRejected,
    UnknownChainError,
    ValidationError,
)
from cosmoscan.core.signer import OfflineSigner, Signer, SignerKey

__all__ = [
    "AggregateFailure",
    "BroadcastRejected",
    "CacheBackend",
    "CacheError",
    "ChainMismatchWarning",
    "CosmoscanError",
    "EndpointError",
    "InvalidTransitionError",
    "OfflineSigner",
    "Signer",
    "SignerKey",
    "SigningRejected",
    "UnknownChainError",
    "ValidationError",
]
