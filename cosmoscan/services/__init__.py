"""Services package."""

from cosmoscan.services.broadcast import BroadcastOrchestrator
from cosmoscan.services.chain_registry import ChainRegistry
from cosmoscan.services.explorer import ExplorerService
from cosmoscan.services.prober import CapabilityProber
from cosmoscan.services.reconciler import ChainIdentityReconciler
from cosmoscan.services.session import ExplorerSession

__all__ = [
    "BroadcastOrchestrator",
    "CapabilityProber",
    "ChainIdentityReconciler",
    "ChainRegistry",
    "ExplorerService",
    "ExplorerSession",
]
