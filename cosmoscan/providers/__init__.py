"""Node access providers package."""

from cosmoscan.providers.failover import FailoverResolver, RequestSpec
from cosmoscan.providers.lcd import LcdClient
from cosmoscan.providers.rpc import RpcClient

__all__ = [
    "FailoverResolver",
    "LcdClient",
    "RequestSpec",
    "RpcClient",
]
