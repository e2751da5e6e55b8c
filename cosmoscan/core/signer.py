"""External signing wallet port.

Core logic only depends on these interfaces; a wallet adapter living
outside the core implements them.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from cosmoscan.models.chain import ChainProfile
from cosmoscan.models.transaction import Fee, Message


class SignerKey(BaseModel):
    """Account key exposed by the wallet for a chain."""

    name: str = ""
    address: str
    algo: str = "secp256k1"
    pub_key: bytes = b""
    is_hardware: bool = False


class OfflineSigner(ABC):
    """A chain-bound signer produced by the wallet."""

    @abstractmethod
    async def get_accounts(self) -> list[SignerKey]:
        """Accounts available to this signer."""
        ...

    @abstractmethod
    async def sign(
        self,
        signer_address: str,
        messages: list[Message],
        fee: Fee,
        memo: str = "",
    ) -> bytes:
        """
        Sign a transaction and return the serialized transaction bytes.

        Raises:
            SigningRejected: If the user declines.
        """
        ...


class Signer(ABC):
    """Wallet port: ``enable``, ``get_key``, ``suggest_chain``, ``get_offline_signer``."""

    @abstractmethod
    async def enable(self, chain_id: str) -> None:
        """
        Request access to a chain.

        Raises:
            UnknownChainError: If the wallet has no info for the chain.
            SigningRejected: If the user declines.
        """
        ...

    @abstractmethod
    async def get_key(self, chain_id: str) -> SignerKey:
        """Active account key for a chain."""
        ...

    @abstractmethod
    async def suggest_chain(self, chain_info: dict[str, Any]) -> None:
        """Register a chain the wallet does not know yet."""
        ...

    @abstractmethod
    async def get_offline_signer(self, chain_id: str) -> OfflineSigner:
        """Signer bound to ``chain_id``."""
        ...


def build_chain_info(profile: ChainProfile, chain_id: str | None = None) -> dict[str, Any]:
    """
    Wallet chain-info document for ``suggest_chain``.

    Args:
        profile: Chain profile.
        chain_id: Chain id to register; defaults to the configured id.

    Returns:
        Chain info with bech32 prefixes, currencies and gas price steps.
    """
    prefix = profile.address_prefix
    rpc = profile.rpc_endpoints
    lcd = profile.lcd_endpoints
    currency = {
        "coinDenom": profile.display_denom,
        "coinMinimalDenom": profile.base_denom,
        "coinDecimals": profile.exponent,
    }
    if profile.coingecko_id:
        currency["coinGeckoId"] = profile.coingecko_id

    tiers = profile.gas_price_tiers
    info: dict[str, Any] = {
        "chainId": chain_id or profile.configured_chain_id,
        "chainName": profile.name,
        "rpc": rpc[0].url if rpc else "",
        "rest": lcd[0].url if lcd else "",
        "bip44": {"coinType": profile.coin_type},
        "bech32Config": {
            "bech32PrefixAccAddr": prefix,
            "bech32PrefixAccPub": f"{prefix}pub",
            "bech32PrefixValAddr": f"{prefix}valoper",
            "bech32PrefixValPub": f"{prefix}valoperpub",
            "bech32PrefixConsAddr": f"{prefix}valcons",
            "bech32PrefixConsPub": f"{prefix}valconspub",
        },
        "currencies": [currency],
        "feeCurrencies": [
            {
                **currency,
                "gasPriceStep": {
                    "low": float(tiers.low),
                    "average": float(tiers.average),
                    "high": float(tiers.high),
                },
            }
        ],
        "stakeCurrency": currency,
    }
    if profile.coin_type == 60:
        info["features"] = ["eth-address-gen", "eth-key-sign"]
    return info
