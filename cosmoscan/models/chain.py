"""Chain catalog models: endpoints, gas tiers and chain profiles."""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cosmoscan.constants import (
    DEFAULT_ADDRESS_PREFIX,
    DEFAULT_BASE_DENOM,
    DEFAULT_COIN_TYPE,
    DEFAULT_DISPLAY_DENOM,
    DEFAULT_EXPONENT,
    DEFAULT_GAS_PRICE_AVERAGE,
    DEFAULT_GAS_PRICE_HIGH,
    DEFAULT_GAS_PRICE_LOW,
    GasTier,
    ProtocolKind,
)


class Endpoint(BaseModel):
    """A single node interface for a chain."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Base URL without trailing slash")
    provider: str = Field(default="", description="Operator of the node")
    kind: ProtocolKind
    indexer_capable: bool | None = Field(
        default=None, description="RPC only; unknown until probed"
    )

    @field_validator("url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("endpoint url must not be empty")
        return v


class GasPriceTiers(BaseModel):
    """Gas prices per gas unit, in base denomination."""

    model_config = ConfigDict(frozen=True)

    low: Decimal = Decimal(DEFAULT_GAS_PRICE_LOW)
    average: Decimal = Decimal(DEFAULT_GAS_PRICE_AVERAGE)
    high: Decimal = Decimal(DEFAULT_GAS_PRICE_HIGH)

    @classmethod
    def from_min_fee(cls, min_tx_fee: str | float | None) -> "GasPriceTiers":
        """Derive tiers from a chain's minimum fee: x1, x1.5 and x2."""
        if min_tx_fee in (None, ""):
            return cls()
        try:
            base = Decimal(str(min_tx_fee))
        except InvalidOperation as e:
            raise ValueError(f"invalid min_tx_fee: {min_tx_fee!r}") from e
        if base <= 0:
            return cls()
        return cls(low=base, average=base * Decimal("1.5"), high=base * 2)

    def for_tier(self, tier: GasTier) -> Decimal:
        """Price for a named tier."""
        return getattr(self, GasTier(tier).value)


class ChainProfile(BaseModel):
    """Static per-chain configuration and its ordered endpoint list."""

    model_config = ConfigDict(frozen=True)

    name: str
    configured_chain_id: str
    address_prefix: str = DEFAULT_ADDRESS_PREFIX
    base_denom: str = DEFAULT_BASE_DENOM
    display_denom: str = DEFAULT_DISPLAY_DENOM
    exponent: int = Field(default=DEFAULT_EXPONENT, ge=0)
    endpoints: tuple[Endpoint, ...]
    gas_price_tiers: GasPriceTiers = Field(default_factory=GasPriceTiers)
    coin_type: int = DEFAULT_COIN_TYPE
    sdk_version: str | None = None
    coingecko_id: str | None = None

    @model_validator(mode="after")
    def check_endpoints(self) -> "ChainProfile":
        """A chain without endpoints is unusable."""
        if not self.endpoints:
            raise ValueError(f"chain {self.name} has no endpoints")
        return self

    @property
    def rpc_endpoints(self) -> list[Endpoint]:
        """RPC endpoints in catalog order."""
        return [e for e in self.endpoints if e.kind == ProtocolKind.RPC]

    @property
    def lcd_endpoints(self) -> list[Endpoint]:
        """LCD endpoints in catalog order."""
        return [e for e in self.endpoints if e.kind == ProtocolKind.LCD]

    @classmethod
    def from_chain_json(cls, data: dict[str, Any]) -> "ChainProfile":
        """
        Build a profile from the chain-registry JSON layout.

        Args:
            data: Parsed chain file with ``chain_name``, ``chain_id``,
                ``api``, ``rpc``, ``assets`` and ``addr_prefix``.

        Returns:
            The chain profile.
        """
        name = data["chain_name"]
        endpoints = [
            Endpoint(url=e["address"], provider=e.get("provider", ""), kind=ProtocolKind.LCD)
            for e in data.get("api") or []
        ] + [
            Endpoint(url=e["address"], provider=e.get("provider", ""), kind=ProtocolKind.RPC)
            for e in data.get("rpc") or []
        ]

        assets = data.get("assets") or []
        asset = assets[0] if assets else {}

        return cls(
            name=name,
            configured_chain_id=data.get("chain_id") or name,
            address_prefix=data.get("addr_prefix") or DEFAULT_ADDRESS_PREFIX,
            base_denom=asset.get("base") or DEFAULT_BASE_DENOM,
            display_denom=asset.get("symbol") or asset.get("display") or DEFAULT_DISPLAY_DENOM,
            exponent=int(asset.get("exponent", DEFAULT_EXPONENT)),
            endpoints=tuple(endpoints),
            gas_price_tiers=GasPriceTiers.from_min_fee(data.get("min_tx_fee")),
            coin_type=int(data.get("coin_type") or DEFAULT_COIN_TYPE),
            sdk_version=data.get("sdk_version"),
            coingecko_id=asset.get("coingecko_id"),
        )


class ChainSummary(BaseModel):
    """Public view of a chain profile."""

    name: str
    chain_id: str
    address_prefix: str
    base_denom: str
    display_denom: str
    exponent: int
    rpc_count: int
    lcd_count: int

    @classmethod
    def from_profile(cls, profile: ChainProfile) -> "ChainSummary":
        return cls(
            name=profile.name,
            chain_id=profile.configured_chain_id,
            address_prefix=profile.address_prefix,
            base_denom=profile.base_denom,
            display_denom=profile.display_denom,
            exponent=profile.exponent,
            rpc_count=len(profile.rpc_endpoints),
            lcd_count=len(profile.lcd_endpoints),
        )
