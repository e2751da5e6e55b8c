"""Transaction fee calculation."""

from decimal import ROUND_CEILING, Decimal, InvalidOperation, localcontext

from cosmoscan.constants import GasTier
from cosmoscan.core.exceptions import ValidationError
from cosmoscan.models.chain import ChainProfile
from cosmoscan.models.transaction import Coin, Fee


def _gas_limit(gas_limit: int) -> int:
    if isinstance(gas_limit, bool) or not isinstance(gas_limit, int) or gas_limit <= 0:
        raise ValidationError("gas_limit", f"must be a positive integer, got {gas_limit!r}")
    return gas_limit


def _gas_price(gas_price: Decimal | str | int) -> Decimal:
    if isinstance(gas_price, float):
        raise ValidationError("gas_price", "floats are not accepted; pass a string or Decimal")
    try:
        price = Decimal(str(gas_price))
    except InvalidOperation as e:
        raise ValidationError("gas_price", f"malformed value {gas_price!r}") from e
    if not price.is_finite() or price < 0:
        raise ValidationError("gas_price", "must be a non-negative number")
    return price


def compute_fee(
    gas_limit: int,
    gas_price: Decimal | str | int | None = None,
    denom: str | None = None,
    profile: ChainProfile | None = None,
    tier: GasTier = GasTier.AVERAGE,
) -> Fee:
    """
    Compute the fee for a transaction: ``ceil(gas_limit * gas_price)``.

    Args:
        gas_limit: Caller-supplied gas limit.
        gas_price: Price per gas unit; defaults to the profile's tier price.
        denom: Fee denomination; defaults to the profile's base denom.
        profile: Chain profile supplying defaults.
        tier: Gas price tier used when no explicit price is given.

    Returns:
        The fee with a single coin.

    Raises:
        ValidationError: On a non-positive gas limit, a malformed price, or
            missing defaults when no profile is given.
    """
    limit = _gas_limit(gas_limit)

    if gas_price is None:
        if profile is None:
            raise ValidationError("gas_price", "required when no chain profile is given")
        price = profile.gas_price_tiers.for_tier(tier)
    else:
        price = _gas_price(gas_price)

    fee_denom = denom or (profile.base_denom if profile else None)
    if not fee_denom:
        raise ValidationError("denom", "required when no chain profile is given")

    with localcontext() as ctx:
        ctx.prec = 60
        amount = (Decimal(limit) * price).to_integral_value(rounding=ROUND_CEILING)

    return Fee(amount=[Coin(denom=fee_denom, amount=str(int(amount)))], gas=str(limit))
