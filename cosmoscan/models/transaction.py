"""Transaction intents, protocol messages and broadcast results."""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from cosmoscan.constants import BroadcastState


class Coin(BaseModel):
    """An amount of a single denomination, in base units."""

    model_config = ConfigDict(frozen=True)

    denom: str
    amount: str


class Message(BaseModel):
    """A protocol message ready for signing."""

    model_config = ConfigDict(frozen=True)

    type_url: str
    value: dict[str, Any]

    def to_signer_dict(self) -> dict[str, Any]:
        """Shape expected by signing wallets: ``{typeUrl, value}``."""
        return {"typeUrl": self.type_url, "value": self.value}


class Fee(BaseModel):
    """Transaction fee: coins paid plus the gas limit."""

    model_config = ConfigDict(frozen=True)

    amount: list[Coin]
    gas: str


# Intents. Amounts are integer strings in base units; the composer validates them.


class DelegateIntent(BaseModel):
    kind: Literal["delegate"] = "delegate"
    delegator_address: str
    validator_address: str
    amount: str


class UndelegateIntent(BaseModel):
    kind: Literal["undelegate"] = "undelegate"
    delegator_address: str
    validator_address: str
    amount: str


class RedelegateIntent(BaseModel):
    kind: Literal["redelegate"] = "redelegate"
    delegator_address: str
    src_validator_address: str
    dst_validator_address: str
    amount: str


class WithdrawRewardsIntent(BaseModel):
    kind: Literal["withdraw_rewards"] = "withdraw_rewards"
    delegator_address: str
    validator_address: str


class WithdrawCommissionIntent(BaseModel):
    kind: Literal["withdraw_commission"] = "withdraw_commission"
    validator_address: str


class WithdrawAllForValidatorIntent(BaseModel):
    """Withdraw a validator operator's own rewards and/or commission."""

    kind: Literal["withdraw_all_for_validator"] = "withdraw_all_for_validator"
    delegator_address: str
    validator_address: str
    has_rewards: bool
    has_commission: bool


class WithdrawAllAcrossValidatorsIntent(BaseModel):
    """Withdraw delegator rewards from every listed validator in one transaction."""

    kind: Literal["withdraw_all_across_validators"] = "withdraw_all_across_validators"
    delegator_address: str
    validator_addresses: list[str]


class SendIntent(BaseModel):
    kind: Literal["send"] = "send"
    from_address: str
    to_address: str
    amount: str
    denom: str | None = Field(default=None, description="Defaults to the chain base denom")


class VoteIntent(BaseModel):
    kind: Literal["vote"] = "vote"
    voter: str
    proposal_id: int | str
    option: int


TransactionIntent = Annotated[
    Union[
        DelegateIntent,
        UndelegateIntent,
        RedelegateIntent,
        WithdrawRewardsIntent,
        WithdrawCommissionIntent,
        WithdrawAllForValidatorIntent,
        WithdrawAllAcrossValidatorsIntent,
        SendIntent,
        VoteIntent,
    ],
    Field(discriminator="kind"),
]


class StateTransition(BaseModel):
    """Record of a broadcast state transition."""

    from_state: BroadcastState
    to_state: BroadcastState
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reason: str = ""


class BroadcastResult(BaseModel):
    """Outcome of a single orchestrated submission."""

    success: bool
    state: BroadcastState
    chain_id: str | None = None
    tx_hash: str | None = None
    code: int | None = None
    raw_log: str | None = None
    error_message: str | None = None
    history: list[StateTransition] = Field(default_factory=list)
