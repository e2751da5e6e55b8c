"""
Build protocol messages from transaction intents.

Composition is pure: intents are validated, then mapped onto staking,
distribution, bank and gov messages. No signer or network access.
"""

import logging

from cosmoscan.constants import (
    GAS_LIMIT_MULTI_VALIDATOR,
    GAS_LIMIT_SIMPLE,
    GAS_LIMIT_STAKING,
    MSG_BEGIN_REDELEGATE,
    MSG_DELEGATE,
    MSG_SEND,
    MSG_UNDELEGATE,
    MSG_VOTE,
    MSG_WITHDRAW_DELEGATOR_REWARD,
    MSG_WITHDRAW_VALIDATOR_COMMISSION,
    VoteOption,
)
from cosmoscan.core.exceptions import ValidationError
from cosmoscan.models.chain import ChainProfile
from cosmoscan.models.transaction import (
    DelegateIntent,
    Message,
    RedelegateIntent,
    SendIntent,
    TransactionIntent,
    UndelegateIntent,
    VoteIntent,
    WithdrawAllAcrossValidatorsIntent,
    WithdrawAllForValidatorIntent,
    WithdrawCommissionIntent,
    WithdrawRewardsIntent,
)

logger = logging.getLogger(__name__)


def _positive_amount(amount: str, field: str = "amount") -> str:
    text = str(amount).strip()
    if not (text.isascii() and text.isdigit()):
        raise ValidationError(field, f"must be an integer in base units, got {amount!r}")
    if int(text) <= 0:
        raise ValidationError(field, "must be greater than zero")
    return str(int(text))


def _required(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(field, "is required")
    return value.strip()


def _proposal_id(value: int | str) -> str:
    text = str(value).strip()
    if isinstance(value, bool) or not (text.isascii() and text.isdigit()) or int(text) <= 0:
        raise ValidationError("proposal_id", f"must be a positive integer, got {value!r}")
    return str(int(text))


def _vote_option(value: int) -> int:
    try:
        return VoteOption(value).value
    except ValueError as e:
        raise ValidationError(
            "option", "must be 1 (Yes), 2 (Abstain), 3 (No) or 4 (NoWithVeto)"
        ) from e


def _coin(denom: str, amount: str) -> dict[str, str]:
    return {"denom": denom, "amount": amount}


def compose(intent: TransactionIntent, profile: ChainProfile) -> list[Message]:
    """
    Compose protocol messages for an intent.

    Args:
        intent: A validated-on-entry transaction intent.
        profile: Chain profile supplying the default denomination.

    Returns:
        Messages in signing order.

    Raises:
        ValidationError: If the intent is malformed.
    """
    messages = compose_messages(intent, denom=profile.base_denom)
    logger.debug(f"[Composer] {intent.kind} -> {len(messages)} message(s) on {profile.name}")
    return messages


def compose_messages(intent: TransactionIntent, denom: str) -> list[Message]:
    """Compose messages using ``denom`` for staking and default send amounts."""
    if isinstance(intent, DelegateIntent):
        return [
            Message(
                type_url=MSG_DELEGATE,
                value={
                    "delegatorAddress": _required(intent.delegator_address, "delegator_address"),
                    "validatorAddress": _required(intent.validator_address, "validator_address"),
                    "amount": _coin(denom, _positive_amount(intent.amount)),
                },
            )
        ]

    if isinstance(intent, UndelegateIntent):
        return [
            Message(
                type_url=MSG_UNDELEGATE,
                value={
                    "delegatorAddress": _required(intent.delegator_address, "delegator_address"),
                    "validatorAddress": _required(intent.validator_address, "validator_address"),
                    "amount": _coin(denom, _positive_amount(intent.amount)),
                },
            )
        ]

    if isinstance(intent, RedelegateIntent):
        src = _required(intent.src_validator_address, "src_validator_address")
        dst = _required(intent.dst_validator_address, "dst_validator_address")
        if src == dst:
            raise ValidationError("dst_validator_address", "must differ from the source validator")
        return [
            Message(
                type_url=MSG_BEGIN_REDELEGATE,
                value={
                    "delegatorAddress": _required(intent.delegator_address, "delegator_address"),
                    "validatorSrcAddress": src,
                    "validatorDstAddress": dst,
                    "amount": _coin(denom, _positive_amount(intent.amount)),
                },
            )
        ]

    if isinstance(intent, WithdrawRewardsIntent):
        return [
            _withdraw_reward(
                _required(intent.delegator_address, "delegator_address"),
                _required(intent.validator_address, "validator_address"),
            )
        ]

    if isinstance(intent, WithdrawCommissionIntent):
        return [_withdraw_commission(_required(intent.validator_address, "validator_address"))]

    if isinstance(intent, WithdrawAllForValidatorIntent):
        if not intent.has_rewards and not intent.has_commission:
            raise ValidationError("has_rewards", "nothing to withdraw: no rewards and no commission")
        delegator = _required(intent.delegator_address, "delegator_address")
        validator = _required(intent.validator_address, "validator_address")
        messages = []
        if intent.has_rewards:
            messages.append(_withdraw_reward(delegator, validator))
        if intent.has_commission:
            messages.append(_withdraw_commission(validator))
        return messages

    if isinstance(intent, WithdrawAllAcrossValidatorsIntent):
        if not intent.validator_addresses:
            raise ValidationError("validator_addresses", "must not be empty")
        delegator = _required(intent.delegator_address, "delegator_address")
        return [
            _withdraw_reward(delegator, _required(v, "validator_addresses"))
            for v in intent.validator_addresses
        ]

    if isinstance(intent, SendIntent):
        return [
            Message(
                type_url=MSG_SEND,
                value={
                    "fromAddress": _required(intent.from_address, "from_address"),
                    "toAddress": _required(intent.to_address, "to_address"),
                    "amount": [_coin(intent.denom or denom, _positive_amount(intent.amount))],
                },
            )
        ]

    if isinstance(intent, VoteIntent):
        return [
            Message(
                type_url=MSG_VOTE,
                value={
                    "proposalId": _proposal_id(intent.proposal_id),
                    "voter": _required(intent.voter, "voter"),
                    "option": _vote_option(intent.option),
                },
            )
        ]

    raise ValidationError("kind", f"unsupported intent {type(intent).__name__}")


def _withdraw_reward(delegator: str, validator: str) -> Message:
    return Message(
        type_url=MSG_WITHDRAW_DELEGATOR_REWARD,
        value={"delegatorAddress": delegator, "validatorAddress": validator},
    )


def _withdraw_commission(validator: str) -> Message:
    return Message(
        type_url=MSG_WITHDRAW_VALIDATOR_COMMISSION,
        value={"validatorAddress": validator},
    )


def suggested_gas_limit(intent: TransactionIntent) -> int:
    """Default gas limit for an intent's operation."""
    if isinstance(intent, (SendIntent, VoteIntent)):
        return GAS_LIMIT_SIMPLE
    if isinstance(intent, WithdrawAllAcrossValidatorsIntent):
        return GAS_LIMIT_MULTI_VALIDATOR
    return GAS_LIMIT_STAKING
