"""Application constants, protocol enums and message type URLs."""

from enum import Enum


class ProtocolKind(str, Enum):
    """Node interface an endpoint speaks."""

    RPC = "rpc"
    LCD = "lcd"


class FailureReason(str, Enum):
    """Why a single endpoint attempt was rejected by the resolver."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    NETWORK_FAILURE = "network_failure"
    EMPTY_PAYLOAD = "empty_payload"
    INVALID_PAYLOAD = "invalid_payload"


class BroadcastState(str, Enum):
    """Broadcast orchestrator states."""

    IDLE = "IDLE"
    COMPOSING = "COMPOSING"
    IDENTITY_CHECK = "IDENTITY_CHECK"
    SIGNING = "SIGNING"
    BROADCASTING = "BROADCASTING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


# Valid orchestrator transitions. Every non-terminal state may fail.
VALID_TRANSITIONS: dict[BroadcastState, list[BroadcastState]] = {
    BroadcastState.IDLE: [BroadcastState.COMPOSING, BroadcastState.FAILED],
    BroadcastState.COMPOSING: [BroadcastState.IDENTITY_CHECK, BroadcastState.FAILED],
    BroadcastState.IDENTITY_CHECK: [BroadcastState.SIGNING, BroadcastState.FAILED],
    BroadcastState.SIGNING: [BroadcastState.BROADCASTING, BroadcastState.FAILED],
    BroadcastState.BROADCASTING: [BroadcastState.CONFIRMED, BroadcastState.FAILED],
    BroadcastState.CONFIRMED: [],
    BroadcastState.FAILED: [],
}

TERMINAL_STATES: frozenset[BroadcastState] = frozenset(
    {BroadcastState.CONFIRMED, BroadcastState.FAILED}
)


class VoteOption(int, Enum):
    """Governance vote options as encoded in MsgVote."""

    YES = 1
    ABSTAIN = 2
    NO = 3
    NO_WITH_VETO = 4


class GasTier(str, Enum):
    """Named gas price tiers."""

    LOW = "low"
    AVERAGE = "average"
    HIGH = "high"


class BondStatus(str, Enum):
    """Validator bond status as reported by the staking module."""

    BONDED = "BOND_STATUS_BONDED"
    UNBONDING = "BOND_STATUS_UNBONDING"
    UNBONDED = "BOND_STATUS_UNBONDED"


# Protobuf type URLs
MSG_DELEGATE = "/cosmos.staking.v1beta1.MsgDelegate"
MSG_UNDELEGATE = "/cosmos.staking.v1beta1.MsgUndelegate"
MSG_BEGIN_REDELEGATE = "/cosmos.staking.v1beta1.MsgBeginRedelegate"
MSG_WITHDRAW_DELEGATOR_REWARD = "/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward"
MSG_WITHDRAW_VALIDATOR_COMMISSION = (
    "/cosmos.distribution.v1beta1.MsgWithdrawValidatorCommission"
)
MSG_SEND = "/cosmos.bank.v1beta1.MsgSend"
MSG_VOTE = "/cosmos.gov.v1beta1.MsgVote"

# Suggested gas limits per operation (callers pass these explicitly)
GAS_LIMIT_STAKING = 300_000
GAS_LIMIT_SIMPLE = 200_000
GAS_LIMIT_MULTI_VALIDATOR = 500_000

# Gas price tiers used when a chain config carries no min_tx_fee
DEFAULT_GAS_PRICE_LOW = "0.01"
DEFAULT_GAS_PRICE_AVERAGE = "0.025"
DEFAULT_GAS_PRICE_HIGH = "0.04"

# Defaults for chains that omit fields in their config
DEFAULT_ADDRESS_PREFIX = "cosmos"
DEFAULT_COIN_TYPE = 118
DEFAULT_BASE_DENOM = "uatom"
DEFAULT_DISPLAY_DENOM = "ATOM"
DEFAULT_EXPONENT = 6

# Display formatting
DISPLAY_MAX_FRACTION_DIGITS = 6

# Read cache
CACHE_NAMESPACE = "cosmoscan"

# Default TTLs per resource kind, in milliseconds
CACHE_TTL_MS: dict[str, int] = {
    "chains": 3_600_000,
    "validators": 30_000,
    "blocks": 10_000,
    "transactions": 10_000,
    "proposals": 60_000,
    "network": 30_000,
    "accounts": 30_000,
    "params": 60_000,
}
