"""Explorer view models returned by the read surface."""

from typing import Any

from pydantic import BaseModel, Field


class ChainStatus(BaseModel):
    """Live node status for a chain."""

    chain: str
    chain_id: str
    configured_chain_id: str
    latest_block_height: int | None = None
    latest_block_time: str | None = None
    catching_up: bool | None = None
    node_version: str | None = None
    tx_index: bool = False
    endpoint: str


class BlockSummary(BaseModel):
    height: int
    hash: str | None = None
    time: str | None = None
    proposer_address: str | None = None
    tx_count: int = 0


class ValidatorSummary(BaseModel):
    address: str = Field(..., description="Operator (valoper) address")
    moniker: str = "Unknown"
    voting_power: str = Field(default="0", description="Bonded tokens in base units")
    voting_power_display: str = "0"
    commission: str = "0"
    status: str = "BOND_STATUS_UNSPECIFIED"
    jailed: bool = False
    identity: str | None = None

    @property
    def active(self) -> bool:
        return self.status == "BOND_STATUS_BONDED" and not self.jailed


class DisplayCoin(BaseModel):
    denom: str
    amount: str
    display_amount: str | None = Field(
        default=None, description="Set when the denom is the chain's base denom"
    )


class DelegationSummary(BaseModel):
    validator_address: str
    amount: DisplayCoin


class AccountOverview(BaseModel):
    address: str
    account_number: str | None = None
    sequence: str | None = None
    balances: list[DisplayCoin] = Field(default_factory=list)
    delegations: list[DelegationSummary] = Field(default_factory=list)
    unbonding_count: int = 0
    rewards_total: list[DisplayCoin] = Field(default_factory=list)


class ProposalSummary(BaseModel):
    proposal_id: str
    title: str = ""
    status: str = ""
    submit_time: str | None = None
    voting_end_time: str | None = None
    final_tally: dict[str, Any] = Field(default_factory=dict)


class IndexerStatus(BaseModel):
    endpoint: str
    capable: bool
    fallback: bool
    warning: str | None = None


class ValidatorDetail(ValidatorSummary):
    """One validator with its share of bonded stake and accrued commission."""

    website: str | None = None
    details: str | None = None
    max_commission: str | None = None
    min_self_delegation: str | None = None
    voting_power_share: str | None = Field(
        default=None, description="Percentage of bonded tokens, 2 decimals"
    )
    accrued_commission: list[DisplayCoin] = Field(default_factory=list)


class ProposalDetail(ProposalSummary):
    description: str = ""
    voting_start_time: str | None = None
    deposit_end_time: str | None = None
    total_deposit: list[DisplayCoin] = Field(default_factory=list)


class ConsensusStatus(BaseModel):
    """Round state of the consensus engine."""

    height: int | None = None
    round: int | None = None
    step: int | None = None
    start_time: str | None = None
    proposer_address: str | None = None


class TxSummary(BaseModel):
    hash: str
    height: int
    code: int = 0
    gas_wanted: str | None = None
    gas_used: str | None = None


class AccountTransactions(BaseModel):
    """Transactions sent by an address, newest first, from the indexer endpoint."""

    address: str
    endpoint: str
    total_count: int = 0
    txs: list[TxSummary] = Field(default_factory=list)
    warning: str | None = None
