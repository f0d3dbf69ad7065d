"""
On-chain account models for the SPL stake pool program.

These mirror the Borsh layouts of the StakePool and ValidatorList accounts.
Addresses are kept as base58 strings.
"""
from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountType(IntEnum):
    """Discriminator stored in the first byte of every pool-owned account."""

    UNINITIALIZED = 0
    STAKE_POOL = 1
    VALIDATOR_LIST = 2


class StakeStatus(IntEnum):
    """Status of a validator stake account inside the pool."""

    ACTIVE = 0
    DEACTIVATING_TRANSIENT = 1
    READY_FOR_REMOVAL = 2


class Fee(BaseModel):
    model_config = ConfigDict(frozen=True)

    denominator: int = Field(..., ge=0)
    numerator: int = Field(..., ge=0)


class Lockup(BaseModel):
    model_config = ConfigDict(frozen=True)

    unix_timestamp: int
    epoch: int = Field(..., ge=0)
    custodian: str


class StakePool(BaseModel):
    """Decoded StakePool account."""

    model_config = ConfigDict(frozen=True)

    account_type: AccountType
    manager: str
    staker: str
    stake_deposit_authority: str
    stake_withdraw_bump_seed: int
    validator_list: str = Field(..., description="Address of the ValidatorList account")
    reserve_stake: str = Field(..., description="Address of the reserve stake account")
    pool_mint: str
    manager_fee_account: str
    token_program_id: str
    total_stake_lamports: int
    pool_token_supply: int
    last_update_epoch: int
    lockup: Lockup
    fee: Fee
    next_epoch_fee: Optional[Fee] = None
    preferred_deposit_validator_vote_address: Optional[str] = None
    preferred_withdraw_validator_vote_address: Optional[str] = None
    stake_deposit_fee: Fee
    withdrawal_fee: Fee
    next_withdrawal_fee: Optional[Fee] = None
    stake_referral_fee: int
    sol_deposit_authority: Optional[str] = None
    sol_deposit_fee: Fee
    sol_referral_fee: int


class ValidatorStakeInfo(BaseModel):
    """One entry of the pool's validator list."""

    model_config = ConfigDict(frozen=True)

    active_stake_lamports: int
    transient_stake_lamports: int
    last_update_epoch: int
    status: StakeStatus
    vote_account_address: str


class ValidatorListHeader(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_type: AccountType
    max_validators: int


class ValidatorList(BaseModel):
    """Decoded ValidatorList account."""

    model_config = ConfigDict(frozen=True)

    header: ValidatorListHeader
    validators: List[ValidatorStakeInfo] = Field(default_factory=list)

    def vote_accounts(self) -> List[str]:
        return [v.vote_account_address for v in self.validators]

    def contains(self, vote_account_address: str) -> bool:
        return vote_account_address in self.vote_accounts()
