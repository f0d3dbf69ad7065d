"""
Package containing SPL stake pool program logic shared by the bot.

Defines the on-chain account models, their Borsh decoding, and the
program-derived addresses the bot needs to inspect a pool.

NOTE: Bot-specific models (decisions, reports) are in pool_bot.models
"""

from stakepool.models import (
    AccountType,
    StakeStatus,
    Fee,
    Lockup,
    StakePool,
    ValidatorStakeInfo,
    ValidatorListHeader,
    ValidatorList,
)

from stakepool.layout import (
    LayoutError,
    decode_stake_pool,
    decode_validator_list,
)

from stakepool.addresses import (
    STAKE_POOL_PROGRAM_ID,
    STAKE_STATE_LEN,
    find_transient_stake_address,
    is_valid_address,
    to_pubkey,
)

__all__ = [
    # Models
    "AccountType",
    "StakeStatus",
    "Fee",
    "Lockup",
    "StakePool",
    "ValidatorStakeInfo",
    "ValidatorListHeader",
    "ValidatorList",
    # Layout
    "LayoutError",
    "decode_stake_pool",
    "decode_validator_list",
    # Addresses
    "STAKE_POOL_PROGRAM_ID",
    "STAKE_STATE_LEN",
    "find_transient_stake_address",
    "is_valid_address",
    "to_pubkey",
]
