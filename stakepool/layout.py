"""
Borsh decoding of stake pool program accounts.

Only decoding is implemented; the bot never writes these accounts itself.
"""
import struct
from typing import Callable, Optional, TypeVar

from solders.pubkey import Pubkey

from stakepool.models import (
    AccountType,
    Fee,
    Lockup,
    StakePool,
    StakeStatus,
    ValidatorList,
    ValidatorListHeader,
    ValidatorStakeInfo,
)

T = TypeVar("T")

PUBKEY_LEN = 32
# active u64 + transient u64 + last_update_epoch u64 + status u8 + vote pubkey
VALIDATOR_STAKE_INFO_LEN = 8 * 3 + 1 + PUBKEY_LEN


class LayoutError(ValueError):
    """Raised when account data does not match the expected layout."""


class _BorshReader:
    """Sequential little-endian reader over raw account data."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def _take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise LayoutError(
                f"Account data too short: need {end} bytes, have {len(self.data)}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self) -> int:
        return self._take(1)[0]

    def u32(self) -> int:
        return struct.unpack("<I", self._take(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self._take(8))[0]

    def i64(self) -> int:
        return struct.unpack("<q", self._take(8))[0]

    def pubkey(self) -> str:
        return str(Pubkey.from_bytes(self._take(PUBKEY_LEN)))

    def option(self, read: Callable[[], T]) -> Optional[T]:
        tag = self.u8()
        if tag == 0:
            return None
        if tag != 1:
            raise LayoutError(f"Invalid option tag {tag} at offset {self.offset - 1}")
        return read()

    def fee(self) -> Fee:
        return Fee(denominator=self.u64(), numerator=self.u64())


def _account_type(value: int, expected: AccountType) -> AccountType:
    try:
        account_type = AccountType(value)
    except ValueError as e:
        raise LayoutError(f"Unknown account type {value}") from e
    if account_type != expected:
        raise LayoutError(
            f"Expected account type {expected.name}, got {account_type.name}"
        )
    return account_type


def decode_stake_pool(data: bytes) -> StakePool:
    """Decode a StakePool account."""
    r = _BorshReader(data)
    account_type = _account_type(r.u8(), AccountType.STAKE_POOL)
    return StakePool(
        account_type=account_type,
        manager=r.pubkey(),
        staker=r.pubkey(),
        stake_deposit_authority=r.pubkey(),
        stake_withdraw_bump_seed=r.u8(),
        validator_list=r.pubkey(),
        reserve_stake=r.pubkey(),
        pool_mint=r.pubkey(),
        manager_fee_account=r.pubkey(),
        token_program_id=r.pubkey(),
        total_stake_lamports=r.u64(),
        pool_token_supply=r.u64(),
        last_update_epoch=r.u64(),
        lockup=Lockup(unix_timestamp=r.i64(), epoch=r.u64(), custodian=r.pubkey()),
        fee=r.fee(),
        next_epoch_fee=r.option(r.fee),
        preferred_deposit_validator_vote_address=r.option(r.pubkey),
        preferred_withdraw_validator_vote_address=r.option(r.pubkey),
        stake_deposit_fee=r.fee(),
        withdrawal_fee=r.fee(),
        next_withdrawal_fee=r.option(r.fee),
        stake_referral_fee=r.u8(),
        sol_deposit_authority=r.option(r.pubkey),
        sol_deposit_fee=r.fee(),
        sol_referral_fee=r.u8(),
    )


def decode_validator_list(data: bytes) -> ValidatorList:
    """
    Decode a ValidatorList account.

    The account is preallocated for max_validators entries; only the
    entries counted by the vector length prefix are returned.
    """
    r = _BorshReader(data)
    header = ValidatorListHeader(
        account_type=_account_type(r.u8(), AccountType.VALIDATOR_LIST),
        max_validators=r.u32(),
    )
    count = r.u32()
    if count > header.max_validators:
        raise LayoutError(
            f"Validator list holds {count} entries, max is {header.max_validators}"
        )

    validators = []
    for _ in range(count):
        active = r.u64()
        transient = r.u64()
        last_update_epoch = r.u64()
        status_raw = r.u8()
        try:
            status = StakeStatus(status_raw)
        except ValueError as e:
            raise LayoutError(f"Unknown stake status {status_raw}") from e
        validators.append(
            ValidatorStakeInfo(
                active_stake_lamports=active,
                transient_stake_lamports=transient,
                last_update_epoch=last_update_epoch,
                status=status,
                vote_account_address=r.pubkey(),
            )
        )
    return ValidatorList(header=header, validators=validators)
