"""Program-derived addresses used by the stake pool program."""
from typing import Tuple, Union

from solders.pubkey import Pubkey

# Mainnet SPL stake pool program
STAKE_POOL_PROGRAM_ID = "SPoo1Ku8WFXoNDMHPsrGSTSG1Y47rzgn41SLUNakuHy"

TRANSIENT_STAKE_SEED = b"transient"

# std::mem::size_of::<StakeState>() in the stake program
STAKE_STATE_LEN = 200

AddressLike = Union[str, Pubkey]


def to_pubkey(address: AddressLike) -> Pubkey:
    """Parse a base58 address. Raises ValueError if invalid."""
    if isinstance(address, Pubkey):
        return address
    try:
        return Pubkey.from_string(address)
    except Exception as e:
        raise ValueError(f"Invalid address {address!r}: {e}") from e


def is_valid_address(address: str) -> bool:
    try:
        to_pubkey(address)
        return True
    except (ValueError, AttributeError):
        return False


def find_transient_stake_address(
    program_id: AddressLike,
    vote_account: AddressLike,
    stake_pool: AddressLike,
) -> Tuple[Pubkey, int]:
    """Transient stake account of a validator: seeds [b"transient", vote, pool]."""
    return Pubkey.find_program_address(
        [
            TRANSIENT_STAKE_SEED,
            bytes(to_pubkey(vote_account)),
            bytes(to_pubkey(stake_pool)),
        ],
        to_pubkey(program_id),
    )

