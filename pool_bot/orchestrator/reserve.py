"""
Reserve threshold arithmetic.

The reserve keeps one rent-exempt minimum for itself, a second one as
headroom for the stake account being funded, and a fixed safety buffer.
Everything above that floor may move to a validator.
"""
from typing import Optional


def reserve_floor(rent_exempt_minimum: int, min_stake_balance: int) -> int:
    """Lamports that must stay in the reserve."""
    return 2 * rent_exempt_minimum + min_stake_balance


def eligible_amount(
    reserve_balance: int,
    rent_exempt_minimum: int,
    min_stake_balance: int,
) -> Optional[int]:
    """
    Lamports of the reserve that may be moved.

    Args:
        reserve_balance: Current reserve stake account balance
        rent_exempt_minimum: Rent-exempt minimum for a stake account
        min_stake_balance: Process-wide safety buffer

    Returns:
        A positive amount, or None if the reserve is at or below the floor.
    """
    floor = reserve_floor(rent_exempt_minimum, min_stake_balance)
    if reserve_balance <= floor:
        return None
    return reserve_balance - floor
