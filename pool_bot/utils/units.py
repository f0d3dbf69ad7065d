"""Native unit conversions and process-wide balance constants."""
from decimal import Decimal

LAMPORTS_PER_SOL = 1_000_000_000

# Safety buffer left in the reserve on top of the rent-exempt minimums.
# Identical for every pool handled by a process.
MIN_STAKE_BALANCE = LAMPORTS_PER_SOL

# Signer must be able to pay fees for future update/increase transactions
MIN_SIGNER_BALANCE = LAMPORTS_PER_SOL // 1000


def lamports_to_sol(lamports: int) -> Decimal:
    """Exact conversion; never goes through float."""
    return Decimal(lamports).scaleb(-9)


def format_sol(lamports: int) -> str:
    """Render lamports as a plain SOL amount, e.g. 3996000000 -> '3.996'."""
    text = format(lamports_to_sol(lamports), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
