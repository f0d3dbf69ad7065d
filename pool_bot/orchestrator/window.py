"""Epoch window gate: rebalance only close to the end of an epoch."""
from pool_bot.models.decision import EpochWindow


def is_within_window(window: EpochWindow) -> bool:
    """Return True once no more than left_epoch_threshold slots remain."""
    return window.slots_remaining <= window.left_epoch_threshold
