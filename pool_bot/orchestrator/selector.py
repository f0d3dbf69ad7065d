"""
Candidate selection.

Preferred validators are scanned in configured order and the first one
without an in-flight transfer wins. A validator is busy while its transient
stake account holds lamports on chain; that account is the only record of a
pending increase, so the guard holds across restarts.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Sequence

from pool_bot.models.decision import ValidatorCandidate

logger = logging.getLogger(__name__)

BusyCheck = Callable[[ValidatorCandidate], Awaitable[bool]]


async def select_candidate(
    candidates: Sequence[ValidatorCandidate],
    is_busy: BusyCheck,
) -> Optional[ValidatorCandidate]:
    """
    Return the highest-priority candidate that is not busy.

    Candidates after the first free one are never checked. Candidates not
    in the pool are skipped without a busy check.

    Args:
        candidates: Preferred validators in priority order
        is_busy: Async check, True if the candidate has a pending transfer

    Returns:
        The selected candidate, or None if the list is empty or all are busy.
    """
    for candidate in candidates:
        if not candidate.in_pool:
            logger.warning(f"Validator {candidate.vote_account_address} not in pool, skipped")
            continue
        if await is_busy(candidate):
            logger.info(
                f"Validator {candidate.vote_account_address} busy: transient stake "
                f"account {candidate.transient_stake_address} still holds lamports"
            )
            continue
        return candidate
    return None


def make_transient_busy_check(reader) -> BusyCheck:
    """Busy check backed by a live balance read of the transient stake account."""

    async def _is_busy(candidate: ValidatorCandidate) -> bool:
        return await reader.is_transient_busy(candidate.transient_stake_address)

    return _is_busy
