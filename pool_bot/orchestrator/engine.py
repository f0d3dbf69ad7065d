"""
Rebalance decision engine.

One call to decide() walks the gates in order: epoch window, reserve
threshold, candidate selection. The first failing gate yields a NoAction;
passing all of them yields a single Increase.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pool_bot.models.decision import (
    NO_ACTION_ALL_BUSY,
    NO_ACTION_NO_CANDIDATES,
    NO_ACTION_RESERVE,
    NO_ACTION_WINDOW,
    Increase,
    NoAction,
    RebalanceDecision,
    ValidatorCandidate,
)
from pool_bot.orchestrator.reserve import eligible_amount, reserve_floor
from pool_bot.orchestrator.selector import make_transient_busy_check, select_candidate
from pool_bot.orchestrator.window import is_within_window
from pool_bot.utils.units import MIN_STAKE_BALANCE, format_sol
from stakepool import STAKE_STATE_LEN

logger = logging.getLogger(__name__)


class RebalanceEngine:
    """
    Decides whether, to whom and how much reserve stake to move.

    Holds only startup configuration; all chain state is read fresh on
    every decide() call.
    """

    def __init__(
        self,
        reader,
        pool_address: str,
        candidates: Sequence[ValidatorCandidate],
        left_epoch_threshold: int,
        *,
        min_stake_balance: int = MIN_STAKE_BALANCE,
    ):
        """
        Initialize the engine.

        Args:
            reader: ChainStateReader (or compatible) used for every read
            pool_address: Stake pool managed by this process
            candidates: Preferred validators in priority order, validated at startup
            left_epoch_threshold: Slots remaining at or below which action is allowed
            min_stake_balance: Safety buffer kept in the reserve
        """
        self.reader = reader
        self.pool_address = pool_address
        self.candidates: List[ValidatorCandidate] = list(candidates)
        self.left_epoch_threshold = left_epoch_threshold
        self.min_stake_balance = min_stake_balance
        self._is_busy = make_transient_busy_check(reader)

    async def decide(self) -> RebalanceDecision:
        window = await self.reader.get_epoch_window(self.left_epoch_threshold)
        if not is_within_window(window):
            logger.info(
                f"{window.slots_remaining} slots left in epoch, waiting for "
                f"<= {window.left_epoch_threshold}"
            )
            return NoAction(reason=NO_ACTION_WINDOW)

        pool_state = await self.reader.get_pool_state(self.pool_address)
        reserve = await self.reader.get_reserve_account(pool_state)
        rent_exempt = await self.reader.get_minimum_balance_for_rent_exemption(STAKE_STATE_LEN)

        amount = eligible_amount(reserve.balance, rent_exempt, self.min_stake_balance)
        if amount is None:
            floor = reserve_floor(rent_exempt, self.min_stake_balance)
            logger.info(
                f"Reserve {reserve.address} holds {reserve.balance} lamports "
                f"({format_sol(reserve.balance)} SOL), floor is {floor}"
            )
            return NoAction(reason=NO_ACTION_RESERVE)

        if not self.candidates:
            logger.warning(
                f"{amount} lamports eligible to move but no preferred validators configured"
            )
            return NoAction(reason=NO_ACTION_NO_CANDIDATES)

        target = await select_candidate(self.candidates, self._is_busy)
        if target is None:
            logger.warning(
                f"{amount} lamports stranded in reserve: all {len(self.candidates)} "
                f"preferred validators have pending transient stake"
            )
            return NoAction(reason=NO_ACTION_ALL_BUSY)

        logger.info(
            f"Rebalance: {amount} lamports ({format_sol(amount)} SOL) -> "
            f"{target.vote_account_address}"
        )
        return Increase(target=target, amount=amount)

    async def execute(
        self,
        decision: RebalanceDecision,
        dispatcher,
        dry_run: bool,
    ) -> Optional[Dict[str, Any]]:
        """Hand an Increase to the dispatcher exactly once; NoAction dispatches nothing."""
        if not isinstance(decision, Increase):
            return None
        return await dispatcher.increase_validator_stake(
            self.pool_address,
            decision.target.vote_account_address,
            decision.amount,
            dry_run,
        )
