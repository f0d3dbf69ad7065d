"""
Control loop: sleep, refresh the pool, maybe rebalance.

Each iteration runs to completion before the next sleep. Errors never
escape an iteration; they are logged with the failing step and recorded in
the IterationReport.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pool_bot.config import BotConf
from pool_bot.models.decision import Increase, IterationReport
from pool_bot.orchestrator.engine import RebalanceEngine

logger = logging.getLogger(__name__)


class ControlLoop:
    """Drives the refresh and rebalance steps for one pool."""

    def __init__(
        self,
        conf: BotConf,
        engine: RebalanceEngine,
        dispatcher,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.conf = conf
        self.engine = engine
        self.dispatcher = dispatcher
        self._sleep = sleep
        self.iteration = 0

    async def run_iteration(self) -> IterationReport:
        self.iteration += 1
        report = IterationReport(iteration=self.iteration)
        pool = self.conf.stake_pool_address

        # Refresh is always attempted and never blocks the rebalance step
        try:
            report.refresh = await self.dispatcher.refresh_pool(
                pool,
                self.conf.dry_run,
                force=self.conf.update_force,
                no_merge=self.conf.update_no_merge,
            )
            if not report.refresh.get("success"):
                report.errors["refresh"] = report.refresh.get("error") or "update failed"
        except Exception as e:
            logger.error(f"[ITER={self.iteration}] refresh failed: {e}", exc_info=True)
            report.errors["refresh"] = str(e)

        if self.conf.disable_rebalance:
            report.rebalance_skipped = True
            return report

        try:
            report.decision = await self.engine.decide()
        except Exception as e:
            logger.error(f"[ITER={self.iteration}] rebalance decision failed: {e}", exc_info=True)
            report.errors["decide"] = str(e)
            return report

        if not isinstance(report.decision, Increase):
            logger.info(f"[ITER={self.iteration}] no action: {report.decision.reason}")
            return report

        try:
            report.dispatch = await self.engine.execute(
                report.decision, self.dispatcher, self.conf.dry_run
            )
            if report.dispatch is not None and not report.dispatch.get("success"):
                report.errors["dispatch"] = report.dispatch.get("error") or "increase failed"
        except Exception as e:
            logger.error(f"[ITER={self.iteration}] increase dispatch failed: {e}", exc_info=True)
            report.errors["dispatch"] = str(e)
        return report

    async def run_forever(self, max_iterations: Optional[int] = None) -> None:
        """Loop until cancelled, or for max_iterations iterations."""
        logger.info(
            f"Starting loop: pool={self.conf.stake_pool_address} "
            f"interval={self.conf.loop_second}s dry_run={self.conf.dry_run} "
            f"disable_rebalance={self.conf.disable_rebalance}"
        )
        while max_iterations is None or self.iteration < max_iterations:
            await self._sleep(self.conf.loop_second)
            report = await self.run_iteration()
            if report.errors:
                logger.warning(f"[ITER={report.iteration}] finished with errors: {report.errors}")
