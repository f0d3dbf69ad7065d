"""
Submit stake pool actions through the spl-stake-pool CLI.

The CLI builds, signs and sends the transactions using the Solana CLI
config, so the bot never handles transaction encoding itself.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from pool_bot.utils.env import DISPATCH_TIMEOUT_SECONDS, SPL_STAKE_POOL_BIN
from pool_bot.utils.units import format_sol

logger = logging.getLogger(__name__)

# CLI output kept in results and logs
MAX_OUTPUT_CHARS = 2000


class ActionDispatcher:
    """Single best-effort submission per call, dry-run or real."""

    def __init__(
        self,
        solana_config_path: Optional[str] = None,
        *,
        binary: str = SPL_STAKE_POOL_BIN,
        timeout: float = DISPATCH_TIMEOUT_SECONDS,
    ):
        self.solana_config_path = solana_config_path
        self.binary = binary
        self.timeout = timeout

    def _base_args(self, dry_run: bool) -> List[str]:
        args = [self.binary]
        if self.solana_config_path:
            args += ["--config", self.solana_config_path]
        if dry_run:
            args.append("--dry-run")
        return args

    def update_command(
        self,
        pool_address: str,
        dry_run: bool,
        *,
        force: bool = False,
        no_merge: bool = False,
    ) -> List[str]:
        args = self._base_args(dry_run) + ["update", pool_address]
        if force:
            args.append("--force")
        if no_merge:
            args.append("--no-merge")
        return args

    def increase_command(
        self,
        pool_address: str,
        vote_account_address: str,
        lamports: int,
        dry_run: bool,
    ) -> List[str]:
        return self._base_args(dry_run) + [
            "increase-validator-stake",
            pool_address,
            vote_account_address,
            format_sol(lamports),
        ]

    async def refresh_pool(
        self,
        pool_address: str,
        dry_run: bool,
        *,
        force: bool = False,
        no_merge: bool = False,
    ) -> Dict[str, Any]:
        """Update validator list balances and pool totals for the current epoch."""
        logger.info(f"Updating stake pool {pool_address} (dry_run={dry_run})")
        return await self._run(
            self.update_command(pool_address, dry_run, force=force, no_merge=no_merge)
        )

    async def increase_validator_stake(
        self,
        pool_address: str,
        vote_account_address: str,
        lamports: int,
        dry_run: bool,
    ) -> Dict[str, Any]:
        """Move lamports from the pool reserve to a validator's transient stake account."""
        if lamports <= 0:
            raise ValueError(f"Increase amount must be positive, got {lamports}")
        logger.info(
            f"Increasing stake of {vote_account_address} in pool {pool_address} by "
            f"{lamports} lamports ({format_sol(lamports)} SOL, dry_run={dry_run})"
        )
        return await self._run(
            self.increase_command(pool_address, vote_account_address, lamports, dry_run)
        )

    async def _run(self, args: List[str]) -> Dict[str, Any]:
        """
        Run one CLI invocation.

        Returns:
            Dict with success, command, stdout, error.
        """
        command = " ".join(args)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            err_msg = f"Unable to start {args[0]}: {e}"
            logger.error(err_msg)
            return {"success": False, "command": command, "stdout": "", "error": err_msg}

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            err_msg = f"Timed out after {self.timeout:.0f}s"
            logger.error(f"{command}: {err_msg}")
            return {"success": False, "command": command, "stdout": "", "error": err_msg}

        out = stdout.decode(errors="replace")[:MAX_OUTPUT_CHARS]
        if process.returncode == 0:
            logger.info(f"{command} succeeded")
            logger.debug(f"Output: {out}")
            return {"success": True, "command": command, "stdout": out, "error": None}

        err = stderr.decode(errors="replace").strip()[:MAX_OUTPUT_CHARS]
        err_msg = f"Exited with status {process.returncode}: {err or out.strip()}"
        logger.error(f"{command} failed. {err_msg}")
        return {"success": False, "command": command, "stdout": out, "error": err_msg}
