"""
Startup validation.

Runs every precondition the loop depends on and reports the first failing
check instead of exiting, so each failure can be exercised on its own. The
entry point turns a failed result into a non-zero exit.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from pool_bot.config import (
    BotConf,
    ConfigInvalidError,
    ConfigUnreadableError,
    load_bot_config,
)
from pool_bot.models.decision import PoolState, ValidatorCandidate
from pool_bot.services.chain import ChainStateReader, RpcError
from pool_bot.utils.solana_config import (
    SolanaCliConfig,
    SolanaConfigError,
    load_keypair,
    load_solana_config,
)
from pool_bot.utils.units import MIN_SIGNER_BALANCE, format_sol
from stakepool import LayoutError, is_valid_address

logger = logging.getLogger(__name__)


class StartupCheck(str, Enum):
    CONFIG_UNREADABLE = "config_unreadable"
    CONFIG_INVALID = "config_invalid"
    KEYPAIR_INVALID = "keypair_invalid"
    LEDGER_UNREACHABLE = "ledger_unreachable"
    INSUFFICIENT_FEE_BALANCE = "insufficient_fee_balance"
    POOL_NOT_FOUND = "pool_not_found"
    VALIDATOR_NOT_IN_POOL = "validator_not_in_pool"


class BotContext(BaseModel):
    """Everything the loop needs, assembled once at startup."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    conf: BotConf
    solana_config: SolanaCliConfig
    signer: str
    signer_balance: int
    reader: Any
    pool_state: PoolState
    candidates: List[ValidatorCandidate]


class StartupResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    failed_check: Optional[StartupCheck] = None
    message: str = ""
    context: Optional[BotContext] = None

    @classmethod
    def failure(cls, check: StartupCheck, message: str) -> "StartupResult":
        return cls(ok=False, failed_check=check, message=message)


async def prepare(
    conf_path: str,
    *,
    reader_factory: Callable[[str], Any] = ChainStateReader,
    force_dry_run: bool = False,
) -> StartupResult:
    """
    Load config, connect, and validate the pool and preferred validators.

    Args:
        conf_path: Bot config JSON path
        reader_factory: Builds the chain reader from an RPC URL
        force_dry_run: Override dry_run from the command line

    Returns:
        StartupResult; context is set only when ok is True. On failure any
        reader created here has already been closed.
    """
    try:
        conf = load_bot_config(conf_path)
    except ConfigUnreadableError as e:
        return StartupResult.failure(StartupCheck.CONFIG_UNREADABLE, str(e))
    except ConfigInvalidError as e:
        return StartupResult.failure(StartupCheck.CONFIG_INVALID, str(e))

    if force_dry_run:
        conf = conf.model_copy(update={"dry_run": True})
    logger.info(f"conf: {conf.model_dump()}")

    try:
        solana_config = load_solana_config(conf.solana_config_path)
        keypair = load_keypair(solana_config.keypair_path)
    except SolanaConfigError as e:
        return StartupResult.failure(StartupCheck.KEYPAIR_INVALID, str(e))
    signer = str(keypair.pubkey())
    logger.info(f"solana cli conf: {solana_config.model_dump()}")
    logger.info(f"address for your keypair: {signer}")

    reader = reader_factory(solana_config.json_rpc_url)
    ok = False
    try:
        result = await _check_chain(conf, solana_config, signer, reader)
        ok = result.ok
    finally:
        if not ok:
            await reader.aclose()
    return result


async def _check_chain(
    conf: BotConf,
    solana_config: SolanaCliConfig,
    signer: str,
    reader,
) -> StartupResult:
    try:
        signer_balance = await reader.get_balance(signer)
    except (httpx.HTTPError, RpcError) as e:
        return StartupResult.failure(
            StartupCheck.LEDGER_UNREACHABLE,
            f"Unable to query {solana_config.json_rpc_url}: {e}",
        )

    if signer_balance < MIN_SIGNER_BALANCE:
        return StartupResult.failure(
            StartupCheck.INSUFFICIENT_FEE_BALANCE,
            f"Signer {signer} holds {format_sol(signer_balance)} SOL, needs at least "
            f"{format_sol(MIN_SIGNER_BALANCE)} SOL to pay update fees",
        )
    logger.info(f"balance in SOL: {format_sol(signer_balance)}")

    pool_address = conf.stake_pool_address
    if not is_valid_address(pool_address):
        return StartupResult.failure(
            StartupCheck.POOL_NOT_FOUND, f"Invalid stake pool address {pool_address}"
        )
    try:
        pool_state = await reader.get_pool_state(pool_address)
        validator_list = await reader.get_validator_list(pool_state.validator_list_address)
    except (RpcError, LayoutError) as e:
        return StartupResult.failure(
            StartupCheck.POOL_NOT_FOUND, f"Unable to load stake pool {pool_address}: {e}"
        )
    except httpx.HTTPError as e:
        return StartupResult.failure(
            StartupCheck.LEDGER_UNREACHABLE,
            f"Unable to query {solana_config.json_rpc_url}: {e}",
        )

    candidates = []
    for vote_account in conf.preferred_vote_accounts:
        if not is_valid_address(vote_account):
            return StartupResult.failure(
                StartupCheck.VALIDATOR_NOT_IN_POOL, f"Invalid vote account {vote_account!r}"
            )
        candidate = ValidatorCandidate(
            vote_account_address=vote_account,
            transient_stake_address=reader.transient_stake_address(pool_address, vote_account),
            in_pool=validator_list.contains(vote_account),
        )
        if not candidate.in_pool:
            return StartupResult.failure(
                StartupCheck.VALIDATOR_NOT_IN_POOL,
                f"Vote account {vote_account} is not in the validator list of pool {pool_address}",
            )
        candidates.append(candidate)

    if not candidates:
        logger.warning("No preferred vote accounts configured, rebalancing will never act")

    return StartupResult(
        ok=True,
        context=BotContext(
            conf=conf,
            solana_config=solana_config,
            signer=signer,
            signer_balance=signer_balance,
            reader=reader,
            pool_state=pool_state,
            candidates=candidates,
        ),
    )
