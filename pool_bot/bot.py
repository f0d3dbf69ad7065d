"""
Main entry point for the stake pool rebalance bot.

Each loop iteration:
- Updates the stake pool (always)
- Moves idle reserve stake to the first free preferred validator near the
  end of an epoch (unless disabled)
"""
import argparse
import asyncio
import json
import logging
import os
import sys

# Ensure project root is in path when run as: python pool_bot/bot.py
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pool_bot.config import example_config
from pool_bot.orchestrator.engine import RebalanceEngine
from pool_bot.orchestrator.loop import ControlLoop
from pool_bot.services.dispatcher import ActionDispatcher
from pool_bot.startup import prepare
from pool_bot.utils.env import LOG_FILE, LOG_LEVEL, STAKE_POOL_CONF

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(LOG_FILE), logging.StreamHandler(sys.stdout)],
    )


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SPL stake pool rebalance bot")
    parser.add_argument(
        "--config",
        type=str,
        default=STAKE_POOL_CONF,
        help=f"Bot config JSON (default: STAKE_POOL_CONF env or {STAKE_POOL_CONF})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Force dry-run regardless of the config file",
    )
    parser.add_argument(
        "--print-example-config",
        action="store_true",
        help="Print an example config file and exit",
    )
    return parser.parse_args(argv)


async def run_bot(conf_path: str, force_dry_run: bool = False) -> int:
    """
    Validate startup preconditions, then run the control loop forever.

    Returns:
        Process exit code (only returns on startup failure or shutdown).
    """
    logger.info("=" * 80)
    logger.info("STARTING STAKE POOL BOT")
    logger.info("=" * 80)
    logger.info(f"conf_path: {conf_path}")

    result = await prepare(conf_path, force_dry_run=force_dry_run)
    if not result.ok:
        logger.error(f"Startup check failed [{result.failed_check.value}]: {result.message}")
        return 1

    ctx = result.context
    conf = ctx.conf
    logger.info(f"Pool: {conf.stake_pool_address}")
    logger.info(f"Reserve: {ctx.pool_state.reserve_stake_address}")
    logger.info(f"Preferred validators: {[c.vote_account_address for c in ctx.candidates]}")

    engine = RebalanceEngine(
        ctx.reader,
        conf.stake_pool_address,
        ctx.candidates,
        conf.rebalance_left_epoch,
    )
    dispatcher = ActionDispatcher(conf.solana_config_path or None)
    loop = ControlLoop(conf, engine, dispatcher)

    logger.info("=" * 80)
    logger.info("start loop")
    logger.info("=" * 80)
    try:
        await loop.run_forever()
    finally:
        await ctx.reader.aclose()
        logger.info("RPC client closed")
    return 0


def main():
    """Bot entry point."""
    args = get_args()
    if args.print_example_config:
        print(json.dumps(example_config(), indent=2))
        return

    setup_logging()
    try:
        code = asyncio.run(run_bot(args.config, force_dry_run=args.dry_run))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Shutting down bot...")
        code = 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
